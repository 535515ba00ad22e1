import abc
import contextvars
import time
from typing import TYPE_CHECKING  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

from .ext.sql import ExecuteKind  # noqa:F401
from .internal.logger import get_logger


if TYPE_CHECKING:  # pragma: no cover
    from .command import InstrumentedCommand  # noqa:F401
    from .reader import InstrumentedDataReader  # noqa:F401


log = get_logger(__name__)


class InstrumentationHandler(metaclass=abc.ABCMeta):
    """Receives the callbacks fired around every command execution.

    For a single execution the calls always form a matched triple:
    exactly one :meth:`execute_start`, followed by exactly one
    :meth:`execute_finish`; :meth:`on_error` is called at most once and
    always before that :meth:`execute_finish`.

    Callbacks are plain synchronous calls, also for asynchronous executions.
    A slow callback delays the execution it observes.
    """

    @abc.abstractmethod
    def execute_start(self, command, kind):
        # type: (InstrumentedCommand, ExecuteKind) -> None
        """Called before the native command is executed."""
        pass

    @abc.abstractmethod
    def execute_finish(self, command, kind, reader):
        # type: (InstrumentedCommand, ExecuteKind, Optional[InstrumentedDataReader]) -> None
        """Called once the native execution is over, whether it succeeded or not.

        ``reader`` is the produced reader for :attr:`ExecuteKind.READER`
        executions that succeeded, ``None`` otherwise.
        """
        pass

    @abc.abstractmethod
    def on_error(self, command, kind, error):
        # type: (InstrumentedCommand, ExecuteKind, BaseException) -> None
        """Called with the error raised by the native execution, before it is re-raised."""
        pass


class LoggingInstrumentationHandler(InstrumentationHandler):
    """Handler writing every execution to a logger.

    Starts and finishes are logged at ``DEBUG`` along with the elapsed time,
    errors at ``WARNING``.

    Start times live in a context variable: every asyncio task sees its own
    copy, so overlapping asynchronous executions of one command are timed
    independently.
    """

    def __init__(self, logger=None, clock=time.monotonic):
        self._log = logger or log
        self._clock = clock
        self._started = contextvars.ContextVar(
            "instrumented_db_started_%x" % id(self), default=None
        )  # type: contextvars.ContextVar[Optional[Dict[int, float]]]

    def execute_start(self, command, kind):
        started = dict(self._started.get() or {})
        started[id(command)] = self._clock()
        self._started.set(started)
        self._log.debug("%s started: %s", kind.value, command.command_text)

    def execute_finish(self, command, kind, reader):
        started = dict(self._started.get() or {})
        start = started.pop(id(command), None)
        self._started.set(started)
        elapsed = self._clock() - start if start is not None else 0.0
        self._log.debug("%s finished in %.6fs: %s", kind.value, elapsed, command.command_text)

    def on_error(self, command, kind, error):
        self._log.warning("%s failed (%s: %s): %s", kind.value, type(error).__name__, error, command.command_text)

import wrapt

from ._hooks import Hooks
from .command import InstrumentedCommand
from .errors import MissingNativeObjectError
from .ext.sql import CommandBehavior
from .ext.sql import IsolationLevel
from .ext.sql import STATE_CHANGE
from .internal.logger import get_logger
from .settings import config
from .transaction import InstrumentedTransaction


log = get_logger(__name__)


class InstrumentedConnection(wrapt.ObjectProxy):
    """InstrumentedConnection wraps a native connection with instrumentation.

    Commands created from it report their executions to ``handler``. Every
    other attribute (``connection_string``, ``state``, ``open()``,
    ``close()``, ...) is read from the native connection on each access.

    State changes of the native connection are re-emitted on the proxy's own
    :attr:`hooks` with the proxy as sender::

        @connection.hooks.on(STATE_CHANGE)
        def on_state_change(sender, event):
            pass
    """

    def __init__(self, connection, handler=None):
        if connection is None:
            raise MissingNativeObjectError("connection")
        super(InstrumentedConnection, self).__init__(connection)
        if handler is not None and not config.enabled:
            log.debug("instrumentation is disabled, %r will not report executions", connection)
            handler = None
        # wrapt requires prefix of `_self` for attributes that are only in the
        # proxy (since some of our source objects will use `__slots__`)
        self._self_handler = handler
        self._self_hooks = Hooks()
        self._self_disposed = False
        self._self_state_change_listener = self._on_state_change
        connection.hooks.register(STATE_CHANGE, self._self_state_change_listener)

    @property
    def wrapped_connection(self):
        return self.__wrapped__

    @property
    def instrumentation_handler(self):
        """The attached handler, ``None`` when not instrumenting or once disposed."""
        return self._self_handler

    @property
    def hooks(self):
        return self._self_hooks

    def _on_state_change(self, sender, event):
        self._self_hooks.emit(STATE_CHANGE, self, event)

    def _create_command(self, command, handler):
        return InstrumentedCommand(command, self, handler)

    def create_command(self):
        return self._create_command(self.__wrapped__.create_command(), self._self_handler)

    def begin_transaction(self, isolation_level=IsolationLevel.UNSPECIFIED):
        return InstrumentedTransaction(self.__wrapped__.begin_transaction(isolation_level), self)

    def _command_for(self, sql, parameters):
        command = self.create_command()
        command.command_text = sql
        command.parameters.extend(parameters)
        return command

    def execute(self, sql, *parameters):
        """Run ``sql`` as a non-query and return the number of affected rows."""
        with self._command_for(sql, parameters) as command:
            return command.execute_non_query()

    def execute_scalar(self, sql, *parameters):
        """Run ``sql`` and return the first column of the first row."""
        with self._command_for(sql, parameters) as command:
            return command.execute_scalar()

    def execute_reader(self, sql, *parameters, behavior=CommandBehavior.DEFAULT):
        """Run ``sql`` and return an instrumented reader over its rows."""
        with self._command_for(sql, parameters) as command:
            return command.execute_reader(behavior)

    def dispose(self):
        if not self._self_disposed:
            # stop relaying before the native connection goes away
            self.__wrapped__.hooks.deregister(STATE_CHANGE, self._self_state_change_listener)
            self.__wrapped__.dispose()
            self._self_disposed = True
            log.debug("disposed connection %r", self.__wrapped__)
        self._self_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

"""
instrumented_db sits between application code and a database driver and
reports every command execution to an instrumentation handler.

Wrap a native connection and give it a handler::

    from instrumented_db import InstrumentedConnection
    from instrumented_db.contrib.sqlite3 import SQLiteConnection

    native = SQLiteConnection(":memory:")
    native.open()

    connection = InstrumentedConnection(native, handler=MyHandler())
    connection.execute("CREATE TABLE t (id INTEGER)")

    command = connection.create_command()
    command.command_text = "SELECT * FROM t"
    with command.execute_reader() as reader:
        for row in reader:
            print(row)

``MyHandler`` implements :class:`instrumented_db.InstrumentationHandler`.
Without a handler every proxy is a pure pass-through.


Global Configuration
~~~~~~~~~~~~~~~~~~~~

``INSTRUMENTED_DB_ENABLED``
   When ``false``, connections and provider factories ignore the handler they
   are given. Default: ``true``.

``INSTRUMENTED_DB_DEBUG``
   Set the ``instrumented_db`` logger to ``DEBUG``. Default: ``false``.

``INSTRUMENTED_DB_LOGGING_RATE``
   Seconds between two log records from the same call site. ``0`` disables
   rate limiting. Default: ``60``.
"""
from ._logger import configure_logger
from .settings import config  # noqa: E402


# configure the logger before other modules log
configure_logger()  # noqa: E402

from .command import InstrumentedCommand  # noqa: E402
from .connection import InstrumentedConnection  # noqa: E402
from .errors import InstrumentationError  # noqa: E402
from .errors import MissingNativeObjectError  # noqa: E402
from .errors import UnsupportedOperationError  # noqa: E402
from .ext.sql import STATE_CHANGE  # noqa: E402
from .ext.sql import CommandBehavior  # noqa: E402
from .ext.sql import CommandType  # noqa: E402
from .ext.sql import ConnectionState  # noqa: E402
from .ext.sql import ExecuteKind  # noqa: E402
from .ext.sql import IsolationLevel  # noqa: E402
from .ext.sql import StateChangeEvent  # noqa: E402
from .handler import InstrumentationHandler  # noqa: E402
from .handler import LoggingInstrumentationHandler  # noqa: E402
from .provider_factory import InstrumentedProviderFactory  # noqa: E402
from .reader import InstrumentedDataReader  # noqa: E402
from .transaction import InstrumentedTransaction  # noqa: E402
from .version import __version__  # noqa: E402


__all__ = [
    "__version__",
    "config",
    "CommandBehavior",
    "CommandType",
    "ConnectionState",
    "ExecuteKind",
    "InstrumentationError",
    "InstrumentationHandler",
    "InstrumentedCommand",
    "InstrumentedConnection",
    "InstrumentedDataReader",
    "InstrumentedProviderFactory",
    "InstrumentedTransaction",
    "IsolationLevel",
    "LoggingInstrumentationHandler",
    "MissingNativeObjectError",
    "STATE_CHANGE",
    "StateChangeEvent",
    "UnsupportedOperationError",
]

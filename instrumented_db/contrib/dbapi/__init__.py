"""
Native objects for any PEP 249 (DB-API 2.0) driver.

Python drivers expose ``connect()``, connections and cursors. The classes
below present them as the connection, command, reader, transaction and
provider factory capability sets of :mod:`instrumented_db.native`, so they
can be wrapped by the instrumented proxies::

    import sqlite3

    from instrumented_db import InstrumentedConnection
    from instrumented_db.contrib.dbapi import DbApiConnection

    native = DbApiConnection(sqlite3, ":memory:")
    native.open()
    connection = InstrumentedConnection(native, handler)

Asynchronous methods run the driver synchronously inside the coroutine.
"""
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

from ..._hooks import Hooks
from ...errors import UnsupportedOperationError
from ...ext.sql import STATE_CHANGE
from ...ext.sql import CommandBehavior
from ...ext.sql import CommandType
from ...ext.sql import ConnectionState
from ...ext.sql import IsolationLevel
from ...ext.sql import StateChangeEvent
from ...ext.sql import normalize_vendor
from ...internal.logger import get_logger
from ...native import DbCommand
from ...native import DbConnection
from ...native import DbDataReader
from ...native import DbParameter
from ...native import DbProviderFactory
from ...native import DbTransaction


log = get_logger(__name__)

_NOT_FETCHED = object()


class DbApiDataReader(DbDataReader):
    """Reader over a DB-API cursor. Closing the reader closes the cursor."""

    def __init__(self, cursor, behavior=CommandBehavior.DEFAULT, connection=None):
        self._cursor = cursor
        self._behavior = behavior
        self._connection = connection
        self._row = None
        self._lookahead = _NOT_FETCHED
        self._rows_read = 0
        self._closed = False
        self._records_affected = cursor.rowcount

    @property
    def cursor(self):
        return self._cursor

    @property
    def field_count(self):
        return len(self._cursor.description or ())

    @property
    def has_rows(self):
        if self._row is not None:
            return True
        if self._lookahead is _NOT_FETCHED:
            self._lookahead = self._fetch()
        return self._lookahead is not None

    @property
    def is_closed(self):
        return self._closed

    @property
    def records_affected(self):
        return self._records_affected

    def _fetch(self):
        if self._closed or self._cursor.description is None:
            return None
        if self._behavior & CommandBehavior.SINGLE_ROW and self._rows_read:
            return None
        return self._cursor.fetchone()

    def read(self):
        if self._lookahead is not _NOT_FETCHED:
            row, self._lookahead = self._lookahead, _NOT_FETCHED
        else:
            row = self._fetch()
        self._row = row
        if row is not None:
            self._rows_read += 1
        return row is not None

    def next_result(self):
        self._row = None
        self._lookahead = _NOT_FETCHED
        self._rows_read = 0
        if self._behavior & CommandBehavior.SINGLE_RESULT:
            return False
        nextset = getattr(self._cursor, "nextset", None)
        if nextset is None:
            return False
        return bool(nextset())

    def get_value(self, ordinal):
        if self._row is None:
            raise IndexError("no current row, call read() first")
        return self._row[ordinal]

    def get_name(self, ordinal):
        return self._cursor.description[ordinal][0]

    def get_schema_table(self):
        return [
            {
                "column_name": column[0],
                "column_ordinal": ordinal,
                "type_code": column[1],
                "display_size": column[2],
                "internal_size": column[3],
                "precision": column[4],
                "scale": column[5],
                "null_ok": column[6],
            }
            for ordinal, column in enumerate(self._cursor.description or ())
        ]

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._row = None
        self._cursor.close()
        if self._behavior & CommandBehavior.CLOSE_CONNECTION and self._connection is not None:
            self._connection.close()


class DbApiTransaction(DbTransaction):
    """Transaction over the DB-API connection's own ``commit()``/``rollback()``.

    The connection has already started it, with the statement its
    ``begin_statements`` maps the isolation level to, when the transaction
    object is created. Drivers without such a statement begin implicitly on
    the first statement and only ``UNSPECIFIED`` is accepted.
    """

    def __init__(self, connection, isolation_level=IsolationLevel.UNSPECIFIED):
        self._connection = connection
        self._isolation_level = isolation_level
        self._completed = False

    @property
    def connection(self):
        return self._connection

    @property
    def isolation_level(self):
        return self._isolation_level

    @property
    def is_completed(self):
        return self._completed

    def _complete(self, operation):
        if self._completed:
            raise self._connection.module.ProgrammingError("This transaction has completed; it is no longer usable.")
        try:
            getattr(self._connection.raw_connection, operation)()
        finally:
            self._completed = True
            self._connection._end_transaction(self)

    def commit(self):
        self._complete("commit")

    def rollback(self):
        self._complete("rollback")

    def dispose(self):
        if not self._completed and self._connection.state & ConnectionState.OPEN:
            self.rollback()


class DbApiCommand(DbCommand):
    """Command executing its text through a fresh cursor of the connection.

    ``command_timeout`` is informational: PEP 249 has no per-statement
    timeout, so it is kept and cloned but never applied to the driver.
    Use ``cancel()`` to interrupt a running statement.
    """

    def __init__(self, connection=None, command_text="", transaction=None):
        self.connection = connection
        self.transaction = transaction
        self.command_text = command_text
        self.command_timeout = 30
        self.command_type = CommandType.TEXT
        self.parameters = []

    def _bound_parameters(self):
        parameters = self.parameters
        if parameters and all(isinstance(p, DbParameter) and p.name for p in parameters):
            return {p.name.lstrip(":@$"): p.value for p in parameters}
        return tuple(p.value if isinstance(p, DbParameter) else p for p in parameters)

    def _execute(self):
        if self.connection is None:
            raise RuntimeError("%s.connection has not been initialized" % (type(self).__name__,))
        cursor = self.connection.raw_connection.cursor()
        try:
            if self.command_type is CommandType.STORED_PROCEDURE:
                cursor.callproc(self.command_text, self._bound_parameters())
            else:
                cursor.execute(self.command_text, self._bound_parameters())
        except BaseException:
            cursor.close()
            raise
        return cursor

    def execute_reader(self, behavior=CommandBehavior.DEFAULT):
        return DbApiDataReader(self._execute(), behavior, self.connection)

    def execute_scalar(self):
        cursor = self._execute()
        try:
            row = cursor.fetchone() if cursor.description is not None else None
            return row[0] if row else None
        finally:
            cursor.close()

    def execute_non_query(self):
        cursor = self._execute()
        try:
            return cursor.rowcount
        finally:
            cursor.close()

    def cancel(self):
        if self.connection is None or not self.connection.state & ConnectionState.OPEN:
            return
        interrupt = getattr(self.connection.raw_connection, "interrupt", None)
        if interrupt is not None:
            interrupt()

    def create_parameter(self):
        return DbParameter()

    def clone(self):
        clone = type(self)(self.connection, self.command_text, self.transaction)
        clone.command_timeout = self.command_timeout
        clone.command_type = self.command_type
        clone.parameters = list(self.parameters)
        return clone

    def dispose(self):
        self.connection = None
        self.transaction = None


class DbApiConnection(DbConnection):
    """Connection opened with ``module.connect(connection_string, **connect_kwargs)``."""

    command_class = DbApiCommand
    transaction_class = DbApiTransaction

    # isolation level -> statement starting a transaction at that level. None
    # leaves it to the driver, which begins implicitly on the first statement.
    begin_statements = {IsolationLevel.UNSPECIFIED: None}  # type: Dict[IsolationLevel, Optional[str]]

    def __init__(self, module, connection_string="", **connect_kwargs):
        self.module = module
        self.connection_string = connection_string
        self._connect_kwargs = connect_kwargs
        self._hooks = Hooks()
        self._raw = None
        self._state = ConnectionState.CLOSED
        self._transaction = None

    def __repr__(self):
        return "<%s %s %r %s>" % (type(self).__name__, self.vendor, self.connection_string, self._state.name)

    @property
    def hooks(self):
        return self._hooks

    @property
    def state(self):
        return self._state

    @property
    def vendor(self):
        return normalize_vendor(self.module.__name__.split(".")[0])

    @property
    def raw_connection(self):
        """The DB-API connection object; only available while open."""
        if self._raw is None:
            raise self.module.InterfaceError("%s is not open" % (type(self).__name__,))
        return self._raw

    @property
    def connection_timeout(self):
        return self._connect_kwargs.get("timeout", 15)

    @property
    def database(self):
        return self._connect_kwargs.get("database", self.connection_string)

    @property
    def data_source(self):
        return self.connection_string

    @property
    def server_version(self):
        return str(getattr(self.module, "version", ""))

    def _set_state(self, state):
        original, self._state = self._state, state
        if original != state:
            self._hooks.emit(STATE_CHANGE, self, StateChangeEvent(original, state))

    def _connect(self):
        return self.module.connect(self.connection_string, **self._connect_kwargs)

    def open(self):
        if self._raw is not None:
            raise self.module.InterfaceError("%s is already open" % (type(self).__name__,))
        try:
            self._set_state(ConnectionState.CONNECTING)
            self._raw = self._connect()
        except BaseException:
            self._set_state(ConnectionState.CLOSED)
            raise
        self._set_state(ConnectionState.OPEN)
        log.debug("opened %r", self)

    def close(self):
        if self._raw is None:
            return
        raw, self._raw = self._raw, None
        self._transaction = None
        raw.close()
        self._set_state(ConnectionState.CLOSED)

    def begin_transaction(self, isolation_level=IsolationLevel.UNSPECIFIED):
        if self._raw is None:
            raise self.module.InterfaceError("%s is not open" % (type(self).__name__,))
        if self._transaction is not None:
            raise self.module.ProgrammingError("%s does not support parallel transactions" % (type(self).__name__,))
        self._begin(isolation_level)
        self._transaction = self.transaction_class(self, isolation_level)
        return self._transaction

    def _begin(self, isolation_level):
        try:
            statement = self.begin_statements[isolation_level]
        except KeyError:
            raise UnsupportedOperationError(
                "%s does not support isolation level %s" % (type(self).__name__, isolation_level.name)
            )
        if statement is None:
            return
        cursor = self._raw.cursor()
        try:
            cursor.execute(statement)
        finally:
            cursor.close()

    def _end_transaction(self, transaction):
        if self._transaction is transaction:
            self._transaction = None

    def create_command(self):
        return self.command_class(self)

    def dispose(self):
        self.close()


class DbApiProviderFactory(DbProviderFactory):
    connection_class = DbApiConnection
    command_class = DbApiCommand

    def __init__(self, module, **connect_kwargs):
        self.module = module
        self._connect_kwargs = connect_kwargs

    def create_connection(self):
        return self.connection_class(self.module, **self._connect_kwargs)

    def create_command(self):
        return self.command_class()

    def create_parameter(self):
        return DbParameter()

import wrapt

from .errors import MissingNativeObjectError
from .errors import UnsupportedOperationError
from .ext.sql import CommandBehavior
from .ext.sql import ExecuteKind
from .internal.logger import get_logger
from .reader import InstrumentedDataReader
from .transaction import InstrumentedTransaction


log = get_logger(__name__)


class _ExecutionScope(object):
    """Emits the callbacks of one execution.

    ``execute_start`` on enter. On exit ``on_error`` when the block raised,
    then ``execute_finish`` with whatever reader was recorded, on every exit
    path. The error itself keeps propagating.
    """

    __slots__ = ("command", "handler", "kind", "reader")

    def __init__(self, command, handler, kind):
        self.command = command
        self.handler = handler
        self.kind = kind
        self.reader = None

    def __enter__(self):
        self.handler.execute_start(self.command, self.kind)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                self.handler.on_error(self.command, self.kind, exc_val)
        finally:
            self.handler.execute_finish(self.command, self.kind, self.reader)


class InstrumentedCommand(wrapt.ObjectProxy):
    """InstrumentedCommand wraps a native command and reports its executions to a handler.

    The native command only ever sees native objects: connections and
    transactions assigned to the proxy are unwrapped before being handed
    down.
    """

    def __init__(self, command, connection=None, handler=None):
        if command is None:
            raise MissingNativeObjectError("command")
        super(InstrumentedCommand, self).__init__(command)
        self._self_handler = handler
        self._self_connection = None
        self._self_transaction = None
        self._self_disposed = False
        if connection is not None:
            self.connection = connection

    @property
    def wrapped_command(self):
        return self.__wrapped__

    @property
    def instrumentation_handler(self):
        return self._self_handler

    @property
    def connection(self):
        """The connection as it was assigned, proxy or native."""
        return self._self_connection

    @connection.setter
    def connection(self, value):
        self._self_connection = value
        self._unwrap_and_assign_connection(value)

    def _unwrap_and_assign_connection(self, value):
        from .connection import InstrumentedConnection

        if isinstance(value, InstrumentedConnection):
            handler = value.instrumentation_handler
            if self._self_handler is not None and handler is not self._self_handler:
                log.debug("replacing handler %r of %r with the connection handler %r", self._self_handler, self, handler)
            self._self_handler = handler
            self.__wrapped__.connection = value.wrapped_connection
        else:
            self.__wrapped__.connection = value

    @property
    def transaction(self):
        """The transaction as it was assigned, proxy or native."""
        return self._self_transaction

    @transaction.setter
    def transaction(self, value):
        self._self_transaction = value
        if isinstance(value, InstrumentedTransaction):
            self.__wrapped__.transaction = value.wrapped_transaction
        else:
            self.__wrapped__.transaction = value

    def _create_reader(self, reader, behavior, handler):
        return InstrumentedDataReader(reader, behavior, handler)

    def execute_reader(self, behavior=CommandBehavior.DEFAULT):
        handler = self._self_handler
        if handler is None:
            return self._create_reader(self.__wrapped__.execute_reader(behavior), behavior, None)

        with _ExecutionScope(self, handler, ExecuteKind.READER) as scope:
            reader = self.__wrapped__.execute_reader(behavior)
            scope.reader = self._create_reader(reader, behavior, handler)
        return scope.reader

    async def execute_reader_async(self, behavior=CommandBehavior.DEFAULT):
        handler = self._self_handler
        if handler is None:
            reader = await self.__wrapped__.execute_reader_async(behavior)
            return self._create_reader(reader, behavior, None)

        with _ExecutionScope(self, handler, ExecuteKind.READER) as scope:
            reader = await self.__wrapped__.execute_reader_async(behavior)
            scope.reader = self._create_reader(reader, behavior, handler)
        return scope.reader

    def execute_scalar(self):
        handler = self._self_handler
        if handler is None:
            return self.__wrapped__.execute_scalar()

        with _ExecutionScope(self, handler, ExecuteKind.SCALAR):
            return self.__wrapped__.execute_scalar()

    async def execute_scalar_async(self):
        handler = self._self_handler
        if handler is None:
            return await self.__wrapped__.execute_scalar_async()

        with _ExecutionScope(self, handler, ExecuteKind.SCALAR):
            return await self.__wrapped__.execute_scalar_async()

    def execute_non_query(self):
        handler = self._self_handler
        if handler is None:
            return self.__wrapped__.execute_non_query()

        with _ExecutionScope(self, handler, ExecuteKind.NON_QUERY):
            return self.__wrapped__.execute_non_query()

    async def execute_non_query_async(self):
        handler = self._self_handler
        if handler is None:
            return await self.__wrapped__.execute_non_query_async()

        with _ExecutionScope(self, handler, ExecuteKind.NON_QUERY):
            return await self.__wrapped__.execute_non_query_async()

    def clone(self):
        """Clone the native command and wrap the clone with the same connection and handler."""
        clone = getattr(self.__wrapped__, "clone", None)
        if clone is None:
            raise UnsupportedOperationError("Underlying %s is not cloneable" % (type(self.__wrapped__).__name__,))

        cloned = type(self)(clone(), self._self_connection, self._self_handler)
        if self._self_transaction is not None:
            cloned.transaction = self._self_transaction
        return cloned

    def __copy__(self):
        return self.clone()

    def dispose(self):
        if not self._self_disposed:
            self.__wrapped__.dispose()
            self._self_disposed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

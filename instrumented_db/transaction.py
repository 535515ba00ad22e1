import wrapt

from .errors import MissingNativeObjectError
from .internal.logger import get_logger


log = get_logger(__name__)


class InstrumentedTransaction(wrapt.ObjectProxy):
    """InstrumentedTransaction wraps a native transaction begun through an instrumented connection."""

    def __init__(self, transaction, connection):
        if transaction is None:
            raise MissingNativeObjectError("transaction")
        if connection is None:
            raise MissingNativeObjectError("connection")
        super(InstrumentedTransaction, self).__init__(transaction)
        self._self_connection = connection
        self._self_disposed = False

    @property
    def connection(self):
        """The owning instrumented connection, ``None`` once disposed."""
        return self._self_connection

    @property
    def wrapped_transaction(self):
        return self.__wrapped__

    @property
    def isolation_level(self):
        return self.__wrapped__.isolation_level

    def commit(self):
        self.__wrapped__.commit()

    def rollback(self):
        self.__wrapped__.rollback()

    def dispose(self):
        if not self._self_disposed:
            self.__wrapped__.dispose()
            self._self_disposed = True
            log.debug("disposed transaction %r", self.__wrapped__)
        self._self_connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

import wrapt

from .ext.sql import CommandBehavior


class InstrumentedDataReader(wrapt.ObjectProxy):
    """InstrumentedDataReader wraps the native reader produced by a command execution.

    Every read, navigation and metadata operation is forwarded to the native
    reader untouched. ``reader`` may be ``None``, in which case closing and
    disposing are no-ops.
    """

    def __init__(self, reader, behavior=CommandBehavior.DEFAULT, handler=None):
        super(InstrumentedDataReader, self).__init__(reader)
        # wrapt requires prefix of `_self` for attributes that are only in the
        # proxy (since some of our source objects will use `__slots__`)
        self._self_behavior = behavior
        self._self_handler = handler
        self._self_disposed = False

    @property
    def behavior(self):
        """The behavior flags the reader was opened with."""
        return self._self_behavior

    @property
    def instrumentation_handler(self):
        return self._self_handler

    @property
    def wrapped_reader(self):
        return self.__wrapped__

    def close(self):
        if self.__wrapped__ is not None:
            self.__wrapped__.close()

    def dispose(self):
        # release the native reader before our own cleanup
        if not self._self_disposed:
            if self.__wrapped__ is not None:
                self.__wrapped__.dispose()
            self._self_disposed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

    def __iter__(self):
        return iter(self.__wrapped__)

    def __repr__(self):
        return "<%s behavior=%r wrapping %r>" % (type(self).__name__, self._self_behavior, self.__wrapped__)

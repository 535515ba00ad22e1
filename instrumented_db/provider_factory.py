import wrapt

from .command import InstrumentedCommand
from .connection import InstrumentedConnection
from .errors import UnsupportedOperationError
from .internal.logger import get_logger
from .settings import config


log = get_logger(__name__)


class InstrumentedProviderFactory(wrapt.ObjectProxy):
    """InstrumentedProviderFactory wraps a native provider factory.

    Connections and commands it creates are instrumented when a handler is
    configured and returned as-is otherwise. Everything else it creates
    (parameters, builders, adapters, enumerators) is never wrapped.

    :attr:`INSTANCE` is an uninitialized placeholder for discovery mechanisms
    that need a factory before the native one is known. It is never mutated:
    :meth:`init_provider_factory` returns a new, initialized factory.
    """

    INSTANCE = None  # type: InstrumentedProviderFactory

    def __init__(self, factory, handler=None):
        super(InstrumentedProviderFactory, self).__init__(factory)
        if handler is not None and not config.enabled:
            log.debug("instrumentation is disabled, %r will not report executions", factory)
            handler = None
        self._self_handler = handler

    @property
    def wrapped_provider_factory(self):
        return self.__wrapped__

    @property
    def instrumentation_handler(self):
        return self._self_handler

    def init_provider_factory(self, factory, handler=None):
        """Return a factory wrapping ``factory``, keeping this one's handler unless one is given."""
        return type(self)(factory, handler if handler is not None else self._self_handler)

    def _factory(self):
        if self.__wrapped__ is None:
            raise UnsupportedOperationError("%s has not been initialized" % (type(self).__name__,))
        return self.__wrapped__

    def create_connection(self):
        connection = self._factory().create_connection()
        if self._self_handler is None:
            return connection
        return InstrumentedConnection(connection, self._self_handler)

    def create_command(self):
        command = self._factory().create_command()
        if self._self_handler is None:
            return command
        return InstrumentedCommand(command, None, self._self_handler)

    def create_parameter(self):
        return self._factory().create_parameter()

    def create_connection_string_builder(self):
        return self._factory().create_connection_string_builder()

    def create_command_builder(self):
        return self._factory().create_command_builder()

    def create_data_adapter(self):
        """Return the native data adapter, unwrapped.

        Adapters bypass instrumentation: the commands they carry run without
        any handler callbacks, even when this factory has a handler.
        """
        return self._factory().create_data_adapter()

    @property
    def can_create_data_source_enumerator(self):
        return self._factory().can_create_data_source_enumerator

    def create_data_source_enumerator(self):
        return self._factory().create_data_source_enumerator()


InstrumentedProviderFactory.INSTANCE = InstrumentedProviderFactory(None)

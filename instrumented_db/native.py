"""
Capability sets of a native database driver.

The proxies in this package wrap objects offering these operations. They do
not require the wrapped objects to inherit from the classes below: any object
with the same attributes can be wrapped. The classes exist to document the
contract and to be implemented by driver adapters such as
:mod:`instrumented_db.contrib.dbapi`.
"""
import abc
from typing import Any  # noqa:F401
from typing import Optional  # noqa:F401
from typing import Sequence  # noqa:F401

import attr

from .ext.sql import CommandBehavior
from .ext.sql import IsolationLevel


@attr.s(slots=True)
class DbParameter(object):
    """A command parameter. Unnamed parameters bind by position."""

    name = attr.ib(default=None)  # type: Optional[str]
    value = attr.ib(default=None)  # type: Any
    direction = attr.ib(default="input")  # type: str
    db_type = attr.ib(default=None)  # type: Optional[str]


class DbDataReader(metaclass=abc.ABCMeta):
    """Forward-only cursor over the rows produced by a command."""

    @property
    @abc.abstractmethod
    def field_count(self):
        # type: () -> int
        pass

    @property
    @abc.abstractmethod
    def has_rows(self):
        # type: () -> bool
        pass

    @property
    @abc.abstractmethod
    def is_closed(self):
        # type: () -> bool
        pass

    @property
    @abc.abstractmethod
    def records_affected(self):
        # type: () -> int
        pass

    @property
    def depth(self):
        # type: () -> int
        return 0

    @abc.abstractmethod
    def read(self):
        # type: () -> bool
        """Advance to the next row; ``False`` once the rows are exhausted."""

    async def read_async(self):
        # type: () -> bool
        return self.read()

    @abc.abstractmethod
    def next_result(self):
        # type: () -> bool
        """Advance to the next result set of a batch."""

    async def next_result_async(self):
        # type: () -> bool
        return self.next_result()

    @abc.abstractmethod
    def get_value(self, ordinal):
        # type: (int) -> Any
        pass

    def get_values(self):
        # type: () -> tuple
        return tuple(self.get_value(i) for i in range(self.field_count))

    @abc.abstractmethod
    def get_name(self, ordinal):
        # type: (int) -> str
        pass

    def get_ordinal(self, name):
        # type: (str) -> int
        for i in range(self.field_count):
            if self.get_name(i) == name:
                return i
        raise IndexError("no column named %r" % (name,))

    def get_field_type(self, ordinal):
        # type: (int) -> type
        return type(self.get_value(ordinal))

    def get_data_type_name(self, ordinal):
        # type: (int) -> str
        return self.get_field_type(ordinal).__name__

    def is_db_null(self, ordinal):
        # type: (int) -> bool
        return self.get_value(ordinal) is None

    def get_bool(self, ordinal):
        return bool(self.get_value(ordinal))

    def get_int(self, ordinal):
        return int(self.get_value(ordinal))

    def get_float(self, ordinal):
        return float(self.get_value(ordinal))

    def get_str(self, ordinal):
        return str(self.get_value(ordinal))

    def get_bytes(self, ordinal):
        return bytes(self.get_value(ordinal))

    @abc.abstractmethod
    def get_schema_table(self):
        # type: () -> Sequence[dict]
        """Describe the columns of the current result set."""

    def __getitem__(self, key):
        if isinstance(key, str):
            key = self.get_ordinal(key)
        return self.get_value(key)

    def __iter__(self):
        while self.read():
            yield self.get_values()

    @abc.abstractmethod
    def close(self):
        pass

    def dispose(self):
        self.close()


class DbTransaction(metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def connection(self):
        pass

    @property
    @abc.abstractmethod
    def isolation_level(self):
        # type: () -> IsolationLevel
        pass

    @abc.abstractmethod
    def commit(self):
        pass

    @abc.abstractmethod
    def rollback(self):
        pass

    @abc.abstractmethod
    def dispose(self):
        pass


class DbCommand(metaclass=abc.ABCMeta):
    """A SQL statement bound to a connection and, optionally, a transaction.

    ``command_text``, ``command_timeout``, ``command_type``, ``connection``,
    ``transaction`` and ``parameters`` are plain read/write attributes.
    Cloning is optional: commands supporting it define ``clone()``.
    """

    @abc.abstractmethod
    def execute_reader(self, behavior=CommandBehavior.DEFAULT):
        # type: (CommandBehavior) -> DbDataReader
        pass

    async def execute_reader_async(self, behavior=CommandBehavior.DEFAULT):
        # type: (CommandBehavior) -> DbDataReader
        return self.execute_reader(behavior)

    @abc.abstractmethod
    def execute_scalar(self):
        # type: () -> Any
        pass

    async def execute_scalar_async(self):
        # type: () -> Any
        return self.execute_scalar()

    @abc.abstractmethod
    def execute_non_query(self):
        # type: () -> int
        pass

    async def execute_non_query_async(self):
        # type: () -> int
        return self.execute_non_query()

    @abc.abstractmethod
    def cancel(self):
        pass

    def prepare(self):
        pass

    def create_parameter(self):
        # type: () -> DbParameter
        return DbParameter()

    @abc.abstractmethod
    def dispose(self):
        pass


class DbConnection(metaclass=abc.ABCMeta):
    """A connection to a database.

    ``hooks`` is a :class:`instrumented_db._hooks.Hooks` on which the
    connection emits :data:`instrumented_db.ext.sql.STATE_CHANGE` with
    ``(sender, StateChangeEvent)``.
    """

    @property
    @abc.abstractmethod
    def hooks(self):
        pass

    @property
    @abc.abstractmethod
    def state(self):
        pass

    @property
    def connection_timeout(self):
        # type: () -> int
        return 15

    @property
    def database(self):
        # type: () -> str
        return ""

    @property
    def data_source(self):
        # type: () -> str
        return ""

    @property
    def server_version(self):
        # type: () -> str
        return ""

    @abc.abstractmethod
    def open(self):
        pass

    async def open_async(self):
        self.open()

    @abc.abstractmethod
    def close(self):
        pass

    def change_database(self, database_name):
        # type: (str) -> None
        raise NotImplementedError("%s cannot change database" % (type(self).__name__,))

    @abc.abstractmethod
    def begin_transaction(self, isolation_level=IsolationLevel.UNSPECIFIED):
        # type: (IsolationLevel) -> DbTransaction
        pass

    @abc.abstractmethod
    def create_command(self):
        # type: () -> DbCommand
        pass

    def get_schema(self, collection_name=None, restriction_values=None):
        raise NotImplementedError("%s does not describe its schema" % (type(self).__name__,))

    @abc.abstractmethod
    def dispose(self):
        pass


class DbProviderFactory(metaclass=abc.ABCMeta):
    """Entry point through which generic code obtains a driver's objects."""

    @abc.abstractmethod
    def create_connection(self):
        # type: () -> DbConnection
        pass

    @abc.abstractmethod
    def create_command(self):
        # type: () -> DbCommand
        pass

    def create_parameter(self):
        # type: () -> DbParameter
        return DbParameter()

    def create_connection_string_builder(self):
        return None

    def create_command_builder(self):
        return None

    def create_data_adapter(self):
        return None

    @property
    def can_create_data_source_enumerator(self):
        # type: () -> bool
        return False

    def create_data_source_enumerator(self):
        return None

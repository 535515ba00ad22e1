from enum import Enum
from enum import IntFlag
from enum import unique

import attr


@unique
class ExecuteKind(Enum):
    """Classification of an execution call reported to instrumentation handlers."""

    READER = "reader"  # row-returning
    SCALAR = "scalar"  # single value
    NON_QUERY = "non_query"  # row count


class CommandBehavior(IntFlag):
    """Flags describing how a reader is opened and how the connection is treated afterwards."""

    DEFAULT = 0
    SINGLE_RESULT = 1
    SCHEMA_ONLY = 2
    KEY_INFO = 4
    SINGLE_ROW = 8
    SEQUENTIAL_ACCESS = 16
    CLOSE_CONNECTION = 32


class ConnectionState(IntFlag):
    CLOSED = 0
    OPEN = 1
    CONNECTING = 2
    EXECUTING = 4
    FETCHING = 8
    BROKEN = 16


@unique
class IsolationLevel(Enum):
    UNSPECIFIED = "unspecified"
    CHAOS = "chaos"
    READ_UNCOMMITTED = "read_uncommitted"
    READ_COMMITTED = "read_committed"
    REPEATABLE_READ = "repeatable_read"
    SERIALIZABLE = "serializable"
    SNAPSHOT = "snapshot"


@unique
class CommandType(Enum):
    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"
    TABLE_DIRECT = "table_direct"


# hook emitted by connections when their state changes, with (sender, StateChangeEvent)
STATE_CHANGE = "state_change"


@attr.s(frozen=True, slots=True)
class StateChangeEvent(object):
    original_state = attr.ib()  # type: ConnectionState
    current_state = attr.ib()  # type: ConnectionState


def normalize_vendor(vendor):
    # type: (str) -> str
    """Return a canonical name for a type of database."""
    if not vendor:
        return "db"  # should this ever happen?
    elif "sqlite" in vendor:
        return "sqlite"
    elif "postgres" in vendor or vendor in ("psycopg", "psycopg2"):
        return "postgres"
    elif vendor in ("MySQLdb", "pymysql", "mysqlclient"):
        return "mysql"
    else:
        return vendor

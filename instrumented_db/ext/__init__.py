from .sql import CommandBehavior
from .sql import CommandType
from .sql import ConnectionState
from .sql import ExecuteKind
from .sql import IsolationLevel
from .sql import STATE_CHANGE
from .sql import StateChangeEvent


__all__ = [
    "CommandBehavior",
    "CommandType",
    "ConnectionState",
    "ExecuteKind",
    "IsolationLevel",
    "STATE_CHANGE",
    "StateChangeEvent",
]

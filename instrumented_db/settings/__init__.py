from .config import InstrumentationConfig
from .config import config


__all__ = ["InstrumentationConfig", "config"]

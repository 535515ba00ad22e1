"""
Logging utilities for internal use.

Usage::

    from instrumented_db.internal.logger import get_logger

    log = get_logger(__name__)
    log.debug("wrapping %r", native_connection)

Every logger returned here carries a rate limiting filter: a given call site
(pathname and line number) emits at most one record per
``INSTRUMENTED_DB_LOGGING_RATE`` seconds. Records dropped in between are
counted and reported with the next record that gets through. Loggers set to
``DEBUG`` are never limited.
"""

import collections
import logging
import time
from typing import DefaultDict
from typing import Tuple

from ..settings import config


class LoggingBucket:
    """Current time bucket of a call site and the number of records skipped in it."""

    def __init__(self, bucket: float, skipped: int):
        self.bucket = bucket
        self.skipped = skipped

    def __repr__(self):
        return f"LoggingBucket({self.bucket}, {self.skipped})"

    def is_sampled(self, record: logging.LogRecord, rate: float) -> bool:
        current = time.monotonic()
        if current - self.bucket >= rate:
            self.bucket = current
            record.skipped = self.skipped
            self.skipped = 0
            return True
        self.skipped += 1
        return False


_MINF = float("-inf")

_buckets: DefaultDict[Tuple[str, int], LoggingBucket] = collections.defaultdict(lambda: LoggingBucket(_MINF, 0))


def log_filter(record: logging.LogRecord) -> bool:
    """Return ``True`` when ``record`` should be emitted."""
    rate = config.logging_rate
    logger = logging.getLogger(record.name)
    if not rate or logger.getEffectiveLevel() == logging.DEBUG:
        return True
    return _buckets[(record.pathname, record.lineno)].is_sampled(record, rate)


class SkippedRecordsFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        skipped = getattr(record, "skipped", 0)
        skip_str = f" [{skipped} skipped]" if skipped else ""
        return f"{record.levelname} {super().format(record)}{skip_str}"


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve or create a ``Logger`` instance with consistent behavior for internal use.
    """
    logger = logging.getLogger(name)
    # addFilter will only add the filter if it is not already present
    logger.addFilter(log_filter)
    logger.propagate = True
    return logger

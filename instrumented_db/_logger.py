import logging

from .internal.logger import SkippedRecordsFormatter
from .settings import config


def configure_logger():
    # type: () -> None
    """Configures the ``instrumented_db`` logger.

    Customization is possible with the environment variables:
        ``INSTRUMENTED_DB_DEBUG`` and ``INSTRUMENTED_DB_LOG_STREAM_HANDLER``

    By default the package logger writes WARNING and above to a stream handler
    and propagates to the root logger. With ``INSTRUMENTED_DB_DEBUG`` enabled
    the logger level is lowered to DEBUG, which also lifts rate limiting.
    """
    logger = logging.getLogger("instrumented_db")
    if config.log_stream_handler and not any(
        isinstance(h, logging.StreamHandler) and isinstance(h.formatter, SkippedRecordsFormatter)
        for h in logger.handlers
    ):
        handler = logging.StreamHandler()
        handler.setFormatter(SkippedRecordsFormatter("[%(name)s] %(message)s"))
        logger.addHandler(handler)

    if config.debug:
        logger.setLevel(logging.DEBUG)

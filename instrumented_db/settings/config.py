from envier import En


class InstrumentationConfig(En):
    """Process-wide settings, read from ``INSTRUMENTED_DB_*`` environment variables."""

    __prefix__ = "instrumented_db"

    enabled = En.v(
        bool,
        "enabled",
        default=True,
        help_type="Boolean",
        help="Attach instrumentation handlers to newly created connections and provider factories. "
        "When disabled every proxy behaves as a pure pass-through",
    )

    debug = En.v(
        bool,
        "debug",
        default=False,
        help_type="Boolean",
        help="Set the instrumented_db logger to DEBUG",
    )

    log_stream_handler = En.v(
        bool,
        "log_stream_handler",
        default=True,
        help_type="Boolean",
        help="Attach a stream handler to the instrumented_db logger",
    )

    logging_rate = En.v(
        int,
        "logging_rate",
        default=60,
        help_type="Integer",
        help="Seconds between two records emitted from the same call site. 0 disables rate limiting",
    )


config = InstrumentationConfig()

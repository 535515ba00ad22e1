"""
Errors raised by the instrumentation layer itself.

Errors raised by the wrapped driver are never converted into one of these:
they reach the caller as the very instance the driver raised.
"""


class InstrumentationError(Exception):
    """Base class for errors raised by instrumented_db."""


class MissingNativeObjectError(InstrumentationError, ValueError):
    """A proxy was constructed without the native object it must wrap."""

    def __init__(self, name):
        super(MissingNativeObjectError, self).__init__("%s is required" % (name,))
        self.name = name


class UnsupportedOperationError(InstrumentationError, NotImplementedError):
    """The wrapped native object does not offer the requested capability."""

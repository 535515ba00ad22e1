import contextlib
import os

import mock

from instrumented_db import InstrumentationHandler
from instrumented_db import config
from instrumented_db._hooks import Hooks
from instrumented_db.native import DbCommand
from instrumented_db.native import DbConnection
from instrumented_db.native import DbDataReader
from instrumented_db.native import DbProviderFactory
from instrumented_db.native import DbTransaction


class RecordingHandler(InstrumentationHandler):
    """Handler keeping every callback it receives, in order."""

    def __init__(self):
        self.calls = []

    def execute_start(self, command, kind):
        self.calls.append(("start", command, kind))

    def execute_finish(self, command, kind, reader):
        self.calls.append(("finish", command, kind, reader))

    def on_error(self, command, kind, error):
        self.calls.append(("error", command, kind, error))

    def events(self):
        """The callbacks as ``(name, kind)`` pairs."""
        return [(call[0], call[2]) for call in self.calls]

    def pop(self):
        calls, self.calls = self.calls, []
        return calls


def mock_handler():
    return mock.Mock(spec=InstrumentationHandler)


def mock_command(**kwargs):
    """Non-cloneable native command; async methods are ``AsyncMock``s."""
    kwargs.setdefault("command_text", "")
    kwargs.setdefault("parameters", [])
    kwargs.setdefault("connection", None)
    kwargs.setdefault("transaction", None)
    return mock.Mock(spec=DbCommand, **kwargs)


def mock_connection():
    native = mock.Mock(spec=DbConnection)
    native.hooks = Hooks()
    native.create_command.side_effect = lambda: mock_command()
    native.begin_transaction.side_effect = lambda isolation_level: mock.Mock(spec=DbTransaction)
    return native


def mock_reader():
    return mock.Mock(spec=DbDataReader)


def mock_provider_factory():
    factory = mock.Mock(spec=DbProviderFactory)
    factory.create_connection.side_effect = mock_connection
    factory.create_command.side_effect = mock_command
    return factory


@contextlib.contextmanager
def override_env(env):
    """
    Temporarily override ``os.environ`` with provided values::

        >>> with override_env(dict(INSTRUMENTED_DB_ENABLED="false")):
            # Your test
    """
    original = dict(os.environ)
    os.environ.update(env)
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


@contextlib.contextmanager
def override_config(values):
    """
    Temporarily override the global configuration::

        >>> with override_config(dict(enabled=False)):
            # Your test
    """
    originals = {key: getattr(config, key) for key in values}
    for key, value in values.items():
        setattr(config, key, value)
    try:
        yield
    finally:
        for key, value in originals.items():
            setattr(config, key, value)

import pytest

from instrumented_db.contrib.sqlite3 import connect

from .utils import RecordingHandler
from .utils import mock_handler


@pytest.fixture
def handler():
    return mock_handler()


@pytest.fixture
def recording_handler():
    return RecordingHandler()


@pytest.fixture
def sqlite_connection(recording_handler):
    connection = connect(":memory:", handler=recording_handler)
    try:
        yield connection
    finally:
        connection.dispose()

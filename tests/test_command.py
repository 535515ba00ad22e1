import asyncio
import copy

import mock
import pytest

from instrumented_db import CommandBehavior
from instrumented_db import ExecuteKind
from instrumented_db import InstrumentedCommand
from instrumented_db import InstrumentedConnection
from instrumented_db import InstrumentedDataReader
from instrumented_db import MissingNativeObjectError
from instrumented_db import UnsupportedOperationError

from .utils import RecordingHandler
from .utils import mock_command
from .utils import mock_connection
from .utils import mock_handler
from .utils import mock_reader


class NativeCommand(object):
    """A native command without clone support."""

    connection = None
    transaction = None

    def dispose(self):
        pass


def test_requires_native_command():
    with pytest.raises(MissingNativeObjectError):
        InstrumentedCommand(None)


@pytest.mark.parametrize(
    "method,kind", [("execute_scalar", ExecuteKind.SCALAR), ("execute_non_query", ExecuteKind.NON_QUERY)]
)
def test_execute_success(handler, method, kind):
    native = mock_command()
    getattr(native, method).return_value = 42
    command = InstrumentedCommand(native, handler=handler)

    assert getattr(command, method)() == 42

    getattr(native, method).assert_called_once_with()
    assert handler.mock_calls == [
        mock.call.execute_start(command, kind),
        mock.call.execute_finish(command, kind, None),
    ]


@pytest.mark.parametrize(
    "method,kind",
    [
        ("execute_scalar", ExecuteKind.SCALAR),
        ("execute_non_query", ExecuteKind.NON_QUERY),
        ("execute_reader", ExecuteKind.READER),
    ],
)
def test_execute_error(handler, method, kind):
    error = ValueError("no such table: missing")
    native = mock_command()
    getattr(native, method).side_effect = error
    command = InstrumentedCommand(native, handler=handler)

    with pytest.raises(ValueError) as exc_info:
        getattr(command, method)()

    # the very same instance reaches the caller
    assert exc_info.value is error
    assert handler.mock_calls == [
        mock.call.execute_start(command, kind),
        mock.call.on_error(command, kind, error),
        mock.call.execute_finish(command, kind, None),
    ]


def test_execute_reader_wraps_native_reader(handler):
    native_reader = mock_reader()
    native = mock_command()
    native.execute_reader.return_value = native_reader
    command = InstrumentedCommand(native, handler=handler)

    reader = command.execute_reader(CommandBehavior.SINGLE_ROW)

    native.execute_reader.assert_called_once_with(CommandBehavior.SINGLE_ROW)
    assert isinstance(reader, InstrumentedDataReader)
    assert reader.wrapped_reader is native_reader
    assert reader.behavior == CommandBehavior.SINGLE_ROW
    assert reader.instrumentation_handler is handler
    assert handler.mock_calls == [
        mock.call.execute_start(command, ExecuteKind.READER),
        mock.call.execute_finish(command, ExecuteKind.READER, reader),
    ]
    assert handler.execute_finish.call_args[0][2] is reader


def test_execute_reader_default_behavior(handler):
    native = mock_command()
    command = InstrumentedCommand(native, handler=handler)

    reader = command.execute_reader()

    native.execute_reader.assert_called_once_with(CommandBehavior.DEFAULT)
    assert reader.behavior == CommandBehavior.DEFAULT


def test_execute_without_handler():
    native_reader = mock_reader()
    native = mock_command()
    native.execute_scalar.return_value = "value"
    native.execute_non_query.return_value = 3
    native.execute_reader.return_value = native_reader
    command = InstrumentedCommand(native)

    assert command.instrumentation_handler is None
    assert command.execute_scalar() == "value"
    assert command.execute_non_query() == 3

    reader = command.execute_reader()
    # readers are wrapped anyway so that disposal behaves the same
    assert isinstance(reader, InstrumentedDataReader)
    assert reader.wrapped_reader is native_reader
    assert reader.instrumentation_handler is None


def test_execute_without_handler_propagates_error():
    error = RuntimeError("disk I/O error")
    native = mock_command()
    native.execute_non_query.side_effect = error
    command = InstrumentedCommand(native)

    with pytest.raises(RuntimeError) as exc_info:
        command.execute_non_query()
    assert exc_info.value is error


def test_on_error_failure_still_finishes(handler):
    handler.on_error.side_effect = RuntimeError("handler failed")
    native = mock_command()
    native.execute_scalar.side_effect = ValueError("native failed")
    command = InstrumentedCommand(native, handler=handler)

    with pytest.raises(RuntimeError, match="handler failed"):
        command.execute_scalar()

    handler.execute_finish.assert_called_once_with(command, ExecuteKind.SCALAR, None)


def test_execute_start_failure_skips_native_call(handler):
    handler.execute_start.side_effect = RuntimeError("handler failed")
    native = mock_command()
    command = InstrumentedCommand(native, handler=handler)

    with pytest.raises(RuntimeError, match="handler failed"):
        command.execute_non_query()

    native.execute_non_query.assert_not_called()
    handler.on_error.assert_not_called()
    handler.execute_finish.assert_not_called()


def test_base_exception_reported():
    # KeyboardInterrupt is not an Exception but still ends the execution
    handler = RecordingHandler()
    native = mock_command()
    native.execute_scalar.side_effect = KeyboardInterrupt()
    command = InstrumentedCommand(native, handler=handler)

    with pytest.raises(KeyboardInterrupt):
        command.execute_scalar()

    assert handler.events() == [
        ("start", ExecuteKind.SCALAR),
        ("error", ExecuteKind.SCALAR),
        ("finish", ExecuteKind.SCALAR),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,kind",
    [("execute_scalar_async", ExecuteKind.SCALAR), ("execute_non_query_async", ExecuteKind.NON_QUERY)],
)
async def test_execute_async_success(handler, method, kind):
    native = mock_command()
    getattr(native, method).return_value = 7
    command = InstrumentedCommand(native, handler=handler)

    assert await getattr(command, method)() == 7

    assert handler.mock_calls == [
        mock.call.execute_start(command, kind),
        mock.call.execute_finish(command, kind, None),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,kind",
    [
        ("execute_scalar_async", ExecuteKind.SCALAR),
        ("execute_non_query_async", ExecuteKind.NON_QUERY),
        ("execute_reader_async", ExecuteKind.READER),
    ],
)
async def test_execute_async_error(handler, method, kind):
    error = ValueError("boom")
    native = mock_command()
    getattr(native, method).side_effect = error
    command = InstrumentedCommand(native, handler=handler)

    with pytest.raises(ValueError) as exc_info:
        await getattr(command, method)()

    assert exc_info.value is error
    assert handler.mock_calls == [
        mock.call.execute_start(command, kind),
        mock.call.on_error(command, kind, error),
        mock.call.execute_finish(command, kind, None),
    ]


@pytest.mark.asyncio
async def test_execute_reader_async(handler):
    native_reader = mock_reader()
    native = mock_command()
    native.execute_reader_async.return_value = native_reader
    command = InstrumentedCommand(native, handler=handler)

    reader = await command.execute_reader_async(CommandBehavior.SEQUENTIAL_ACCESS)

    native.execute_reader_async.assert_awaited_once_with(CommandBehavior.SEQUENTIAL_ACCESS)
    assert reader.wrapped_reader is native_reader
    assert reader.behavior == CommandBehavior.SEQUENTIAL_ACCESS
    assert handler.mock_calls == [
        mock.call.execute_start(command, ExecuteKind.READER),
        mock.call.execute_finish(command, ExecuteKind.READER, reader),
    ]


@pytest.mark.asyncio
async def test_execute_async_without_handler():
    native_reader = mock_reader()
    native = mock_command()
    native.execute_scalar_async.return_value = 1
    native.execute_non_query_async.return_value = 2
    native.execute_reader_async.return_value = native_reader
    command = InstrumentedCommand(native)

    assert await command.execute_scalar_async() == 1
    assert await command.execute_non_query_async() == 2
    reader = await command.execute_reader_async()
    assert isinstance(reader, InstrumentedDataReader)
    assert reader.wrapped_reader is native_reader
    assert reader.instrumentation_handler is None


@pytest.mark.asyncio
async def test_execute_async_cancelled():
    class SlowCommand(NativeCommand):
        def __init__(self):
            self.started = asyncio.Event()

        async def execute_scalar_async(self):
            self.started.set()
            await asyncio.sleep(60)

    handler = RecordingHandler()
    native = SlowCommand()
    command = InstrumentedCommand(native, handler=handler)

    task = asyncio.ensure_future(command.execute_scalar_async())
    await native.started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert handler.events() == [
        ("start", ExecuteKind.SCALAR),
        ("error", ExecuteKind.SCALAR),
        ("finish", ExecuteKind.SCALAR),
    ]
    assert isinstance(handler.calls[1][3], asyncio.CancelledError)
    assert handler.calls[2][3] is None


def test_assign_instrumented_connection():
    connection_handler = mock_handler()
    native_connection = mock_connection()
    connection = InstrumentedConnection(native_connection, connection_handler)
    native = mock_command()
    command = InstrumentedCommand(native)

    command.connection = connection

    assert command.connection is connection
    assert native.connection is native_connection
    assert command.instrumentation_handler is connection_handler


def test_assign_instrumented_connection_replaces_explicit_handler():
    connection_handler = mock_handler()
    explicit_handler = mock_handler()
    connection = InstrumentedConnection(mock_connection(), connection_handler)

    command = InstrumentedCommand(mock_command(), connection, explicit_handler)

    assert command.instrumentation_handler is connection_handler


def test_assign_native_connection_keeps_handler(handler):
    native_connection = mock_connection()
    native = mock_command()
    command = InstrumentedCommand(native, handler=handler)

    command.connection = native_connection

    assert command.connection is native_connection
    assert native.connection is native_connection
    assert command.instrumentation_handler is handler


def test_assign_connection_without_handler_clears_handler(handler):
    command = InstrumentedCommand(mock_command(), handler=handler)

    command.connection = InstrumentedConnection(mock_connection())

    assert command.instrumentation_handler is None


def test_construct_without_connection_leaves_native_untouched():
    native = NativeCommand()
    native.connection = "native-connection"

    command = InstrumentedCommand(native)

    assert command.connection is None
    assert native.connection == "native-connection"


def test_assign_instrumented_transaction(handler):
    connection = InstrumentedConnection(mock_connection(), handler)
    transaction = connection.begin_transaction()
    command = connection.create_command()
    native = command.wrapped_command

    command.transaction = transaction

    assert command.transaction is transaction
    assert native.transaction is transaction.wrapped_transaction


def test_assign_native_transaction():
    native_transaction = object()
    native = mock_command()
    command = InstrumentedCommand(native)

    command.transaction = native_transaction

    assert command.transaction is native_transaction
    assert native.transaction is native_transaction


def test_assign_none():
    native = mock_command()
    command = InstrumentedCommand(native)

    command.connection = None
    command.transaction = None

    assert native.connection is None
    assert native.transaction is None


def test_clone_not_supported(handler):
    command = InstrumentedCommand(NativeCommand(), handler=handler)

    with pytest.raises(UnsupportedOperationError, match="Underlying NativeCommand is not cloneable"):
        command.clone()

    with pytest.raises(NotImplementedError):
        copy.copy(command)

    # cloning is not an execution
    assert handler.mock_calls == []


def test_clone():
    connection_handler = mock_handler()
    native_connection = mock_connection()
    connection = InstrumentedConnection(native_connection, connection_handler)
    transaction = connection.begin_transaction()
    cloned_native = mock_command()
    native = mock_command()
    native.clone = mock.Mock(return_value=cloned_native)
    command = InstrumentedCommand(native, connection)
    command.transaction = transaction

    cloned = command.clone()

    assert isinstance(cloned, InstrumentedCommand)
    assert cloned is not command
    assert cloned.wrapped_command is cloned_native
    assert cloned.connection is connection
    assert cloned.transaction is transaction
    assert cloned.instrumentation_handler is connection_handler
    assert cloned_native.connection is native_connection
    assert cloned_native.transaction is transaction.wrapped_transaction


def test_copy_clones(handler):
    cloned_native = mock_command()
    native = mock_command()
    native.clone = mock.Mock(return_value=cloned_native)
    command = InstrumentedCommand(native, handler=handler)

    cloned = copy.copy(command)

    assert cloned.wrapped_command is cloned_native
    assert cloned.instrumentation_handler is handler


def test_pass_through():
    native = mock_command()
    command = InstrumentedCommand(native)

    command.command_text = "SELECT 1"
    command.command_timeout = 5
    command.cancel()
    command.prepare()
    command.create_parameter()

    assert native.command_text == "SELECT 1"
    assert native.command_timeout == 5
    assert command.command_text == "SELECT 1"
    native.cancel.assert_called_once_with()
    native.prepare.assert_called_once_with()
    native.create_parameter.assert_called_once_with()


def test_dispose_twice():
    native = mock_command()
    command = InstrumentedCommand(native)

    command.dispose()
    command.dispose()

    native.dispose.assert_called_once_with()


def test_context_manager_disposes(handler):
    native = mock_command()
    native.execute_scalar.return_value = 1

    with InstrumentedCommand(native, handler=handler) as command:
        assert isinstance(command, InstrumentedCommand)
        command.execute_scalar()

    native.dispose.assert_called_once_with()

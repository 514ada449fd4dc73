"""Tests for the connection status machine."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Mapping

import pytest

from dbconnector.clients import DemoDatabaseClient
from dbconnector.connection import ConnectionObjectManager
from dbconnector.dialects import Dialect
from dbconnector.errors import DatabaseConnectionError, InvalidTransitionError
from dbconnector.models import ConnectionStatus, ConnectResult
from dbconnector.status import ConnectionStatusMachine


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class _PendingClient:
    """Client whose connect calls stay pending until the test resolves them."""

    def __init__(self) -> None:
        self.pending: list[asyncio.Future[ConnectResult]] = []
        self.calls: list[tuple[Dialect, dict[str, str], dict[str, bool]]] = []
        self.disconnects = 0

    async def connect(
        self,
        fields: Mapping[str, str],
        options: Mapping[str, bool],
        dialect: Dialect,
    ) -> ConnectResult:
        self.calls.append((dialect, dict(fields), dict(options)))
        future: asyncio.Future[ConnectResult] = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    async def disconnect(self) -> None:
        self.disconnects += 1


def _machine(client, dialect: str = "mysql"):  # type: ignore[no-untyped-def]
    manager = ConnectionObjectManager()
    connection = manager.create(dialect)
    return manager, connection, ConnectionStatusMachine(manager, connection, client)


async def _start_connect(machine: ConnectionStatusMachine) -> asyncio.Task[ConnectionStatus]:
    task = asyncio.create_task(machine.connect())
    await asyncio.sleep(0)
    return task


def test_initial_state_is_disconnected() -> None:
    _, connection, machine = _machine(DemoDatabaseClient())

    snapshot = machine.snapshot()

    assert machine.status is ConnectionStatus.DISCONNECTED
    assert machine.log_count == 0
    assert machine.error_message is None
    assert snapshot.connection_id == connection.id
    assert snapshot.dialect is Dialect.MYSQL


@pytest.mark.anyio
async def test_successful_connect_logs_once() -> None:
    moment = datetime(2016, 8, 1, 12, 0, tzinfo=timezone.utc)
    manager = ConnectionObjectManager()
    connection = manager.create("mysql")
    machine = ConnectionStatusMachine(manager, connection, DemoDatabaseClient(), clock=lambda: moment)
    manager.set_field(connection, "username", "demo")
    manager.set_field(connection, "password", "demo")

    status = await machine.connect()

    assert status is ConnectionStatus.CONNECTED
    assert machine.log_count == 1
    entry = machine.log[0]
    assert entry.timestamp == moment
    assert entry.dialect is Dialect.MYSQL
    assert entry.outcome == "connected"
    assert entry.label == "demo"
    assert machine.tables == ("accounts", "orders", "payments")


@pytest.mark.anyio
async def test_failed_connect_sets_error_without_logging() -> None:
    manager, connection, machine = _machine(DemoDatabaseClient())
    manager.set_field(connection, "username", "blah")

    status = await machine.connect()

    assert status is ConnectionStatus.ERROR
    assert machine.error_message == "authentication failed"
    assert machine.log_count == 0
    assert machine.tables == ()


@pytest.mark.anyio
async def test_empty_client_message_gets_a_fallback() -> None:
    client = _PendingClient()
    _, _, machine = _machine(client)

    task = await _start_connect(machine)
    client.pending[0].set_exception(DatabaseConnectionError(""))
    await task

    assert machine.status is ConnectionStatus.ERROR
    assert machine.error_message == "Could not connect to MySQL"


@pytest.mark.anyio
async def test_connect_passes_current_configuration_to_client() -> None:
    client = _PendingClient()
    manager, connection, machine = _machine(client, "postgres")
    manager.set_field(connection, "host", "db.internal")
    manager.toggle_option(connection, "ssl")

    task = await _start_connect(machine)
    client.pending[0].set_result(ConnectResult())
    await task

    dialect, fields, options = client.calls[0]
    assert dialect is Dialect.POSTGRES
    assert fields["host"] == "db.internal"
    assert options == {"ssl": True}


@pytest.mark.anyio
async def test_second_connect_while_connecting_is_rejected() -> None:
    client = _PendingClient()
    _, _, machine = _machine(client)

    task = await _start_connect(machine)
    assert machine.status is ConnectionStatus.CONNECTING
    with pytest.raises(InvalidTransitionError) as excinfo:
        await machine.connect()

    assert excinfo.value.current == "connecting"
    assert len(client.calls) == 1
    client.pending[0].set_result(ConnectResult())
    assert await task is ConnectionStatus.CONNECTED


@pytest.mark.anyio
async def test_connect_while_connected_is_rejected() -> None:
    manager, connection, machine = _machine(DemoDatabaseClient(), "elasticsearch")
    manager.set_field(connection, "host", "localhost")
    await machine.connect()

    with pytest.raises(InvalidTransitionError):
        await machine.connect()

    assert machine.status is ConnectionStatus.CONNECTED
    assert machine.log_count == 1


@pytest.mark.anyio
@pytest.mark.parametrize("fail", [False, True])
async def test_disconnect_is_only_legal_when_connected(fail: bool) -> None:
    manager, connection, machine = _machine(DemoDatabaseClient())
    if fail:
        await machine.connect()
        assert machine.status is ConnectionStatus.ERROR

    with pytest.raises(InvalidTransitionError):
        await machine.disconnect()

    assert machine.status is (ConnectionStatus.ERROR if fail else ConnectionStatus.DISCONNECTED)


@pytest.mark.anyio
async def test_disconnect_while_connecting_is_rejected() -> None:
    client = _PendingClient()
    _, _, machine = _machine(client)
    task = await _start_connect(machine)

    with pytest.raises(InvalidTransitionError):
        await machine.disconnect()

    client.pending[0].set_result(ConnectResult())
    await task


@pytest.mark.anyio
async def test_disconnect_release_failure_is_only_logged(caplog: pytest.LogCaptureFixture) -> None:
    client = DemoDatabaseClient(fail_disconnect=True)
    manager, connection, machine = _machine(client)
    manager.set_field(connection, "username", "demo")
    manager.set_field(connection, "password", "demo")
    await machine.connect()

    with caplog.at_level(logging.WARNING, logger="dbconnector.status"):
        await machine.disconnect()

    assert machine.status is ConnectionStatus.DISCONNECTED
    assert machine.error_message is None
    assert client.disconnect_calls == 1
    assert "Failed to release database connection" in caplog.text


@pytest.mark.anyio
async def test_retry_from_error() -> None:
    manager, connection, machine = _machine(DemoDatabaseClient())
    await machine.connect()
    assert machine.status is ConnectionStatus.ERROR

    manager.set_field(connection, "username", "demo")
    manager.set_field(connection, "password", "demo")
    status = await machine.connect()

    assert status is ConnectionStatus.CONNECTED
    assert machine.error_message is None
    assert machine.log_count == 1


@pytest.mark.anyio
async def test_editing_config_abandons_in_flight_attempt() -> None:
    client = _PendingClient()
    manager, connection, machine = _machine(client)

    task = await _start_connect(machine)
    manager.set_field(connection, "host", "elsewhere")
    assert machine.status is ConnectionStatus.DISCONNECTED

    client.pending[0].set_result(ConnectResult(tables=("stale",)))
    await task

    assert machine.status is ConnectionStatus.DISCONNECTED
    assert machine.log_count == 0
    assert machine.tables == ()


@pytest.mark.anyio
async def test_only_latest_attempt_applies() -> None:
    client = _PendingClient()
    manager, connection, machine = _machine(client)

    first = await _start_connect(machine)
    manager.set_dialect(connection, "postgres")
    second = await _start_connect(machine)

    client.pending[0].set_result(ConnectResult(tables=("old",)))
    await first
    assert machine.status is ConnectionStatus.CONNECTING
    assert connection.dialect is Dialect.POSTGRES

    client.pending[1].set_exception(DatabaseConnectionError("authentication failed"))
    await second
    assert machine.status is ConnectionStatus.ERROR
    assert machine.error_message == "authentication failed"
    assert machine.log_count == 0


@pytest.mark.anyio
async def test_stale_failure_is_discarded() -> None:
    client = _PendingClient()
    manager, connection, machine = _machine(client, "postgres")

    task = await _start_connect(machine)
    manager.toggle_option(connection, "ssl")
    client.pending[0].set_exception(DatabaseConnectionError("timeout"))
    await task

    assert machine.status is ConnectionStatus.DISCONNECTED
    assert machine.error_message is None


@pytest.mark.anyio
async def test_cancelled_attempt_ends_in_error() -> None:
    client = _PendingClient()
    _, _, machine = _machine(client)

    task = await _start_connect(machine)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert machine.status is ConnectionStatus.ERROR
    assert machine.error_message == "Connection attempt cancelled"


@pytest.mark.anyio
async def test_listeners_observe_each_status() -> None:
    manager, connection, machine = _machine(DemoDatabaseClient())
    seen: list[ConnectionStatus] = []
    unsubscribe = machine.subscribe(lambda snapshot: seen.append(snapshot.status))
    manager.set_field(connection, "username", "demo")
    manager.set_field(connection, "password", "demo")

    await machine.connect()
    await machine.disconnect()
    unsubscribe()
    manager.set_field(connection, "password", "wrong")
    await machine.connect()

    assert seen == [
        ConnectionStatus.DISCONNECTED,
        ConnectionStatus.CONNECTING,
        ConnectionStatus.CONNECTED,
        ConnectionStatus.DISCONNECTED,
    ]


@pytest.mark.anyio
async def test_close_detaches_from_manager() -> None:
    client = _PendingClient()
    manager, connection, machine = _machine(client)
    task = await _start_connect(machine)

    machine.close()
    manager.set_field(connection, "host", "elsewhere")
    assert machine.status is ConnectionStatus.CONNECTING

    client.pending[0].set_result(ConnectResult())
    assert await task is ConnectionStatus.CONNECTED


@pytest.mark.anyio
async def test_mysql_session_scenario() -> None:
    client = DemoDatabaseClient()
    manager, connection, machine = _machine(client)
    manager.set_field(connection, "username", "demo")
    manager.set_field(connection, "password", "demo")
    manager.set_field(connection, "host", "localhost")
    manager.set_field(connection, "port", "3306")

    assert await machine.connect() is ConnectionStatus.CONNECTED
    assert machine.log_count == 1

    await machine.disconnect()
    assert machine.status is ConnectionStatus.DISCONNECTED
    assert client.connected is False

    manager.set_field(connection, "username", "blah")
    manager.set_field(connection, "password", "blah")
    assert await machine.connect() is ConnectionStatus.ERROR
    assert machine.error_message == "authentication failed"
    assert machine.log_count == 1


class _RefusingClient:
    """Client raising builtin socket errors instead of DatabaseConnectionError."""

    def __init__(self) -> None:
        self.refuse = True

    async def connect(
        self,
        fields: Mapping[str, str],
        options: Mapping[str, bool],
        dialect: Dialect,
    ) -> ConnectResult:
        if self.refuse:
            raise ConnectionRefusedError("refused")
        return ConnectResult(tables=("accounts",))

    async def disconnect(self) -> None:
        raise ConnectionResetError("reset")


@pytest.mark.anyio
async def test_builtin_client_error_lands_in_error_status() -> None:
    client = _RefusingClient()
    _, _, machine = _machine(client)

    status = await machine.connect()

    assert status is ConnectionStatus.ERROR
    assert machine.error_message == "refused"
    assert machine.log_count == 0

    client.refuse = False
    assert await machine.connect() is ConnectionStatus.CONNECTED


@pytest.mark.anyio
async def test_builtin_release_error_is_only_logged(caplog: pytest.LogCaptureFixture) -> None:
    client = _RefusingClient()
    client.refuse = False
    _, _, machine = _machine(client)
    await machine.connect()

    with caplog.at_level(logging.WARNING, logger="dbconnector.status"):
        await machine.disconnect()

    assert machine.status is ConnectionStatus.DISCONNECTED
    assert "Failed to release database connection" in caplog.text


@pytest.mark.anyio
async def test_failing_status_listener_does_not_block_connect(caplog: pytest.LogCaptureFixture) -> None:
    manager, connection, machine = _machine(DemoDatabaseClient())
    manager.set_field(connection, "username", "demo")
    manager.set_field(connection, "password", "demo")
    seen: list[ConnectionStatus] = []

    def _broken(snapshot) -> None:  # type: ignore[no-untyped-def]
        if seen:
            raise RuntimeError("listener broke")
        seen.append(snapshot.status)

    machine.subscribe(_broken)
    with caplog.at_level(logging.ERROR, logger="dbconnector.status"):
        status = await machine.connect()

    assert status is ConnectionStatus.CONNECTED
    assert machine.log_count == 1
    assert "Status listener failed" in caplog.text

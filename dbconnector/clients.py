"""Database clients consumed by the connection status machine."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence, runtime_checkable

from .dialects import Dialect
from .errors import DatabaseConnectionError
from .models import ConnectResult


@runtime_checkable
class DatabaseClient(Protocol):
    """Protocol implemented by database clients."""

    async def connect(
        self,
        fields: Mapping[str, str],
        options: Mapping[str, bool],
        dialect: Dialect,
    ) -> ConnectResult:
        """Open a connection and return the table previews; raise `DatabaseConnectionError` on failure."""

    async def disconnect(self) -> None:
        """Release the connection; raise `DatabaseConnectionError` on failure."""


@dataclass(frozen=True, slots=True)
class ConnectCall:
    """Arguments of one `connect` call (testing helper)."""

    dialect: Dialect
    fields: Mapping[str, str]
    options: Mapping[str, bool]


DEMO_CREDENTIALS: Mapping[Dialect, Mapping[str, str]] = {
    Dialect.MYSQL: {"username": "demo", "password": "demo"},
    Dialect.POSTGRES: {"username": "demo", "password": "demo"},
    Dialect.MSSQL: {"username": "demo", "password": "demo"},
}

DEMO_TABLE_PRESETS: Mapping[Dialect, Sequence[str]] = {
    Dialect.MYSQL: ("accounts", "orders", "payments"),
    Dialect.POSTGRES: ("public.accounts", "public.orders", "public.payments"),
    Dialect.SQLITE: ("sessions", "events"),
    Dialect.MSSQL: ("dbo.customers", "dbo.invoices"),
    Dialect.ELASTICSEARCH: ("logs-2016.08", "metrics"),
}

_REQUIRED_FIELDS: Mapping[Dialect, tuple[str, ...]] = {
    Dialect.SQLITE: ("storage",),
    Dialect.ELASTICSEARCH: ("host",),
}


class DemoDatabaseClient:
    """In-memory client that accepts preset credentials and returns preset tables."""

    def __init__(
        self,
        credentials: Mapping[Dialect, Mapping[str, str]] | None = None,
        tables: Mapping[Dialect, Sequence[str]] | None = None,
        *,
        latency: float = 0.0,
        fail_disconnect: bool = False,
    ) -> None:
        self._credentials = dict(DEMO_CREDENTIALS if credentials is None else credentials)
        self._tables = {
            dialect: tuple(names)
            for dialect, names in (DEMO_TABLE_PRESETS if tables is None else tables).items()
        }
        self._latency = latency
        self._fail_disconnect = fail_disconnect
        self.connect_calls: list[ConnectCall] = []
        self.disconnect_calls = 0
        self.connected = False

    async def connect(
        self,
        fields: Mapping[str, str],
        options: Mapping[str, bool],
        dialect: Dialect,
    ) -> ConnectResult:
        self.connect_calls.append(ConnectCall(dialect=dialect, fields=dict(fields), options=dict(options)))
        if self._latency:
            await asyncio.sleep(self._latency)
        for name in _REQUIRED_FIELDS.get(dialect, ()):
            if not fields.get(name):
                raise DatabaseConnectionError(f"missing {name}")
        expected = self._credentials.get(dialect, {})
        if any(fields.get(name) != value for name, value in expected.items()):
            raise DatabaseConnectionError("authentication failed")
        self.connected = True
        return ConnectResult(tables=self._tables.get(dialect, ()))

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        if self._fail_disconnect:
            raise DatabaseConnectionError("release failed")
        self.connected = False


class TimeoutDatabaseClient:
    """Wraps a client and turns slow calls into connection failures."""

    def __init__(self, client: DatabaseClient, timeout: float) -> None:
        self._client = client
        self._timeout = timeout

    @property
    def wrapped(self) -> DatabaseClient:
        return self._client

    async def connect(
        self,
        fields: Mapping[str, str],
        options: Mapping[str, bool],
        dialect: Dialect,
    ) -> ConnectResult:
        try:
            return await asyncio.wait_for(self._client.connect(fields, options, dialect), self._timeout)
        except asyncio.TimeoutError:
            raise DatabaseConnectionError(f"connection timed out after {self._timeout:g}s") from None

    async def disconnect(self) -> None:
        try:
            await asyncio.wait_for(self._client.disconnect(), self._timeout)
        except asyncio.TimeoutError:
            raise DatabaseConnectionError(f"disconnect timed out after {self._timeout:g}s") from None


__all__ = [
    "ConnectCall",
    "DEMO_CREDENTIALS",
    "DEMO_TABLE_PRESETS",
    "DatabaseClient",
    "DemoDatabaseClient",
    "TimeoutDatabaseClient",
]

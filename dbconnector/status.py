"""Connection status state machine driving connect/disconnect attempts."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Mapping

from .clients import DatabaseClient
from .connection import ConnectionObject, ConnectionObjectManager
from .dialects import Dialect
from .errors import DatabaseConnectionError, InvalidTransitionError
from .models import ConnectResult, ConnectionStatus, LogEntry, StatusSnapshot

LOG = logging.getLogger(__name__)

StatusListener = Callable[[StatusSnapshot], None]

_TRANSITIONS: Mapping[ConnectionStatus, frozenset[ConnectionStatus]] = {
    ConnectionStatus.DISCONNECTED: frozenset({ConnectionStatus.CONNECTING}),
    ConnectionStatus.CONNECTING: frozenset({ConnectionStatus.CONNECTED, ConnectionStatus.ERROR}),
    ConnectionStatus.CONNECTED: frozenset({ConnectionStatus.DISCONNECTED}),
    ConnectionStatus.ERROR: frozenset({ConnectionStatus.CONNECTING}),
}


class ConnectionStatusMachine:
    """Owns the status of one connection object.

    `connect` snapshots the object's configuration and awaits the client. If
    the object is edited through the manager while the attempt is in flight,
    the attempt is abandoned (status returns to ``disconnected``) and its
    eventual result is dropped.
    """

    def __init__(
        self,
        manager: ConnectionObjectManager,
        connection: ConnectionObject,
        client: DatabaseClient,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._manager = manager
        self._connection = connection
        self._client = client
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._status = ConnectionStatus.DISCONNECTED
        self._error_message: str | None = None
        self._tables: tuple[str, ...] = ()
        self._log: list[LogEntry] = []
        self._attempt = 0
        self._listeners: set[StatusListener] = set()
        self._manager_unsubscribe: Callable[[], None] | None = manager.subscribe(self._handle_connection_change)

    @property
    def connection(self) -> ConnectionObject:
        return self._connection

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def error_message(self) -> str | None:
        """User-facing message of the last failed attempt while in ``error``."""

        return self._error_message

    @property
    def tables(self) -> tuple[str, ...]:
        """Table previews returned by the last successful connect."""

        return self._tables

    @property
    def log(self) -> tuple[LogEntry, ...]:
        return tuple(self._log)

    @property
    def log_count(self) -> int:
        return len(self._log)

    def snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(
            connection_id=self._connection.id,
            dialect=self._connection.dialect,
            status=self._status,
            error_message=self._error_message,
            log_count=len(self._log),
            tables=self._tables,
        )

    async def connect(self) -> ConnectionStatus:
        """Attempt a connection with the object's current configuration."""

        self._transition(ConnectionStatus.CONNECTING)
        self._attempt += 1
        attempt = self._attempt
        connection = self._connection
        dialect = connection.dialect
        fields = dict(connection.fields)
        options = dict(connection.options)
        self._error_message = None
        self._tables = ()
        self._notify()
        try:
            result = await self._client.connect(fields, options, dialect)
        except Exception as exc:
            if self._is_stale(attempt):
                LOG.debug("Discarding failure of abandoned attempt", extra={"connection": connection.id})
                return self._status
            message = str(exc).strip() or f"Could not connect to {self._display_name()}"
            if isinstance(exc, DatabaseConnectionError):
                LOG.info("Connection attempt failed", extra={"connection": connection.id, "dialect": dialect.value})
            else:
                LOG.warning(
                    "Database client raised an unexpected error",
                    exc_info=True,
                    extra={"connection": connection.id, "dialect": dialect.value},
                )
            self._fail(message)
            return self._status
        except asyncio.CancelledError:
            if not self._is_stale(attempt):
                self._fail("Connection attempt cancelled")
            raise
        if self._is_stale(attempt):
            LOG.debug("Discarding result of abandoned attempt", extra={"connection": connection.id})
            return self._status
        self._succeed(result, dialect, fields.get("username", ""))
        return self._status

    async def disconnect(self) -> None:
        """Drop the connection; the client release is best effort."""

        self._transition(ConnectionStatus.DISCONNECTED)
        self._tables = ()
        self._notify()
        try:
            await self._client.disconnect()
        except Exception as exc:
            LOG.warning(
                "Failed to release database connection",
                extra={"connection": self._connection.id, "error": str(exc)},
            )

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Subscribe to status updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        listener(self.snapshot())

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def close(self) -> None:
        """Detach from the manager and drop listeners."""

        if self._manager_unsubscribe:
            self._manager_unsubscribe()
            self._manager_unsubscribe = None
        self._listeners.clear()

    def _transition(self, target: ConnectionStatus) -> None:
        if target not in _TRANSITIONS[self._status]:
            raise InvalidTransitionError(self._status.value, target.value)
        LOG.debug(
            "Connection status changed",
            extra={"connection": self._connection.id, "from": self._status.value, "to": target.value},
        )
        self._status = target

    def _succeed(self, result: ConnectResult, dialect: Dialect, label: str) -> None:
        self._transition(ConnectionStatus.CONNECTED)
        self._tables = tuple(result.tables)
        self._log.append(LogEntry(timestamp=self._clock(), dialect=dialect, outcome="connected", label=label))
        self._notify()

    def _fail(self, message: str) -> None:
        self._transition(ConnectionStatus.ERROR)
        self._error_message = message
        self._notify()

    def _is_stale(self, attempt: int) -> bool:
        return attempt != self._attempt or self._status is not ConnectionStatus.CONNECTING

    def _handle_connection_change(self, connection: ConnectionObject) -> None:
        if connection is not self._connection:
            return
        if self._status is not ConnectionStatus.CONNECTING:
            return
        # Abandoning is not a user transition, so it bypasses the table.
        LOG.debug("Abandoning in-flight connection attempt", extra={"connection": connection.id})
        self._attempt += 1
        self._status = ConnectionStatus.DISCONNECTED
        self._notify()

    def _display_name(self) -> str:
        return self._manager.registry.display_name(self._connection.dialect)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in tuple(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                LOG.exception("Status listener failed", extra={"connection": self._connection.id})


__all__ = ["ConnectionStatusMachine", "StatusListener"]

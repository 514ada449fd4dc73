"""Shared dataclasses used across connection/status modules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .dialects import Dialect


class ConnectionStatus(str, Enum):
    """Lifecycle status of a connection object."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ConnectResult:
    """Payload returned by a database client on a successful connect."""

    tables: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LogEntry:
    """Record of one successful connection attempt."""

    timestamp: datetime
    dialect: Dialect
    outcome: str
    label: str = ""


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Status view handed to status listeners."""

    connection_id: str
    dialect: Dialect
    status: ConnectionStatus
    error_message: str | None
    log_count: int
    tables: tuple[str, ...]


__all__ = ["ConnectResult", "ConnectionStatus", "LogEntry", "StatusSnapshot"]

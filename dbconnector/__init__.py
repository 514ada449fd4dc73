"""Dialect-aware database connection settings and connection lifecycle."""

from __future__ import annotations

from .connection import ConnectionObject, ConnectionObjectManager
from .dialects import ConfigRegistry, Dialect, FieldDescriptor, FieldKind, OptionDescriptor
from .errors import (
    ConnectorError,
    DatabaseConnectionError,
    InvalidFieldError,
    InvalidTransitionError,
    UnknownDialectError,
)
from .models import ConnectionStatus, ConnectResult, LogEntry, StatusSnapshot
from .status import ConnectionStatusMachine

__version__ = "0.1.0"

__all__ = [
    "ConfigRegistry",
    "ConnectResult",
    "ConnectionObject",
    "ConnectionObjectManager",
    "ConnectionStatus",
    "ConnectionStatusMachine",
    "ConnectorError",
    "DatabaseConnectionError",
    "Dialect",
    "FieldDescriptor",
    "FieldKind",
    "InvalidFieldError",
    "InvalidTransitionError",
    "LogEntry",
    "OptionDescriptor",
    "StatusSnapshot",
    "UnknownDialectError",
]

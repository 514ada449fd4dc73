"""Error taxonomy shared by the registry, connection manager and status machine."""

from __future__ import annotations

from typing import Any


class ConnectorError(RuntimeError):
    """Base error for connector failures."""


class UnknownDialectError(ConnectorError, ValueError):
    """Raised when a dialect is outside the supported set."""

    def __init__(self, dialect: Any) -> None:
        self.dialect = dialect
        super().__init__(f"Unknown database dialect: {dialect!r}")


class InvalidFieldError(ConnectorError, LookupError):
    """Raised when a mutation names a field or option the active dialect lacks."""

    def __init__(self, dialect: str, name: str, *, kind: str = "field") -> None:
        self.dialect = dialect
        self.name = name
        self.kind = kind
        super().__init__(f"'{name}' is not a {kind} of the {dialect} dialect")


class InvalidTransitionError(ConnectorError):
    """Raised when the status machine is asked for an illegal transition."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move from '{current}' to '{target}'")


class DatabaseConnectionError(ConnectorError, ConnectionError):
    """Raised by database clients when a connect or disconnect call fails."""


__all__ = [
    "ConnectorError",
    "DatabaseConnectionError",
    "InvalidFieldError",
    "InvalidTransitionError",
    "UnknownDialectError",
]

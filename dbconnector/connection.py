"""Connection objects and the manager that keeps them consistent with their dialect."""

from __future__ import annotations

import logging
from pathlib import PurePath
from types import MappingProxyType
from typing import Callable, Mapping
from uuid import uuid4

from .dialects import DEFAULT_REGISTRY, ConfigRegistry, Dialect
from .errors import InvalidFieldError

LOG = logging.getLogger(__name__)

ConnectionListener = Callable[["ConnectionObject"], None]


class ConnectionObject:
    """Mutable record of one configured connection.

    Field and option values are exposed read-only; every write goes through
    `ConnectionObjectManager` so the key sets always match the dialect schema.
    """

    __slots__ = ("_id", "_dialect", "_fields", "_options", "_revision")

    def __init__(
        self,
        dialect: Dialect,
        fields: Mapping[str, str],
        options: Mapping[str, bool],
        *,
        connection_id: str | None = None,
    ) -> None:
        self._id = connection_id or uuid4().hex
        self._dialect = dialect
        self._fields = dict(fields)
        self._options = dict(options)
        self._revision = 0

    @property
    def id(self) -> str:
        return self._id

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def fields(self) -> Mapping[str, str]:
        return MappingProxyType(self._fields)

    @property
    def options(self) -> Mapping[str, bool]:
        return MappingProxyType(self._options)

    @property
    def revision(self) -> int:
        """Counter bumped on every change; stale connect results compare against it."""

        return self._revision

    def __repr__(self) -> str:
        return f"ConnectionObject(id={self._id!r}, dialect={self._dialect.value!r}, revision={self._revision})"


class ConnectionObjectManager:
    """The only mutation path for connection objects."""

    def __init__(
        self,
        registry: ConfigRegistry | None = None,
        *,
        default_dialect: Dialect | str = Dialect.MYSQL,
    ) -> None:
        self._registry = registry or DEFAULT_REGISTRY
        self._default_dialect = Dialect.parse(default_dialect)
        self._listeners: set[ConnectionListener] = set()

    @property
    def registry(self) -> ConfigRegistry:
        return self._registry

    def create(self, dialect: Dialect | str | None = None) -> ConnectionObject:
        """Create a connection object with empty values for the dialect's schema."""

        resolved = Dialect.parse(dialect if dialect is not None else self._default_dialect)
        fields, options = self._defaults(resolved)
        return ConnectionObject(resolved, fields, options)

    def set_dialect(self, obj: ConnectionObject, dialect: Dialect | str) -> None:
        """Switch dialects, discarding every field and option value."""

        resolved = Dialect.parse(dialect)
        fields, options = self._defaults(resolved)
        obj._dialect = resolved
        obj._fields = fields
        obj._options = options
        self._changed(obj)

    def set_field(self, obj: ConnectionObject, name: str, value: str) -> None:
        if name not in obj._fields:
            raise InvalidFieldError(obj.dialect.value, name, kind="field")
        if obj._fields[name] == value:
            return
        obj._fields[name] = value
        self._changed(obj)

    def toggle_option(self, obj: ConnectionObject, name: str) -> None:
        if name not in obj._options:
            raise InvalidFieldError(obj.dialect.value, name, kind="option")
        obj._options[name] = not obj._options[name]
        self._changed(obj)

    def derive_path_credential(self, obj: ConnectionObject, selected_path: str) -> None:
        """Store a selected database file and use its file name as the username."""

        for name in ("storage", "username"):
            if name not in obj._fields:
                raise InvalidFieldError(obj.dialect.value, name, kind="field")
        if not selected_path:
            raise ValueError("Selected path is empty.")
        obj._fields.update(storage=selected_path, username=PurePath(selected_path).name)
        self._changed(obj)

    def subscribe(self, listener: ConnectionListener) -> Callable[[], None]:
        """Subscribe to connection object changes; returns an unsubscribe handle."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _defaults(self, dialect: Dialect) -> tuple[dict[str, str], dict[str, bool]]:
        spec = self._registry.spec_for(dialect)
        return (
            {name: "" for name in spec.field_names},
            {name: False for name in spec.option_names},
        )

    def _changed(self, obj: ConnectionObject) -> None:
        obj._revision += 1
        for listener in tuple(self._listeners):
            try:
                listener(obj)
            except Exception:
                LOG.exception("Connection listener failed", extra={"connection": obj.id})


__all__ = ["ConnectionListener", "ConnectionObject", "ConnectionObjectManager"]

"""Static per-dialect field and option schemas.

Each dialect maps to a `DialectSpec` describing the connection fields shown in
the settings form (in display order) and the boolean options it supports. The
table is closed: lookups for anything outside `Dialect` raise
`UnknownDialectError` instead of returning an empty schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .errors import UnknownDialectError


class Dialect(str, Enum):
    """Supported database dialects."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"
    MSSQL = "mssql"
    ELASTICSEARCH = "elasticsearch"

    @classmethod
    def parse(cls, value: Dialect | str) -> Dialect:
        """Convert a raw identifier into a `Dialect`."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownDialectError(value) from None

    def __str__(self) -> str:
        return self.value


class FieldKind(str, Enum):
    """How a field is edited; drives input masking, not validation."""

    TEXT = "text"
    SECRET = "secret"
    PATH = "path"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    kind: FieldKind = FieldKind.TEXT
    placeholder: str = ""
    visible: bool = True


@dataclass(frozen=True, slots=True)
class OptionDescriptor:
    name: str
    label: str


@dataclass(frozen=True, slots=True)
class DialectSpec:
    """Schema and display data for a single dialect."""

    dialect: Dialect
    display_name: str
    fields: tuple[FieldDescriptor, ...]
    options: tuple[OptionDescriptor, ...] = ()
    is_file_based: bool = False

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    @property
    def option_names(self) -> tuple[str, ...]:
        return tuple(option.name for option in self.options)


_PLACEHOLDERS: Mapping[str, str] = {
    "port": "server port number (e.g. 3306)",
    "storage": "path to database",
    "host": "server name (e.g. localhost)",
}

_KINDS: Mapping[str, FieldKind] = {
    "password": FieldKind.SECRET,
    "storage": FieldKind.PATH,
}


def placeholder_for(name: str) -> str:
    """Placeholder text shown in an empty input for the named field."""

    return _PLACEHOLDERS.get(name, name)


def kind_for(name: str) -> FieldKind:
    return _KINDS.get(name, FieldKind.TEXT)


def _field(name: str, *, visible: bool = True) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        kind=kind_for(name),
        placeholder=placeholder_for(name),
        visible=visible,
    )


def _server_fields(*, database: bool = True) -> tuple[FieldDescriptor, ...]:
    names = ("username", "password", "host", "port") + (("database",) if database else ())
    return tuple(_field(name) for name in names)


_SSL = OptionDescriptor(name="ssl", label="SSL")

_SPECS: Mapping[Dialect, DialectSpec] = {
    Dialect.MYSQL: DialectSpec(
        dialect=Dialect.MYSQL,
        display_name="MySQL",
        fields=_server_fields(),
    ),
    Dialect.POSTGRES: DialectSpec(
        dialect=Dialect.POSTGRES,
        display_name="PostgreSQL",
        fields=_server_fields(),
        options=(_SSL,),
    ),
    Dialect.SQLITE: DialectSpec(
        dialect=Dialect.SQLITE,
        display_name="SQLite",
        # username is filled from the chosen file name and labels log entries
        fields=(_field("storage"), _field("username", visible=False)),
        is_file_based=True,
    ),
    Dialect.MSSQL: DialectSpec(
        dialect=Dialect.MSSQL,
        display_name="SQL Server",
        fields=_server_fields(),
    ),
    Dialect.ELASTICSEARCH: DialectSpec(
        dialect=Dialect.ELASTICSEARCH,
        display_name="Elasticsearch",
        fields=_server_fields(database=False),
        options=(_SSL,),
    ),
}


def _check_specs(specs: Mapping[Dialect, DialectSpec]) -> None:
    missing = [dialect.value for dialect in Dialect if dialect not in specs]
    if missing:
        raise RuntimeError(f"No schema registered for: {', '.join(missing)}")
    for dialect, spec in specs.items():
        if spec.dialect is not dialect:
            raise RuntimeError(f"Schema for {dialect.value} is registered as {spec.dialect.value}")
        overlap = set(spec.field_names) & set(spec.option_names)
        if overlap:
            raise RuntimeError(f"{dialect.value} reuses names as field and option: {sorted(overlap)}")


_check_specs(_SPECS)


class ConfigRegistry:
    """Read-only lookup from dialect to its field and option schema."""

    def __init__(self, specs: Mapping[Dialect, DialectSpec] | None = None) -> None:
        if specs is not None:
            _check_specs(specs)
        self._specs = dict(specs or _SPECS)

    def dialects(self) -> tuple[Dialect, ...]:
        return tuple(self._specs)

    def spec_for(self, dialect: Dialect | str) -> DialectSpec:
        return self._specs[Dialect.parse(dialect)]

    def fields_for(self, dialect: Dialect | str) -> tuple[FieldDescriptor, ...]:
        """Fields of the dialect in display order."""

        return self.spec_for(dialect).fields

    def options_for(self, dialect: Dialect | str) -> tuple[OptionDescriptor, ...]:
        """Boolean options of the dialect (possibly empty)."""

        return self.spec_for(dialect).options

    def field_names(self, dialect: Dialect | str) -> tuple[str, ...]:
        return self.spec_for(dialect).field_names

    def option_names(self, dialect: Dialect | str) -> tuple[str, ...]:
        return self.spec_for(dialect).option_names

    def display_name(self, dialect: Dialect | str) -> str:
        return self.spec_for(dialect).display_name


DEFAULT_REGISTRY = ConfigRegistry()


__all__ = [
    "ConfigRegistry",
    "DEFAULT_REGISTRY",
    "Dialect",
    "DialectSpec",
    "FieldDescriptor",
    "FieldKind",
    "OptionDescriptor",
    "kind_for",
    "placeholder_for",
]

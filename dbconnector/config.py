"""App configuration loading helpers."""

from __future__ import annotations

from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, field_validator

from .dialects import Dialect
from .integrations import DEFAULT_HELP_DOMAIN

CONFIG_FILE = Path.home() / ".config" / "dbconnector" / "config.toml"


class AppConfig(BaseModel):
    """Shape of the application configuration file.

    Only preferences live here; connection objects are never persisted.
    """

    theme: str = "dark"
    help_domain: str = DEFAULT_HELP_DOMAIN
    default_dialect: Dialect = Dialect.MYSQL
    connect_timeout: float | None = 10.0
    database_extensions: list[str] = Field(default_factory=lambda: ["db"])

    @field_validator("default_dialect", mode="before")
    @classmethod
    def _parse_dialect(cls, value: object) -> Dialect:
        return Dialect.parse(value)  # type: ignore[arg-type]

    @field_validator("connect_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            return None
        return value

    def with_default_dialect(self, dialect: Dialect | str) -> AppConfig:
        """Return a copy with the default dialect updated."""

        return self.model_copy(update={"default_dialect": Dialect.parse(dialect)})

    def with_theme(self, theme: str) -> AppConfig:
        return self.model_copy(update={"theme": theme})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()

    return AppConfig(
        theme=data.get("theme", AppConfig.model_fields["theme"].default),
        help_domain=data.get("help_domain", AppConfig.model_fields["help_domain"].default),
        default_dialect=data.get("default_dialect", AppConfig.model_fields["default_dialect"].default),
        connect_timeout=data.get("connect_timeout", AppConfig.model_fields["connect_timeout"].default),
        database_extensions=data.get("database_extensions", ["db"]),
    )


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [
        f'theme = "{config.theme}"',
        f'help_domain = "{config.help_domain}"',
        f'default_dialect = "{config.default_dialect.value}"',
    ]
    # 0 disables the timeout
    lines.append(f"connect_timeout = {config.connect_timeout or 0}")
    extensions = ", ".join(f'"{ext}"' for ext in config.database_extensions)
    lines.append(f"database_extensions = [{extensions}]")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    if isinstance(raw, dict):
        for key in ("theme", "help_domain"):
            value = raw.get(key)
            if isinstance(value, str) and value:
                data[key] = value
        dialect = raw.get("default_dialect")
        if isinstance(dialect, str) and dialect in {member.value for member in Dialect}:
            data["default_dialect"] = dialect
        timeout = raw.get("connect_timeout")
        if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
            data["connect_timeout"] = float(timeout)
        extensions = raw.get("database_extensions")
        if isinstance(extensions, list):
            parsed = [str(ext).lstrip(".") for ext in extensions if isinstance(ext, str) and ext.strip(".")]
            if parsed:
                data["database_extensions"] = parsed
    return data


__all__ = ["AppConfig", "CONFIG_FILE", "load_config", "save_config"]

"""Platform services injected into the connector: file picking and link opening."""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

from .connection import ConnectionObject, ConnectionObjectManager
from .dialects import Dialect

LOG = logging.getLogger(__name__)

DEFAULT_HELP_DOMAIN = "help.plot.ly"


@dataclass(frozen=True, slots=True)
class FileFilter:
    """Named group of file extensions offered by a file picker."""

    name: str
    extensions: tuple[str, ...]

    def matches(self, filename: str) -> bool:
        if not self.extensions:
            return True
        lowered = filename.lower()
        return any(lowered.endswith(f".{ext.lower().lstrip('.')}") for ext in self.extensions)


@runtime_checkable
class FilePicker(Protocol):
    """Lets the user choose a file; returns None when cancelled."""

    async def choose_file(self, filters: Sequence[FileFilter]) -> str | None: ...


@runtime_checkable
class ExternalLinkOpener(Protocol):
    """Fire-and-forget opener for external URLs."""

    def open(self, url: str) -> None: ...


class WebBrowserLinkOpener:
    """Opens links with the system browser."""

    def open(self, url: str) -> None:
        try:
            opened = webbrowser.open(url, new=2)
        except webbrowser.Error:
            LOG.exception("Failed to open link", extra={"url": url})
            return
        if not opened:
            LOG.warning("No browser available to open link", extra={"url": url})


def documentation_link(dialect: Dialect | str, help_domain: str = DEFAULT_HELP_DOMAIN) -> str:
    """URL of the connector documentation for a dialect."""

    return f"https://{help_domain}/database-connectors/{Dialect.parse(dialect).value}/"


def database_file_filters(extensions: Sequence[str] = ("db",)) -> tuple[FileFilter, ...]:
    return (FileFilter(name="databases", extensions=tuple(extensions)),)


async def choose_storage(
    manager: ConnectionObjectManager,
    connection: ConnectionObject,
    picker: FilePicker,
    filters: Sequence[FileFilter] | None = None,
) -> str | None:
    """Ask the picker for a database file and store it on the connection.

    Returns the selected path, or None when the user cancelled.
    """

    path = await picker.choose_file(tuple(filters) if filters is not None else database_file_filters())
    if not path:
        return None
    manager.derive_path_credential(connection, path)
    return path


__all__ = [
    "DEFAULT_HELP_DOMAIN",
    "ExternalLinkOpener",
    "FileFilter",
    "FilePicker",
    "WebBrowserLinkOpener",
    "choose_storage",
    "database_file_filters",
    "documentation_link",
]

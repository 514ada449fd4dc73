"""Status bar widget that mirrors the connection status."""

from __future__ import annotations

from typing import Callable

from textual.widgets import Static

from dbconnector.dialects import ConfigRegistry
from dbconnector.models import StatusSnapshot
from dbconnector.status import ConnectionStatusMachine


class StatusBar(Static):
    """Compact status strip rendered above Textual's footer."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, machine: ConnectionStatusMachine, registry: ConfigRegistry) -> None:
        super().__init__("", id="status-bar")
        self._machine = machine
        self._registry = registry
        self._unsubscribe: Callable[[], None] | None = None

    async def on_mount(self) -> None:
        self._unsubscribe = self._machine.subscribe(self.show_snapshot)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def show_snapshot(self, snapshot: StatusSnapshot) -> None:
        parts = [
            f"Dialect: {self._registry.display_name(snapshot.dialect)}",
            f"Status: {snapshot.status.value}",
            f"Log entries: {snapshot.log_count}",
            f"Tables: {len(snapshot.tables)}",
        ]
        if snapshot.error_message:
            reason = snapshot.error_message.splitlines()[0][:80]
            parts.append(f"Error: {reason}")
        self.update(" | ".join(parts))


__all__ = ["StatusBar"]

"""Log of successful connection attempts."""

from __future__ import annotations

from typing import Callable

from textual.widgets import Static

from dbconnector.models import StatusSnapshot
from dbconnector.status import ConnectionStatusMachine


class ConnectionLog(Static):
    """Lists log entries; the `entries-<n>` class exposes the count."""

    DEFAULT_CSS = """
    ConnectionLog {
        height: auto;
        min-height: 3;
        padding: 1 2;
        border-top: solid $surface-darken-1;
        color: $text-muted;
    }
    """

    def __init__(self, machine: ConnectionStatusMachine) -> None:
        super().__init__("No connections yet.", id="logs", classes="entries-0")
        self._machine = machine
        self._count = 0
        self._unsubscribe: Callable[[], None] | None = None

    async def on_mount(self) -> None:
        self._unsubscribe = self._machine.subscribe(self._handle_status_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_status_update(self, snapshot: StatusSnapshot) -> None:
        if snapshot.log_count == self._count:
            return
        self.remove_class(f"entries-{self._count}")
        self._count = snapshot.log_count
        self.add_class(f"entries-{self._count}")
        lines = [
            f"{entry.timestamp.astimezone().strftime('%H:%M:%S')}  {entry.dialect.value}  "
            f"{entry.label or '-'}  {entry.outcome}"
            for entry in reversed(self._machine.log)
        ]
        self.update("\n".join(lines))


__all__ = ["ConnectionLog"]

"""Connect/disconnect button plus the last error and table previews."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Button, Static

from dbconnector.models import ConnectionStatus, StatusSnapshot
from dbconnector.status import ConnectionStatusMachine

_BUTTON_LABELS = {
    ConnectionStatus.DISCONNECTED: "Connect",
    ConnectionStatus.CONNECTING: "Connecting…",
    ConnectionStatus.CONNECTED: "Disconnect",
    ConnectionStatus.ERROR: "Retry",
}


class ConnectPanel(Vertical):
    """Mirrors the status machine; the button press is handled by the app."""

    DEFAULT_CSS = """
    ConnectPanel {
        height: auto;
        padding: 0 2;
    }

    #connect-button.status-connected {
        background: $success;
    }

    #connect-button.status-error {
        background: $error;
    }

    #error-message {
        color: $error;
        margin-top: 1;
    }

    #table-previews {
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, machine: ConnectionStatusMachine) -> None:
        super().__init__(id="connect-panel")
        self._machine = machine
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        yield Button("Connect", id="connect-button")
        yield Static("", id="error-message")
        yield Static("", id="table-previews")

    async def on_mount(self) -> None:
        self._unsubscribe = self._machine.subscribe(self._handle_status_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_status_update(self, snapshot: StatusSnapshot) -> None:
        button = self.query_one("#connect-button", Button)
        button.label = _BUTTON_LABELS[snapshot.status]
        button.disabled = snapshot.status is ConnectionStatus.CONNECTING
        for status in ConnectionStatus:
            button.set_class(status is snapshot.status, f"status-{status.value}")
        error = snapshot.error_message if snapshot.status is ConnectionStatus.ERROR else None
        self.query_one("#error-message", Static).update(error or "")
        previews = ""
        if snapshot.tables:
            previews = "Tables: " + ", ".join(snapshot.tables)
        self.query_one("#table-previews", Static).update(previews)


__all__ = ["ConnectPanel"]

"""Textual application entry point for dbconnector."""

from __future__ import annotations

import logging
from typing import Mapping

from textual import on
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Button, Footer, Header

from .clients import DatabaseClient, DemoDatabaseClient, TimeoutDatabaseClient
from .config import AppConfig, load_config, save_config
from .connection import ConnectionObject, ConnectionObjectManager
from .dialects import DEFAULT_REGISTRY, ConfigRegistry, Dialect
from .integrations import (
    ExternalLinkOpener,
    FilePicker,
    WebBrowserLinkOpener,
    choose_storage,
    database_file_filters,
    documentation_link,
)
from .models import ConnectionStatus
from .providers import ConnectionCommandsProvider, DialectSwitchProvider
from .status import ConnectionStatusMachine
from .widgets import ConnectionLog, ConnectPanel, DialectSelector, ScreenFilePicker, SettingsForm, StatusBar

LOG = logging.getLogger(__name__)


def _load_app_config() -> AppConfig:
    """Load configuration with a small wrapper for future overrides."""

    return load_config()


def _resolve_theme(name: str, available: Mapping[str, object]) -> str:
    """Map a configured theme (`dark`, `light` or a Textual theme name) onto a registered theme."""

    for candidate in (name, f"textual-{name}"):
        if candidate in available:
            return candidate
    LOG.warning("Unknown theme in config, using the default", extra={"theme": name})
    return "textual-dark"


class ConnectorApp(App[None]):
    """Settings view for a single database connection slot."""

    TITLE = "Database Connector"
    COMMANDS = App.COMMANDS | {DialectSwitchProvider, ConnectionCommandsProvider}
    CSS = """
    Screen {
        layout: vertical;
    }
    #settings {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+o", "toggle_connection", "Connect/Disconnect"),
        ("ctrl+d", "open_documentation", "Documentation"),
        ("ctrl+p", "command_palette", "Command Palette"),
    ]

    def __init__(
        self,
        *,
        config: AppConfig | None = None,
        client: DatabaseClient | None = None,
        file_picker: FilePicker | None = None,
        link_opener: ExternalLinkOpener | None = None,
        registry: ConfigRegistry | None = None,
    ) -> None:
        super().__init__()
        self._config = config or _load_app_config()
        self._config_registry = registry or DEFAULT_REGISTRY
        self._manager = ConnectionObjectManager(self._config_registry, default_dialect=self._config.default_dialect)
        self._connection = self._manager.create()
        database_client: DatabaseClient = client or DemoDatabaseClient()
        if self._config.connect_timeout is not None:
            database_client = TimeoutDatabaseClient(database_client, self._config.connect_timeout)
        self._machine = ConnectionStatusMachine(self._manager, self._connection, database_client)
        self._file_picker: FilePicker = file_picker or ScreenFilePicker(self)
        self._link_opener: ExternalLinkOpener = link_opener or WebBrowserLinkOpener()

    def on_mount(self) -> None:
        self.theme = _resolve_theme(self._config.theme, self.available_themes)

    def compose(self) -> ComposeResult:
        """Compose the root layout."""

        yield Header(show_clock=True)
        yield DialectSelector(self._config_registry, selected=self._connection.dialect)
        with VerticalScroll(id="settings"):
            yield SettingsForm(self._manager, self._connection)
            yield ConnectPanel(self._machine)
        yield ConnectionLog(self._machine)
        yield StatusBar(self._machine, self._config_registry)
        yield Footer()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def registry(self) -> ConfigRegistry:
        return self._config_registry

    @property
    def manager(self) -> ConnectionObjectManager:
        return self._manager

    @property
    def connection(self) -> ConnectionObject:
        """The connection object edited by this settings view."""

        return self._connection

    @property
    def machine(self) -> ConnectionStatusMachine:
        return self._machine

    async def switch_dialect(self, dialect: Dialect | str) -> None:
        """Switch the connection to another dialect and remember the choice."""

        resolved = Dialect.parse(dialect)
        self._manager.set_dialect(self._connection, resolved)
        self.query_one(DialectSelector).select(resolved)
        await self.query_one(SettingsForm).recompose()
        self.query_one(StatusBar).show_snapshot(self._machine.snapshot())
        if self._config.default_dialect is not resolved:
            self._config = self._config.with_default_dialect(resolved)
            save_config(self._config)

    def action_toggle_connection(self) -> None:
        status = self._machine.status
        if status is ConnectionStatus.CONNECTING:
            return
        if status is ConnectionStatus.CONNECTED:
            self.run_worker(self._machine.disconnect(), group="connection")
        else:
            self.run_worker(self._machine.connect(), group="connection")

    def action_open_documentation(self) -> None:
        url = documentation_link(self._connection.dialect, self._config.help_domain)
        try:
            self._link_opener.open(url)
        except Exception:
            LOG.exception("Failed to open documentation link", extra={"url": url})

    def action_browse_storage(self) -> None:
        if not self._config_registry.spec_for(self._connection.dialect).is_file_based:
            return
        self.run_worker(self._browse_storage(), group="browse", exclusive=True)

    async def _browse_storage(self) -> None:
        filters = database_file_filters(self._config.database_extensions)
        path = await choose_storage(self._manager, self._connection, self._file_picker, filters)
        if path is None:
            return
        self.query_one(SettingsForm).sync_values()

    async def on_dialect_selector_selected(self, message: DialectSelector.Selected) -> None:
        await self.switch_dialect(message.dialect)

    def on_settings_form_documentation_requested(self, message: SettingsForm.DocumentationRequested) -> None:
        self.action_open_documentation()

    def on_settings_form_browse_requested(self, message: SettingsForm.BrowseRequested) -> None:
        self.action_browse_storage()

    @on(Button.Pressed, "#connect-button")
    def _handle_connect_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.action_toggle_connection()

    async def _shutdown(self) -> None:
        self._machine.close()
        await super()._shutdown()


def main() -> None:
    """Invoke the Textual application."""

    ConnectorApp().run()


if __name__ == "__main__":
    main()

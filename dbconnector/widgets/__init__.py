"""Widget library for the Textual UI."""

from __future__ import annotations

from .connect_panel import ConnectPanel
from .connection_log import ConnectionLog
from .dialect_selector import DialectSelector
from .file_chooser import FileChooserScreen, ScreenFilePicker
from .settings_form import SettingsForm
from .status_bar import StatusBar

__all__ = [
    "ConnectPanel",
    "ConnectionLog",
    "DialectSelector",
    "FileChooserScreen",
    "ScreenFilePicker",
    "SettingsForm",
    "StatusBar",
]

"""Row of dialect buttons used to pick the database backend."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button

from dbconnector.dialects import ConfigRegistry, Dialect


class DialectSelector(Horizontal):
    """One button per supported dialect; the active one carries the `selected` class."""

    DEFAULT_CSS = """
    DialectSelector {
        height: auto;
        padding: 0 1;
        border-bottom: solid $surface-darken-1;
    }

    DialectSelector .logo {
        margin-right: 1;
    }

    DialectSelector .logo.selected {
        background: $primary;
        text-style: bold;
    }
    """

    class Selected(Message):
        """Posted when the user picks a dialect."""

        def __init__(self, dialect: Dialect) -> None:
            super().__init__()
            self.dialect = dialect

    def __init__(self, registry: ConfigRegistry, *, selected: Dialect) -> None:
        super().__init__(id="dialect-selector")
        self._registry = registry
        self._selected = selected

    @property
    def selected(self) -> Dialect:
        return self._selected

    def compose(self) -> ComposeResult:
        for dialect in self._registry.dialects():
            button = Button(
                self._registry.display_name(dialect),
                id=f"logo-{dialect.value}",
                classes="logo",
                name=dialect.value,
            )
            button.set_class(dialect is self._selected, "selected")
            yield button

    def select(self, dialect: Dialect) -> None:
        """Highlight the given dialect without posting a message."""

        self._selected = dialect
        for button in self.query(".logo").results(Button):
            button.set_class(button.name == dialect.value, "selected")

    @on(Button.Pressed, ".logo")
    def _handle_logo_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.name is None:
            return
        self.post_message(self.Selected(Dialect.parse(event.button.name)))


__all__ = ["DialectSelector"]

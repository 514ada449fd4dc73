"""Dialect-specific connection settings form."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Checkbox, Input, Label

from dbconnector.connection import ConnectionObject, ConnectionObjectManager
from dbconnector.dialects import FieldKind


class SettingsForm(Vertical):
    """Inputs for the fields and options of the connection's current dialect.

    The form is rebuilt with `recompose()` after a dialect switch; edits are
    written straight through the connection manager.
    """

    DEFAULT_CSS = """
    SettingsForm {
        height: auto;
        padding: 1 2;
    }

    SettingsForm .field-row {
        height: auto;
    }

    SettingsForm .input-name {
        width: 12;
        padding-top: 1;
        color: $text-muted;
    }

    SettingsForm .connection-input {
        width: 1fr;
    }

    SettingsForm .options {
        height: auto;
        margin-top: 1;
    }
    """

    class DocumentationRequested(Message):
        """Posted when the documentation link is activated."""

    class BrowseRequested(Message):
        """Posted when the user asks to pick a file for a path field."""

        def __init__(self, field_name: str) -> None:
            super().__init__()
            self.field_name = field_name

    def __init__(self, manager: ConnectionObjectManager, connection: ConnectionObject) -> None:
        super().__init__(id="settings-form")
        self._manager = manager
        self._connection = connection

    def compose(self) -> ComposeResult:
        spec = self._manager.registry.spec_for(self._connection.dialect)
        yield Button(
            f"{spec.display_name} documentation",
            id="documentation-link",
            variant="primary",
            flat=True,
        )
        for field in spec.fields:
            if not field.visible:
                continue
            with Horizontal(classes="field-row"):
                yield Label(field.name, classes="input-name")
                yield Input(
                    value=self._connection.fields[field.name],
                    placeholder=field.placeholder,
                    password=field.kind is FieldKind.SECRET,
                    id=f"input-{field.name}",
                    name=field.name,
                    classes="connection-input",
                )
                if field.kind is FieldKind.PATH:
                    yield Button("Browse", id=f"browse-{field.name}", name=field.name, classes="browse")
        if spec.options:
            with Horizontal(classes="options"):
                for option in spec.options:
                    yield Checkbox(
                        option.label,
                        value=self._connection.options[option.name],
                        id=f"option-{option.name}",
                        name=option.name,
                    )

    def sync_values(self) -> None:
        """Copy field values from the connection object into the inputs."""

        for field_input in self.query(".connection-input").results(Input):
            name = field_input.name
            if name is None:
                continue
            value = self._connection.fields.get(name, "")
            if field_input.value != value:
                field_input.value = value

    @on(Input.Changed, ".connection-input")
    def _handle_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        name = event.input.name
        if name is None or name not in self._connection.fields:
            return
        self._manager.set_field(self._connection, name, event.value)

    @on(Checkbox.Changed)
    def _handle_option_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        name = event.checkbox.name
        if name is None or name not in self._connection.options:
            return
        if self._connection.options[name] != event.value:
            self._manager.toggle_option(self._connection, name)

    @on(Button.Pressed, "#documentation-link")
    def _handle_documentation_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(self.DocumentationRequested())

    @on(Button.Pressed, ".browse")
    def _handle_browse_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.name:
            self.post_message(self.BrowseRequested(event.button.name))


__all__ = ["SettingsForm"]

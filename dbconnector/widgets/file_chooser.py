"""Modal file chooser backing the TUI's file picker."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DirectoryTree, Label

from dbconnector.integrations import FileFilter


class _FilteredDirectoryTree(DirectoryTree):
    """Directory tree that only lists folders and files matching the filters."""

    def __init__(self, path: str | Path, filters: Sequence[FileFilter]) -> None:
        super().__init__(path, id="file-tree")
        self._filters = tuple(filters)

    def filter_paths(self, paths: Iterable[Path]) -> Iterable[Path]:
        if not self._filters:
            return paths
        return [
            path
            for path in paths
            if path.is_dir() or any(file_filter.matches(path.name) for file_filter in self._filters)
        ]


class FileChooserScreen(ModalScreen[str | None]):
    """Pick a database file; dismisses with the path or None when cancelled."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = """
    FileChooserScreen {
        align: center middle;
    }

    #file-chooser {
        width: 70;
        max-width: 90%;
        height: 24;
        border: round $primary;
        padding: 1;
        background: $surface;
    }

    #file-tree {
        height: 1fr;
    }
    """

    def __init__(self, filters: Sequence[FileFilter], *, root: str | Path = ".") -> None:
        super().__init__()
        self._filters = tuple(filters)
        self._root = root

    def compose(self) -> ComposeResult:
        names = ", ".join(f"{item.name} (*.{' *.'.join(item.extensions)})" for item in self._filters)
        with Vertical(id="file-chooser"):
            yield Label(f"Choose a file: {names}" if names else "Choose a file")
            yield _FilteredDirectoryTree(self._root, self._filters)
            yield Button("Cancel", id="file-chooser-cancel")

    @on(DirectoryTree.FileSelected)
    def _handle_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        event.stop()
        self.dismiss(str(event.path))

    @on(Button.Pressed, "#file-chooser-cancel")
    def _handle_cancel_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ScreenFilePicker:
    """File picker that pushes `FileChooserScreen`; must run inside a worker."""

    def __init__(self, app: App, *, root: str | Path = ".") -> None:
        self._app = app
        self._root = root

    async def choose_file(self, filters: Sequence[FileFilter]) -> str | None:
        return await self._app.push_screen_wait(FileChooserScreen(filters, root=self._root))


__all__ = ["FileChooserScreen", "ScreenFilePicker"]

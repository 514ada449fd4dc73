"""Command palette providers for core app features."""

from __future__ import annotations

import inspect

from textual.command import DiscoveryHit, Hit, Hits, Provider
from textual.types import IgnoreReturnCallbackType

from .dialects import ConfigRegistry, Dialect


class DialectSwitchProvider(Provider):
    """Expose the supported dialects to the command palette."""

    async def search(self, query: str) -> Hits:
        registry = self._registry
        if registry is None:
            return
        matcher = self.matcher(query)
        for dialect in registry.dialects():
            label = f"Switch dialect: {registry.display_name(dialect)}"
            match = matcher.match(label)
            if match > 0:
                yield Hit(
                    score=match,
                    match_display=matcher.highlight(label),
                    command=self._build_callback(dialect),
                    help="Reset the connection settings for another database.",
                )

    async def discover(self) -> Hits:
        registry = self._registry
        if registry is None:
            return
        for dialect in registry.dialects():
            yield DiscoveryHit(
                display=f"Switch dialect: {registry.display_name(dialect)}",
                command=self._build_callback(dialect),
                help="Reset the connection settings for another database.",
            )

    @property
    def _registry(self) -> ConfigRegistry | None:
        registry = getattr(self.app, "registry", None)
        if isinstance(registry, ConfigRegistry):
            return registry
        return None

    def _build_callback(self, dialect: Dialect) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            switcher = getattr(self.app, "switch_dialect", None)
            if switcher is None:
                return
            result = switcher(dialect)
            if inspect.isawaitable(result):
                await result

        return _run


class ConnectionCommandsProvider(Provider):
    """Expose connect/disconnect and documentation actions."""

    _COMMANDS = (
        ("Connect / disconnect", "toggle_connection", "Trigger the connect button."),
        ("Open dialect documentation", "open_documentation", "Open the connector docs in a browser."),
    )

    async def search(self, query: str) -> Hits:
        matcher = self.matcher(query)
        for label, action, help_text in self._COMMANDS:
            score = matcher.match(label)
            if score > 0:
                yield Hit(
                    score=score,
                    match_display=matcher.highlight(label),
                    command=self._build_callback(action),
                    help=help_text,
                )

    async def discover(self) -> Hits:
        for label, action, help_text in self._COMMANDS:
            yield DiscoveryHit(
                display=label,
                command=self._build_callback(action),
                help=help_text,
            )

    def _build_callback(self, action: str) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            handler = getattr(self.app, f"action_{action}", None)
            if handler is None:
                return
            handler()

        return _run


__all__ = ["ConnectionCommandsProvider", "DialectSwitchProvider"]

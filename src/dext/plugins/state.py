"""Plugin enabled-state: accessor over the enabledPlugins map in the config store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import PluginState

if TYPE_CHECKING:
    from dext.core.config import ConfigStore

ENABLED_KEY = "enabledPlugins"


class PluginRegistry:
    """Reads and writes which plugins are enabled. Performs no validation."""

    def __init__(self, store: ConfigStore):
        self.store = store

    def _enabled_map(self) -> dict[str, bool]:
        enabled = self.store.get(ENABLED_KEY, {})
        if not isinstance(enabled, dict):
            return {}
        return enabled

    def _set(self, name: str, value: bool) -> None:
        enabled = self._enabled_map()
        enabled[name] = value
        self.store.set(ENABLED_KEY, enabled)

    def is_enabled(self, name: str) -> bool:
        return self._enabled_map().get(name) is True

    def enable(self, name: str) -> None:
        self._set(name, True)

    def disable(self, name: str) -> None:
        self._set(name, False)

    def state(self, name: str) -> PluginState:
        enabled = self._enabled_map()
        if name not in enabled:
            return PluginState.UNKNOWN
        return PluginState.ENABLED if enabled[name] is True else PluginState.DISABLED

    def names(self) -> list[str]:
        """Sorted names of every recorded plugin, enabled or not."""
        return sorted(self._enabled_map())

    def enabled(self) -> list[str]:
        """Sorted names of all enabled plugins."""
        return sorted(name for name, value in self._enabled_map().items() if value is True)

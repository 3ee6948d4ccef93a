"""Plugin lifecycle: install, uninstall, dev link/unlink, theme switching.

Every operation runs the same protocol: check preconditions (the first one
violated raises), perform the external side effect, then commit the new
state. State is only committed once the side effect has succeeded.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dext.core.config import ConfigStore
from dext.core.logging import get_logger
from dext.core.utils import plugin_path
from dext.errors import (
    InvalidPluginName,
    ModuleDisabled,
    ModuleDownloadError,
    ModuleEnabled,
    ModuleLinkFailed,
    ModuleNotFound,
    ModuleRemoveFailed,
    RegistryError,
    ThemeAlreadyActive,
)

from .models import LinkResult, UnlinkResult
from .state import PluginRegistry

if TYPE_CHECKING:
    from dext.core.config import Settings

    from .protocols import FileSystem, RegistryClient, Runner

log = get_logger(__name__)

THEME_KEY = "theme"


class LifecycleManager:
    """Validated plugin state transitions over injected collaborators."""

    def __init__(
        self,
        store: ConfigStore,
        registry: RegistryClient,
        runner: Runner,
        fs: FileSystem,
        plugins_dir: Path,
        install_command: str = "npm",
    ):
        self.store = store
        self.plugins = PluginRegistry(store)
        self.registry = registry
        self.runner = runner
        self.fs = fs
        self.plugins_dir = Path(plugins_dir)
        self.install_command = install_command
        # one lock per plugin name: check and commit must not interleave
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()
        self._theme_lock = asyncio.Lock()

    @asynccontextmanager
    async def _locked(self, plugin: str) -> AsyncIterator[None]:
        """Hold the lock for *plugin*; the lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(plugin, asyncio.Lock())
        self._lock_users[plugin] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[plugin] -= 1
            if not self._lock_users[plugin]:
                del self._lock_users[plugin]
                del self._locks[plugin]

    def plugin_path(self, plugin: str) -> Path:
        try:
            return plugin_path(self.plugins_dir, plugin)
        except ValueError as e:
            raise InvalidPluginName(plugin) from e

    async def check_on_registry(self, plugin: str) -> bool:
        """True if *plugin* is published in the registry."""
        return await self.registry.exists(plugin)

    async def install(self, plugin: str, output_dir: Path) -> None:
        """Fetch *plugin* into *output_dir*, install its dependencies, enable it."""
        async with self._locked(plugin):
            if self.plugins.is_enabled(plugin):
                raise ModuleEnabled(plugin)

            if not await self.registry.exists(plugin):
                raise ModuleNotFound(plugin)

            try:
                path = await self.registry.fetch(plugin, Path(output_dir))
            except RegistryError as e:
                log.warning("fetch failed", plugin=plugin, error=str(e))
                raise ModuleDownloadError(plugin) from e

            args = ["install", "--prefix", str(path)]
            code = await self.runner.run(self.install_command, args, path)
            if code:
                # the fetched directory stays on disk; nothing is enabled
                log.warning("dependency install failed", plugin=plugin, path=str(path), code=code)
                raise ModuleDownloadError(plugin)

            self.plugins.enable(plugin)
            log.info("installed", plugin=plugin, path=str(path))

    async def uninstall(self, plugin: str, src_dir: Path) -> None:
        """Remove *src_dir* and disable *plugin*. The plugin stays enabled if removal fails."""
        async with self._locked(plugin):
            if not self.plugins.is_enabled(plugin):
                raise ModuleDisabled(plugin)

            try:
                await self.fs.remove_all(Path(src_dir))
            except OSError as e:
                log.warning("remove failed", plugin=plugin, path=str(src_dir), error=str(e))
                raise ModuleRemoveFailed(plugin) from e

            self.plugins.disable(plugin)
            log.info("uninstalled", plugin=plugin, path=str(src_dir))

    async def create_symlink(self, plugin: str, src_path: Path) -> LinkResult:
        """Link a local development copy into the plugins directory and enable it."""
        async with self._locked(plugin):
            src = Path(src_path)
            dest = self.plugin_path(plugin)
            try:
                self.fs.link(src, dest)
            except OSError as e:
                log.warning(
                    "link failed", plugin=plugin, src=str(src), dest=str(dest), error=str(e)
                )
                raise ModuleLinkFailed(plugin) from e

            self.plugins.enable(plugin)
            log.info("linked", plugin=plugin, src=str(src), dest=str(dest))
            return LinkResult(src_path=src, dest_path=dest)

    async def remove_symlink(self, plugin: str) -> UnlinkResult:
        """Remove the development link for *plugin* and disable it."""
        async with self._locked(plugin):
            dest = self.plugin_path(plugin)
            try:
                self.fs.unlink(dest)
            except FileNotFoundError:
                log.debug("link already gone", plugin=plugin, dest=str(dest))
            except OSError as e:
                log.warning("unlink failed", plugin=plugin, dest=str(dest), error=str(e))
                raise ModuleLinkFailed(plugin) from e

            self.plugins.disable(plugin)
            log.info("unlinked", plugin=plugin, dest=str(dest))
            return UnlinkResult(dest_path=dest)

    async def set_theme(self, theme: str) -> None:
        """Make the enabled plugin *theme* the active theme."""
        async with self._theme_lock:
            if self.store.get(THEME_KEY) == theme:
                raise ThemeAlreadyActive(theme)

            if not self.plugins.is_enabled(theme):
                raise ModuleDisabled(theme)

            self.store.set(THEME_KEY, theme)
            log.info("theme switched", theme=theme)

    async def get_theme(self) -> str:
        return self.store.get(THEME_KEY) or ""

    async def get_config(self) -> dict[str, Any]:
        return self.store.store


def create_manager(settings: Settings) -> LifecycleManager:
    """Wire a manager to the real registry, npm and filesystem from *settings*."""
    from .fs import FileOps
    from .process import ProcessRunner
    from .registry import NpmRegistry

    return LifecycleManager(
        store=ConfigStore(settings.config_path),
        registry=NpmRegistry(settings.registry_url),
        runner=ProcessRunner(timeout=settings.install_timeout),
        fs=FileOps(),
        plugins_dir=settings.plugins_dir,
        install_command=settings.install_command,
    )

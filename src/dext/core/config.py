"""Configuration: settings from env, persistent config store."""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from dext.core.logging import get_logger

log = get_logger(__name__)

DEFAULT_REGISTRY = "https://registry.npmjs.org"

# Keys every config document carries.
DEFAULT_DOCUMENT: dict[str, Any] = {"theme": "", "enabledPlugins": {}}


@dataclass
class Settings:
    home: Path = field(default_factory=lambda: Path.home() / ".dext")
    config_file: Path | None = None  # explicit override; None = home/config.json
    plugin_dir: Path | None = None  # explicit override; None = home/plugins
    registry_url: str = DEFAULT_REGISTRY
    install_command: str = "npm"
    install_timeout: float = 300.0
    verbose: bool = False

    @property
    def config_path(self) -> Path:
        if self.config_file is not None:
            return self.config_file
        return self.home / "config.json"

    @property
    def plugins_dir(self) -> Path:
        if self.plugin_dir is not None:
            return self.plugin_dir
        return self.home / "plugins"


def load_settings(verbose: bool = False) -> Settings:
    """Load settings with priority: CLI args > env > .env > defaults."""
    load_dotenv()

    settings = Settings()
    settings.verbose = verbose

    if home := os.getenv("DEXT_HOME"):
        settings.home = Path(home).expanduser()
    if config_file := os.getenv("DEXT_CONFIG"):
        settings.config_file = Path(config_file).expanduser()
    if plugin_dir := os.getenv("DEXT_PLUGINS_DIR"):
        settings.plugin_dir = Path(plugin_dir).expanduser()
    if registry := os.getenv("DEXT_REGISTRY"):
        settings.registry_url = registry.rstrip("/")
    if npm := os.getenv("DEXT_NPM"):
        settings.install_command = npm
    if timeout := os.getenv("DEXT_INSTALL_TIMEOUT"):
        try:
            settings.install_timeout = float(timeout)
        except ValueError:
            log.warning(
                "ignoring invalid DEXT_INSTALL_TIMEOUT",
                value=timeout,
                default=settings.install_timeout,
            )

    return settings


def _read_document(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _write_document(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")


class ConfigStore:
    """Key-value config document backed by a JSON file.

    Loaded once on construction; every ``set`` rewrites the file.
    """

    def __init__(self, path: Path, defaults: dict[str, Any] | None = None):
        self.path = Path(path)
        base = copy.deepcopy(DEFAULT_DOCUMENT if defaults is None else defaults)
        base.update(_read_document(self.path))
        self._data = base

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._data.get(key, default))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        _write_document(self.path, self._data)

    @property
    def store(self) -> dict[str, Any]:
        """Snapshot of the whole document."""
        return copy.deepcopy(self._data)

"""Plugin data models: PluginState, PackageInfo, link results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PluginState(str, Enum):
    """Lifecycle state of a plugin as recorded in the config store.

    - unknown: the name has never been recorded.
    - disabled: recorded, but not active (uninstalled, unlinked or switched off).
    - enabled: active; the host loads it.
    """

    UNKNOWN = "unknown"
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass
class PackageInfo:
    """Latest published release of a registry package."""

    name: str
    version: str
    tarball: str


@dataclass
class LinkResult:
    src_path: Path
    dest_path: Path


@dataclass
class UnlinkResult:
    dest_path: Path

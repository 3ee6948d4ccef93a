"""Plugins: enabled state, registry client, lifecycle management."""

from .fs import FileOps
from .lifecycle import LifecycleManager, create_manager
from .models import LinkResult, PackageInfo, PluginState, UnlinkResult
from .process import ProcessRunner
from .registry import NpmRegistry
from .state import PluginRegistry

__all__ = [
    "FileOps",
    "LifecycleManager",
    "LinkResult",
    "NpmRegistry",
    "PackageInfo",
    "PluginRegistry",
    "PluginState",
    "ProcessRunner",
    "UnlinkResult",
    "create_manager",
]

"""Path helpers: canonical plugin paths, package names, display paths."""

from __future__ import annotations

import json
import os
from pathlib import Path


def plugin_path(plugins_dir: Path, name: str) -> Path:
    """Canonical on-disk location of *name* under *plugins_dir*.

    Scoped names (``@scope/pkg``) map to a nested directory, as npm lays them out.
    Raises ValueError if *name* would escape *plugins_dir*.
    """
    base = os.path.normpath(os.path.abspath(plugins_dir))
    dest = os.path.normpath(os.path.join(base, name))
    if not name or os.path.commonpath([base, dest]) != base or dest == base:
        raise ValueError(f"Path traversal detected: plugin name {name!r} escapes {base}")
    return Path(plugins_dir) / name


def package_name(path: Path) -> str:
    """Read the package name from *path*/package.json, falling back to the directory name."""
    manifest = Path(path) / "package.json"
    if manifest.is_file():
        try:
            data = json.loads(manifest.read_text())
        except (json.JSONDecodeError, OSError):
            data = {}
        if isinstance(data, dict) and isinstance(data.get("name"), str) and data["name"]:
            return data["name"]
    return Path(path).resolve().name


def short_path(p: Path) -> str:
    """Return path relative to home directory, using ~ prefix."""
    try:
        rel = Path(p).relative_to(Path.home())
        return f"~/{rel}" if str(rel) != "." else "~"
    except ValueError:
        return str(p)

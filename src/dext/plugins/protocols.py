"""Protocols (ports) for the lifecycle manager's external collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol


class RegistryClient(Protocol):
    """Answers whether a package exists and fetches it into a directory."""

    async def exists(self, name: str) -> bool: ...
    async def fetch(self, name: str, dest_dir: Path) -> Path: ...


class Runner(Protocol):
    """Runs an external command and reports its exit status."""

    async def run(self, command: str, args: Sequence[str], cwd: Path) -> int: ...


class FileSystem(Protocol):
    """Link creation/removal and recursive delete. Failures raise OSError."""

    async def remove_all(self, path: Path) -> None: ...
    def link(self, src: Path, dest: Path) -> None: ...
    def unlink(self, dest: Path) -> None: ...

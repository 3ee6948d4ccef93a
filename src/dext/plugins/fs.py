"""Filesystem ops: plugin links and recursive removal."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path


class FileOps:
    async def remove_all(self, path: Path) -> None:
        """Recursively delete *path*. A symlink is removed, never followed.

        A path that does not exist counts as removed.
        """
        path = Path(path)
        if not path.exists() and not path.is_symlink():
            return
        if path.is_symlink() or path.is_file():
            await asyncio.to_thread(path.unlink)
            return
        await asyncio.to_thread(shutil.rmtree, path)

    def link(self, src: Path, dest: Path) -> None:
        """Link *dest* to the directory *src*.

        Directories cannot be hard-linked, so this is a symbolic link to the
        absolute source path.
        """
        src = Path(src).resolve()
        if not src.exists():
            raise FileNotFoundError(f"no such file or directory: {src}")
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(src, dest, target_is_directory=src.is_dir())

    def unlink(self, dest: Path) -> None:
        Path(dest).unlink()

"""Process runner: run an install command in a plugin directory, report the exit code."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from dext.core.logging import get_logger

log = get_logger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = -1


class ProcessRunner:
    def __init__(self, timeout: float | None = 300.0):
        self.timeout = timeout

    async def run(self, command: str, args: Sequence[str], cwd: Path) -> int:
        """Run *command* with *args* in *cwd*. Returns the exit code, never raises on failure."""
        argv = [command, *args]
        log.debug("running", argv=argv, cwd=str(cwd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
            log.warning("command not runnable", argv=argv, error=str(e))
            return EXIT_NOT_FOUND

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            log.warning("command timed out", argv=argv, timeout=self.timeout)
            return EXIT_TIMEOUT

        if proc.returncode:
            log.warning(
                "command failed",
                argv=argv,
                code=proc.returncode,
                stderr=stderr.decode("utf-8", errors="replace")[-2000:],
            )
        else:
            log.debug("command finished", argv=argv, code=proc.returncode)
        return proc.returncode

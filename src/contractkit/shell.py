"""Asynchronous invocation of external tools."""

from __future__ import annotations

import asyncio
import logging
import shlex
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# exit status reported when the executable could not be started at all
SPAWN_FAILED = 127


class ToolResult(BaseModel):
    """Captured outcome of one external process."""

    model_config = ConfigDict(frozen=True)

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return shlex.join(self.argv)

    def error_text(self) -> str:
        """Best available description of a failure."""
        text = self.stderr.strip() or self.stdout.strip()
        return text or f"exited with status {self.returncode}"


ToolRunner = Callable[..., Awaitable[ToolResult]]


async def run_tool(
    argv: Sequence[str],
    *,
    cwd: Path | None = None,
    stdin: bytes | None = None,
) -> ToolResult:
    """Run a command to completion and capture its output.

    The command is never passed through a shell. There is no timeout: the
    caller suspends until the process exits.
    """
    args = [str(a) for a in argv]
    logger.debug("Running: %s", shlex.join(args))

    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        logger.debug("Unable to start %s: %s", args[0], exc)
        return ToolResult(argv=args, returncode=SPAWN_FAILED, stderr=str(exc))

    out, err = await proc.communicate(stdin)
    result = ToolResult(
        argv=args,
        returncode=proc.returncode if proc.returncode is not None else SPAWN_FAILED,
        stdout=out.decode("utf-8", errors="replace"),
        stderr=err.decode("utf-8", errors="replace"),
    )
    logger.debug("%s exited with status %d", args[0], result.returncode)
    return result

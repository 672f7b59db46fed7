"""Process invocation abstraction used by the external checkers."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT_MS = 10_000

# Synthetic exit codes, following shell conventions.
EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127

# 125 is what `docker run` reports when the daemon or image is unavailable.
LAUNCH_FAILURE_CODES = frozenset({EXIT_TIMEOUT, 125, EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND})


class ToolResult(BaseModel):
    """Outcome of one external command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def launch_failed(self) -> bool:
        """True when the command never really ran (missing, unrunnable, timed out)."""
        return self.exit_code in LAUNCH_FAILURE_CODES


class ToolRunner(ABC):
    """Abstract interface for running external commands."""

    @abstractmethod
    async def run(
        self,
        command: str,
        args: list[str],
        *,
        cwd: str | None = None,
        input: str | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResult:
        """Run *command* with *args*.

        Implementations must not raise when the command cannot be started;
        they resolve with a non-zero synthetic exit code instead.
        """
        ...


class SubprocessToolRunner(ToolRunner):
    """Runs commands as asyncio subprocesses without a shell."""

    def __init__(self, default_timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS) -> None:
        self._default_timeout_ms = default_timeout_ms

    async def run(
        self,
        command: str,
        args: list[str],
        *,
        cwd: str | None = None,
        input: str | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResult:
        timeout = (timeout_ms or self._default_timeout_ms) / 1000
        logger.debug("Running %s %s", command, " ".join(args))

        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            return ToolResult(exit_code=EXIT_NOT_FOUND, stderr=str(e))
        except OSError as e:
            return ToolResult(exit_code=EXIT_NOT_EXECUTABLE, stderr=str(e))

        stdin_bytes = input.encode("utf-8") if input is not None else None
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(stdin_bytes), timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("%s exceeded %.1fs; killing", command, timeout)
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            return ToolResult(
                exit_code=EXIT_TIMEOUT,
                stderr=f"{command} timed out after {timeout:.1f}s",
            )

        return ToolResult(
            exit_code=proc.returncode if proc.returncode is not None else 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

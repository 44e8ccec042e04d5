"""
Subprocess helpers for the OS utilities clockbar shells out to.
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 10.0


@dataclass
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class CommandError(Exception):
    """A command exited non-zero, timed out, or could not be started."""

    def __init__(self, args: tuple[str, ...], returncode: int | None, stdout: str = "", stderr: str = ""):
        self.command = args
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"{' '.join(args)} failed with exit code {returncode}: {stderr.strip()}")


async def run_command(*args: str, timeout: float = DEFAULT_COMMAND_TIMEOUT) -> CommandResult:
    """Run a command and capture its output; raise CommandError unless it exits 0."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandError(args, None, stderr=str(e)) from e

    try:
        raw_out, raw_err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise CommandError(args, None, stderr=f"timed out after {timeout}s") from e
    except asyncio.CancelledError:
        proc.kill()
        raise

    result = CommandResult(
        args=args,
        returncode=proc.returncode,
        stdout=raw_out.decode("utf-8", errors="replace"),
        stderr=raw_err.decode("utf-8", errors="replace"),
    )
    logger.debug(f"{args[0]} exited with {result.returncode}")
    if result.returncode != 0:
        raise CommandError(args, result.returncode, result.stdout, result.stderr)
    return result

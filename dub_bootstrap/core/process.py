"""
Process — blocking subprocess execution with captured, combined output.

A command that cannot be launched (missing binary, permission error) or
that exceeds the optional timeout is reported as a failed CommandResult
instead of raising, so callers branch on values only.
"""
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    command: List[str]
    returncode: int
    output: str              # stdout and stderr interleaved
    launched: bool = True    # False if the process never started
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.launched and not self.timed_out and self.returncode == 0

    @property
    def first_line(self) -> str:
        lines = self.output.strip().splitlines()
        return lines[0] if lines else ""


# Signature shared by run_command and the fakes used in tests
Runner = Callable[..., CommandResult]


def run_command(
    cmd: Sequence[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Execute *cmd* without a shell and return its CommandResult."""
    cmd = [str(c) for c in cmd]
    logger.debug("Running %s (cwd=%s)", cmd, cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        logger.warning("Command %s timed out after %ss", cmd[0], timeout)
        return CommandResult(
            command=cmd,
            returncode=-1,
            output=output + f"\nCommand timed out after {timeout}s",
            timed_out=True,
        )
    except OSError as e:
        logger.debug("Could not launch %s: %s", cmd[0], e)
        return CommandResult(command=cmd, returncode=-1, output=str(e), launched=False)

    logger.debug("%s exited with status %d", cmd[0], proc.returncode)
    return CommandResult(command=cmd, returncode=proc.returncode, output=proc.stdout or "")

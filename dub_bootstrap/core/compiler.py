"""
Compiler detection — pick the D compiler used for the bootstrap build.

Default to DMD, then LDC (ldmd2), then GDC (gdmd).  An explicit DMD
override is trusted as-is; if it is not runnable, the build step reports it.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from dub_bootstrap.core.process import CommandResult, Runner, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilerChoice:
    binary: str
    identity: str = ""       # first line of `<binary> --version`, if probed
    overridden: bool = False


def probe_compiler(
    binary: str,
    version_flag: str = "--version",
    run: Runner = run_command,
    timeout: Optional[float] = None,
) -> CommandResult:
    return run([binary, version_flag], timeout=timeout)


def detect_compiler(
    override: str,
    candidates: Sequence[str],
    version_flag: str = "--version",
    run: Runner = run_command,
    timeout: Optional[float] = None,
) -> Optional[CompilerChoice]:
    """
    Return the compiler to use, or None if nothing usable was found.

    A non-empty *override* short-circuits probing.  Otherwise each candidate
    is run with *version_flag* in order and the first to exit 0 wins; the
    remaining candidates are never started.
    """
    if override:
        logger.debug("Using compiler from DMD: %s", override)
        return CompilerChoice(binary=override, overridden=True)

    attempted: List[str] = []
    for binary in candidates:
        attempted.append(binary)
        result = probe_compiler(binary, version_flag, run=run, timeout=timeout)
        if result.ok:
            logger.info("Found compiler %s (%s)", binary, result.first_line)
            return CompilerChoice(binary=binary, identity=result.first_line)
        logger.debug("Candidate %s rejected: %s", binary, result.output.strip())

    print(f"No compiler has been found in the PATH. Attempted values: {attempted}")
    print("Make sure one of those is in the PATH, or set the `DMD` variable")
    return None

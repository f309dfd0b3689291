"""
Verify — smoke-test the freshly built binary and describe the artifact.

The binary must run with its version flag and exit 0.  Artifact metadata
(size, SHA-256, ELF header facts) is informational only: a non-ELF output
such as a PE or Mach-O executable is recorded, never rejected.
"""
import hashlib
import logging
import sys
from pathlib import Path
from typing import Optional

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from dub_bootstrap.core.paths import BootstrapPaths
from dub_bootstrap.core.process import CommandResult, Runner, run_command
from dub_bootstrap.io.schema import ArtifactMeta
from dub_bootstrap.policy.profile import Profile

logger = logging.getLogger(__name__)


def hash_file(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def inspect_artifact(path: Path) -> Optional[ArtifactMeta]:
    """Collect metadata for the built binary; None if it is not on disk."""
    if not path.is_file():
        # dmd on Windows appends .exe to -of targets without an extension
        exe = path.with_suffix(".exe")
        if not exe.is_file():
            return None
        path = exe

    elf_type = None
    machine = None
    try:
        with open(path, "rb") as f:
            elf = ELFFile(f)
            elf_type = elf.header["e_type"]
            machine = elf.header["e_machine"]
    except (ELFError, OSError) as e:
        logger.debug("%s is not an ELF file: %s", path, e)

    return ArtifactMeta(
        path=str(path),
        size_bytes=path.stat().st_size,
        sha256=hash_file(path),
        is_elf=elf_type is not None,
        elf_type=elf_type,
        machine=machine,
    )


def install_hint(binary: Path, platform: str = sys.platform) -> str:
    """Follow-up suggestion printed after a successful build."""
    if platform == "win32":
        return (
            "You may want to add the following entry to your PATH "
            f"environment variable: {binary}"
        )
    return f"You may want to run `sudo ln -s {binary} /usr/local/bin` now"


def verify_binary(
    paths: BootstrapPaths,
    profile: Profile,
    run: Runner = run_command,
    timeout: Optional[float] = None,
    platform: str = sys.platform,
) -> CommandResult:
    """Run `<binary> --version`; print the outcome and the install hint."""
    result = run([str(paths.binary), profile.version_flag], timeout=timeout)

    if not result.ok:
        print(f"Running newly built `{profile.program_name}` failed: {result.output}")
        return result

    logger.info("%s reports: %s", profile.program_name, result.first_line)
    print(f"DUB has been built as: {paths.binary}")
    print(install_hint(paths.binary, platform))
    return result

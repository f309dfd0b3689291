"""
Profile — the fixed knobs of a DUB bootstrap build.

Everything the orchestration treats as a constant (probe order, flags the
DUB sources require, the describe command) lives here so core/ holds no
opinions.  Building another D program is a profile change, not a code
change.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Profile:
    """Describes how the bootstrap compiles and checks the target program."""

    # Identity
    profile_id: str
    program_name: str

    # Toolchain probing, in priority order
    compiler_candidates: Tuple[str, ...]
    version_flag: str

    # Flags the target program needs regardless of DFLAGS
    feature_flags: Tuple[str, ...]

    # Version inference when nothing explicit is supplied
    describe_command: Tuple[str, ...]

    # Relative layout under the project root
    version_module: Tuple[str, ...]
    include_dir: str
    manifest_name: str
    binary_path: Tuple[str, ...]

    @classmethod
    def dub(cls) -> "Profile":
        """The DUB profile: dmd, then ldmd2 (LDC), then gdmd (GDC)."""
        return cls(
            profile_id="dub-bootstrap-d",
            program_name="dub",
            compiler_candidates=("dmd", "ldmd2", "gdmd"),
            version_flag="--version",
            feature_flags=("-version=DubUseCurl", "-version=DubApplication"),
            describe_command=("git", "describe"),
            version_module=("source", "dub", "version_.d"),
            include_dir="source",
            manifest_name="build-files.txt",
            binary_path=("bin", "dub"),
        )

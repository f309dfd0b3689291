"""
Path resolution for a DUB checkout.

Layout convention::

    <root>/
      build-files.txt       # static manifest, one source per line
      source/
        dub/
          version_.d        # generated
      bin/
        dub                 # build output
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dub_bootstrap.policy.profile import Profile


@dataclass(frozen=True)
class BootstrapPaths:
    root: Path
    version_file: Path
    include_dir: Path
    manifest: Path
    binary: Path

    @classmethod
    def from_root(cls, root: Path, profile: Profile) -> "BootstrapPaths":
        root = Path(root).resolve()
        return cls(
            root=root,
            version_file=root.joinpath(*profile.version_module),
            include_dir=root / profile.include_dir,
            manifest=root / profile.manifest_name,
            binary=root.joinpath(*profile.binary_path),
        )

    @property
    def output_flag(self) -> str:
        return f"-of{self.binary}"

    @property
    def include_flag(self) -> str:
        return f"-I{self.include_dir}"

    @property
    def manifest_ref(self) -> str:
        """Response-file argument, relative to the root (the build's cwd)."""
        return "@" + self.manifest.relative_to(self.root).as_posix()

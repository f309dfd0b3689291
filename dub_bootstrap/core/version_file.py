"""
Version file — resolve DUB's version string and generate source/dub/version_.d.

Resolution order:
  1. explicit version (first positional argument, else GITVER)
  2. the version file already on disk, left untouched
  3. `git describe` run in the project root

A non-empty explicit version always overwrites the file.  Without one, an
existing file wins and git is never consulted.
"""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dub_bootstrap.core.paths import BootstrapPaths
from dub_bootstrap.core.process import Runner, run_command
from dub_bootstrap.policy.profile import Profile
from dub_bootstrap.policy.verdict import FailureReason, VersionSource

logger = logging.getLogger(__name__)

VERSION_MODULE_TEMPLATE = """\
/**
   DUB version file

   This file is auto-generated by 'dub-bootstrap'. DO NOT EDIT MANUALLY!
 */
module dub.version_;

enum dubVersion = "{version}";
"""

_DECLARATION = re.compile(r'^enum dubVersion = "(.*)";$', re.MULTILINE)


@dataclass(frozen=True)
class VersionOutcome:
    """Result of the version-resolution stage."""

    ok: bool
    version: Optional[str] = None
    source: Optional[VersionSource] = None
    wrote_file: bool = False
    reason: Optional[FailureReason] = None


def render_version_module(version: str) -> str:
    """Return the D module text declaring *version*, interpolated verbatim."""
    return VERSION_MODULE_TEMPLATE.format(version=version)


def read_declared_version(path: Path) -> Optional[str]:
    """Return the dubVersion literal from an existing version file, if any."""
    try:
        text = path.read_text()
    except OSError:
        return None
    m = _DECLARATION.search(text)
    return m.group(1) if m else None


def explicit_version(argument: Optional[str], env_version: str) -> Tuple[str, Optional[VersionSource]]:
    """Pick the explicit version: positional argument first, then GITVER."""
    if argument is not None:
        return argument, VersionSource.ARGUMENT if argument else None
    if env_version:
        return env_version, VersionSource.ENVIRONMENT
    return "", None


def write_version_file(path: Path, version: str) -> bool:
    """
    Write the version module to *path* as a single whole-file write.

    Any OSError is reported and converted to False; nothing propagates.
    The parent directory must already exist.
    """
    try:
        path.write_text(render_version_module(version))
    except OSError as e:
        logger.debug("Version file write failed", exc_info=True)
        print(f"Writing version file to '{path}' failed: {e}")
        return False
    print(f"Wrote {path.name} file with version: {version}")
    return True


def describe_version(
    paths: BootstrapPaths,
    profile: Profile,
    run: Runner = run_command,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """Infer the version from `git describe`; None when the command fails."""
    result = run(list(profile.describe_command), cwd=paths.root, timeout=timeout)
    if not result.ok:
        logger.debug("%s failed: %s", " ".join(result.command), result.output.strip())
        return None
    return result.output.rstrip()


def ensure_version_file(
    version: str,
    source: Optional[VersionSource],
    paths: BootstrapPaths,
    profile: Profile,
    run: Runner = run_command,
    timeout: Optional[float] = None,
) -> VersionOutcome:
    """
    Make sure the version file exists, honouring the override rules.

    Parameters
    ----------
    version : str
        Explicit version; empty means "not supplied".
    source : VersionSource, optional
        Where *version* came from, recorded in the outcome.
    """
    vfile = paths.version_file

    if not version:
        if vfile.exists():
            print(
                "Using pre-existing version file. To force a rebuild, "
                "provide an explicit version (first argument) or remove: "
                f"{vfile}"
            )
            return VersionOutcome(
                ok=True,
                version=read_declared_version(vfile),
                source=VersionSource.EXISTING,
            )

        described = describe_version(paths, profile, run=run, timeout=timeout)
        if described is None:
            print(
                "Could not determine version with `git describe`. "
                "Make sure 'git' is installed and this is a git repository. "
                "Alternatively, you can provide a version explicitly via the "
                "`GITVER` environment variable or pass it as the first "
                "argument to this script"
            )
            return VersionOutcome(ok=False, reason=FailureReason.VERSION_UNRESOLVED)
        version, source = described, VersionSource.GIT

    if not write_version_file(vfile, version):
        return VersionOutcome(
            ok=False,
            version=version,
            source=source,
            reason=FailureReason.VERSION_WRITE_FAILED,
        )
    return VersionOutcome(ok=True, version=version, source=source, wrote_file=True)

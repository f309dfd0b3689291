"""
Bootstrap runner — top-level orchestration: invocation → bin/dub.

Stages run strictly in order and the first failure ends the run:

    resolve version → detect compiler → build → verify

This module ties core/, policy/ and io/ together into ``run_bootstrap``
and exposes ``main`` as the command-line entry point.  There is no proper
CLI beyond an optional version argument: the script exists for package
maintainers bootstrapping DUB without an existing DUB.
"""
import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from dub_bootstrap.config import Settings, load_settings
from dub_bootstrap.core.build import run_build
from dub_bootstrap.core.compiler import detect_compiler
from dub_bootstrap.core.paths import BootstrapPaths
from dub_bootstrap.core.process import CommandResult, Runner, run_command
from dub_bootstrap.core.verify import inspect_artifact, verify_binary
from dub_bootstrap.core.version_file import ensure_version_file, explicit_version
from dub_bootstrap.io.schema import (
    BootstrapReceipt,
    CommandRecord,
    CompilerRecord,
    VersionRecord,
    now_iso,
)
from dub_bootstrap.io.writer import write_receipt
from dub_bootstrap.policy.profile import Profile
from dub_bootstrap.policy.verdict import (
    FailureReason,
    Stage,
    Verdict,
    exit_code,
)

logger = logging.getLogger(__name__)

PROG = "dub-bootstrap"

USAGE = f"""\
USAGE: {PROG} [options] [version]
  In order to build DUB, a version module must first be generated.
  If one is already existing, it won't be overridden. Otherwise this script will use the first argument, if any, or the GITVER environment variable.
  If both are empty, `git describe` will be called
  Build flags can be provided via the `DFLAGS` environment variable.
  LDC or GDC can be used by setting the `DMD` value to `ldmd2` and `gdmd` (or their path), respectively.
Options:
  -v, --verbose     enable verbose logging
  --root DIR        DUB checkout to build (default: $DUB_ROOT, else the current directory)
  --receipt PATH    write a JSON receipt of the run to PATH"""


# ── Invocation ───────────────────────────────────────────────────────────────

class UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


@dataclass(frozen=True)
class Invocation:
    version: Optional[str] = None
    verbose: bool = False
    root: Optional[Path] = None
    receipt: Optional[Path] = None


_VERBOSE_FLAGS = ("-v", "--verbose")


def _is_help(token: str) -> bool:
    return "help" in token or "?" in token or token == "-h"


def parse_invocation(argv: List[str]) -> Optional[Invocation]:
    """
    Parse the command line; None means "print usage and exit 1".

    Tokens argparse does not recognise count as positionals, so `-x`
    on its own is taken as a version string.  The verbose flag only
    matches as an exact token, so `-version` is a version too.
    """
    verbose = any(token in _VERBOSE_FLAGS for token in argv)
    argv = [token for token in argv if token not in _VERBOSE_FLAGS]

    parser = _Parser(prog=PROG, add_help=False, allow_abbrev=False)
    parser.add_argument("version", nargs="*")
    parser.add_argument("--root", type=Path, default=None)
    parser.add_argument("--receipt", type=Path, default=None)

    try:
        args, unknown = parser.parse_known_args(argv)
    except UsageError as e:
        logger.debug("Rejected arguments %s: %s", argv, e)
        return None

    positionals = list(args.version) + unknown
    if len(positionals) > 1:
        return None
    if len(positionals) == 1 and _is_help(positionals[0]):
        return None

    return Invocation(
        version=positionals[0] if positionals else None,
        verbose=verbose,
        root=args.root,
        receipt=args.receipt,
    )


# ── Orchestration ────────────────────────────────────────────────────────────

def _record(result: CommandResult) -> CommandRecord:
    return CommandRecord(
        command=result.command,
        returncode=result.returncode,
        output=result.output,
        launched=result.launched,
        timed_out=result.timed_out,
    )


def _fail(receipt: BootstrapReceipt, stage: Stage, reason: FailureReason) -> BootstrapReceipt:
    logger.debug("Stopping at %s: %s", stage.value, reason.value)
    receipt.verdict = Verdict.FAIL.value
    receipt.failed_stage = stage.value
    receipt.reason = reason.value
    receipt.finished_at = now_iso()
    return receipt


def run_bootstrap(
    version_arg: Optional[str],
    settings: Settings,
    paths: BootstrapPaths,
    profile: Optional[Profile] = None,
    run: Runner = run_command,
    platform: str = sys.platform,
) -> BootstrapReceipt:
    """
    Run the whole bootstrap once.

    Parameters
    ----------
    version_arg : str, optional
        The positional version argument, if one was given.
    settings : Settings
        Environment overrides (DMD, DFLAGS, GITVER, BOOTSTRAP_TIMEOUT).
    paths : BootstrapPaths
        Layout of the DUB checkout being built.
    profile : Profile, optional
        Defaults to Profile.dub().
    run : Runner
        Command executor; replaced by fakes in tests.

    Returns
    -------
    BootstrapReceipt
        ``verdict`` is SUCCESS or FAIL; on FAIL ``failed_stage`` and
        ``reason`` say where and why.
    """
    if profile is None:
        profile = Profile.dub()
    timeout = settings.BOOTSTRAP_TIMEOUT

    receipt = BootstrapReceipt(
        profile_id=profile.profile_id,
        root=str(paths.root),
        verdict=Verdict.FAIL.value,
    )

    # ── Step 1: version file ─────────────────────────────────────────
    version, source = explicit_version(version_arg, settings.GITVER)
    outcome = ensure_version_file(version, source, paths, profile, run=run, timeout=timeout)
    receipt.version = VersionRecord(
        version=outcome.version,
        source=outcome.source.value if outcome.source else None,
        version_file=str(paths.version_file),
        wrote_file=outcome.wrote_file,
    )
    if not outcome.ok:
        return _fail(receipt, Stage.RESOLVE_VERSION, outcome.reason)

    # ── Step 2: compiler ─────────────────────────────────────────────
    choice = detect_compiler(
        settings.DMD,
        profile.compiler_candidates,
        profile.version_flag,
        run=run,
        timeout=timeout,
    )
    if choice is None:
        return _fail(receipt, Stage.DETECT_COMPILER, FailureReason.NO_COMPILER)
    receipt.compiler = CompilerRecord(
        binary=choice.binary,
        identity=choice.identity,
        overridden=choice.overridden,
    )

    # ── Step 3: build ────────────────────────────────────────────────
    dflags = settings.dflags
    receipt.dflags = dflags
    build = run_build(choice.binary, paths, profile, dflags, run=run, timeout=timeout)
    receipt.build = _record(build)
    if not build.ok:
        return _fail(receipt, Stage.RUN_BUILD, FailureReason.BUILD_FAILED)

    # ── Step 4: verify ───────────────────────────────────────────────
    check = verify_binary(paths, profile, run=run, timeout=timeout, platform=platform)
    receipt.verify = _record(check)
    if not check.ok:
        return _fail(receipt, Stage.VERIFY_BINARY, FailureReason.VERIFY_FAILED)

    receipt.artifact = inspect_artifact(paths.binary)
    receipt.verdict = Verdict.SUCCESS.value
    receipt.finished_at = now_iso()
    return receipt


# ── CLI ──────────────────────────────────────────────────────────────────────

def main(argv: Optional[List[str]] = None, run: Runner = run_command) -> int:
    if argv is None:
        argv = sys.argv[1:]

    invocation = parse_invocation(argv)
    if invocation is None:
        print(USAGE)
        return exit_code(FailureReason.USAGE)

    logging.basicConfig(
        level=logging.DEBUG if invocation.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"Invalid environment configuration:\n{e}")
        return exit_code(FailureReason.USAGE)

    root = invocation.root or (Path(settings.DUB_ROOT) if settings.DUB_ROOT else Path.cwd())
    profile = Profile.dub()
    paths = BootstrapPaths.from_root(root, profile)
    logger.debug("Project root: %s", paths.root)

    receipt = run_bootstrap(invocation.version, settings, paths, profile, run=run)

    if invocation.receipt:
        try:
            write_receipt(receipt, invocation.receipt)
        except OSError as e:
            logger.debug("Receipt write failed", exc_info=True)
            print(f"Writing receipt to '{invocation.receipt}' failed: {e}")
            return exit_code(FailureReason.RECEIPT_WRITE_FAILED)
        logger.info("Receipt written to: %s", invocation.receipt)

    if receipt.verdict == Verdict.SUCCESS.value:
        return exit_code(None)
    return exit_code(FailureReason(receipt.reason))


if __name__ == "__main__":
    sys.exit(main())

"""
Verdict — run outcome and the failure taxonomy.

Each stage of the bootstrap either passes or stops the run with exactly
one FailureReason.  Every failure maps to exit code 1.
"""
from enum import Enum, unique
from typing import Optional


# ── Stages ────────────────────────────────────────────────────────────────────

@unique
class Stage(str, Enum):
    RESOLVE_VERSION = "RESOLVE_VERSION"
    DETECT_COMPILER = "DETECT_COMPILER"
    RUN_BUILD = "RUN_BUILD"
    VERIFY_BINARY = "VERIFY_BINARY"


@unique
class Verdict(str, Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


# ── Failure reasons ──────────────────────────────────────────────────────────

@unique
class FailureReason(str, Enum):
    USAGE = "USAGE"
    VERSION_UNRESOLVED = "VERSION_UNRESOLVED"
    VERSION_WRITE_FAILED = "VERSION_WRITE_FAILED"
    NO_COMPILER = "NO_COMPILER"
    BUILD_FAILED = "BUILD_FAILED"
    VERIFY_FAILED = "VERIFY_FAILED"
    RECEIPT_WRITE_FAILED = "RECEIPT_WRITE_FAILED"


@unique
class VersionSource(str, Enum):
    """Where the version written to (or kept in) the version file came from."""
    ARGUMENT = "argument"
    ENVIRONMENT = "environment"
    EXISTING = "existing"
    GIT = "git"


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def exit_code(reason: Optional[FailureReason]) -> int:
    """Map a (possibly absent) failure reason to the process exit code."""
    return EXIT_SUCCESS if reason is None else EXIT_FAILURE

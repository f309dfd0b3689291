"""
Schema — Pydantic models for the bootstrap receipt.

One optional output per run:
  bootstrap_receipt.json — what was resolved, what ran, and how it ended.

Runtime contract fields (present in every receipt):
  package_name, package_version, schema_version, profile_id.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from dub_bootstrap import PACKAGE_NAME, SCHEMA_VERSION, __version__


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Commands ─────────────────────────────────────────────────────────────────

class CommandRecord(BaseModel):
    """One external command and its outcome."""
    command: List[str]
    returncode: int
    output: str = ""
    launched: bool = True
    timed_out: bool = False


# ── Artifact ─────────────────────────────────────────────────────────────────

class ArtifactMeta(BaseModel):
    """The built binary as found on disk after verification."""
    path: str
    size_bytes: int
    sha256: str
    is_elf: bool = False
    elf_type: Optional[str] = None   # ET_EXEC | ET_DYN
    machine: Optional[str] = None    # e.g. EM_X86_64


# ── Stages ───────────────────────────────────────────────────────────────────

class VersionRecord(BaseModel):
    version: Optional[str] = None
    source: Optional[str] = None     # argument | environment | existing | git
    version_file: str
    wrote_file: bool = False


class CompilerRecord(BaseModel):
    binary: str
    identity: str = ""
    overridden: bool = False


# ── Receipt ──────────────────────────────────────────────────────────────────

class BootstrapReceipt(BaseModel):
    """Wrapper for bootstrap_receipt.json."""

    package_name: str = PACKAGE_NAME
    package_version: str = __version__
    schema_version: str = SCHEMA_VERSION
    profile_id: str

    root: str
    started_at: str = Field(default_factory=now_iso)
    finished_at: Optional[str] = None

    verdict: str                     # SUCCESS | FAIL
    failed_stage: Optional[str] = None
    reason: Optional[str] = None

    version: Optional[VersionRecord] = None
    compiler: Optional[CompilerRecord] = None
    dflags: List[str] = Field(default_factory=list)
    build: Optional[CommandRecord] = None
    verify: Optional[CommandRecord] = None
    artifact: Optional[ArtifactMeta] = None

"""
Shared pytest fixtures for dub_bootstrap tests.

Provides a throwaway DUB-like checkout (source/dub/, bin/, build-files.txt)
and a scripted command runner so the orchestration can be exercised
without git or a D compiler installed.

The end-to-end test in test_toolchain.py needs a real D compiler
(dmd, ldmd2 or gdmd) and is skipped when none is in PATH.
"""
import shutil
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

from dub_bootstrap.config import Settings
from dub_bootstrap.core.paths import BootstrapPaths
from dub_bootstrap.core.process import CommandResult
from dub_bootstrap.policy.profile import Profile

ENV_VARS = ("DMD", "DFLAGS", "GITVER", "DUB_ROOT", "BOOTSTRAP_TIMEOUT")

# A tiny D program standing in for DUB: prints its version when asked.
TINY_APP_D = textwrap.dedent("""\
    module app;

    import std.stdio;
    import dub.version_;

    int main(string[] args)
    {
        if (args.length > 1 && args[1] == "--version")
            writeln("DUB version ", dubVersion);
        return 0;
    }
""")

Response = Union[Tuple[int, str], Callable[[List[str], Optional[Path]], Tuple[int, str]]]


@dataclass(frozen=True)
class FakeCall:
    command: List[str]
    cwd: Optional[Path]
    timeout: Optional[float]


class FakeRunner:
    """
    Stand-in for run_command keyed on the program (first argument).

    A program with no scripted response behaves like a missing binary.
    Responses are (returncode, output) pairs or callables returning one.
    """

    def __init__(self, responses: Optional[Dict[str, Response]] = None):
        self.responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[FakeCall] = []

    def __call__(self, cmd, cwd=None, timeout=None) -> CommandResult:
        cmd = [str(c) for c in cmd]
        self.calls.append(FakeCall(cmd, cwd, timeout))
        spec = self.responses.get(cmd[0])
        if spec is None:
            return CommandResult(
                command=cmd,
                returncode=-1,
                output=f"[Errno 2] No such file or directory: '{cmd[0]}'",
                launched=False,
            )
        if callable(spec):
            spec = spec(cmd, cwd)
        returncode, output = spec
        return CommandResult(command=cmd, returncode=returncode, output=output)

    @property
    def programs(self) -> List[str]:
        return [c.command[0] for c in self.calls]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's DMD / DFLAGS / GITVER out of every test."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def profile() -> Profile:
    return Profile.dub()


@pytest.fixture
def dub_root(tmp_path) -> Path:
    """A DUB-like checkout without a version file."""
    root = tmp_path / "dub"
    (root / "source" / "dub").mkdir(parents=True)
    (root / "bin").mkdir()
    (root / "source" / "app.d").write_text(TINY_APP_D)
    (root / "build-files.txt").write_text("source/app.d\nsource/dub/version_.d\n")
    return root


@pytest.fixture
def paths(dub_root, profile) -> BootstrapPaths:
    return BootstrapPaths.from_root(dub_root, profile)


@pytest.fixture
def settings() -> Settings:
    return Settings(DMD="", DFLAGS="-g -O -w", GITVER="")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


def make_build_response(paths: BootstrapPaths, returncode: int = 0, output: str = "") -> Response:
    """Compiler response that drops a fake binary on success, like dmd would."""

    def respond(cmd, cwd):
        if returncode == 0:
            paths.binary.write_bytes(b"#!fake dub binary\n")
        return returncode, output

    return respond


@pytest.fixture
def d_compiler() -> str:
    """Skip the test unless a D compiler is available."""
    for binary in Profile.dub().compiler_candidates:
        if shutil.which(binary):
            return binary
    pytest.skip("no D compiler (dmd, ldmd2, gdmd) in PATH")


@pytest.fixture
def build_response(paths):
    """Factory for scripted compiler responses bound to the fixture checkout."""

    def factory(returncode: int = 0, output: str = "") -> Response:
        return make_build_response(paths, returncode, output)

    return factory


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with scripted responses."""

    def factory(responses: Optional[Dict[str, Response]] = None) -> FakeRunner:
        return FakeRunner(responses)

    return factory

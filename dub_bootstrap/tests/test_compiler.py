"""
test_compiler — toolchain detection.

Tests verify invariant properties:
  - A DMD override is returned verbatim and nothing is probed.
  - Candidates are probed in order; the first to exit 0 wins and later
    candidates are never started.
  - Launch failures and non-zero exits both just move on to the next one.
  - When every candidate fails, the attempted names are printed and None
    is returned.
"""
from dub_bootstrap.core.compiler import detect_compiler


class TestOverride:

    def test_override_skips_probing(self, fake_runner):
        choice = detect_compiler("/opt/not/a/compiler", ["A", "B", "C"], run=fake_runner)

        assert choice.binary == "/opt/not/a/compiler"
        assert choice.overridden is True
        assert fake_runner.calls == []


class TestProbeOrder:

    def test_first_success_wins(self, make_runner):
        runner = make_runner({
            "A": (1, "broken"),
            "B": (0, "B compiler v2.100\nCopyright"),
            "C": (0, "C compiler"),
        })

        choice = detect_compiler("", ["A", "B", "C"], run=runner)

        assert choice.binary == "B"
        assert choice.identity == "B compiler v2.100"
        assert choice.overridden is False
        assert runner.programs == ["A", "B"]

    def test_missing_binary_falls_through(self, make_runner):
        """A has no scripted response, i.e. it cannot be launched."""
        runner = make_runner({"B": (0, "ok")})

        choice = detect_compiler("", ["A", "B", "C"], run=runner)

        assert choice.binary == "B"
        assert runner.programs == ["A", "B"]

    def test_version_flag_passed(self, make_runner):
        runner = make_runner({"dmd": (0, "DMD64 D Compiler v2.109.1")})

        detect_compiler("", ["dmd"], "--version", run=runner)

        assert runner.calls[0].command == ["dmd", "--version"]

    def test_default_profile_order(self, profile, fake_runner):
        detect_compiler("", profile.compiler_candidates, run=fake_runner)

        assert fake_runner.programs == ["dmd", "ldmd2", "gdmd"]


class TestNoCompiler:

    def test_all_fail(self, make_runner, capsys):
        runner = make_runner({"A": (1, ""), "C": (127, "")})

        choice = detect_compiler("", ["A", "B", "C"], run=runner)

        assert choice is None
        assert runner.programs == ["A", "B", "C"]
        out = capsys.readouterr().out
        assert "['A', 'B', 'C']" in out
        assert "DMD" in out

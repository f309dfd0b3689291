"""
Build — compose and run the single compiler invocation that produces bin/dub.

The command is a plain argument list (no shell):

    <compiler> -of<root>/bin/dub -I<root>/source <feature flags> <DFLAGS...> @build-files.txt

It runs with the project root as working directory so the response file
and the relative source paths it lists resolve.
"""
import logging
from typing import List, Optional, Sequence

from dub_bootstrap.core.paths import BootstrapPaths
from dub_bootstrap.core.process import CommandResult, Runner, run_command
from dub_bootstrap.policy.profile import Profile

logger = logging.getLogger(__name__)


def compose_build_command(
    compiler: str,
    paths: BootstrapPaths,
    profile: Profile,
    dflags: Sequence[str],
) -> List[str]:
    return [
        compiler,
        paths.output_flag,
        paths.include_flag,
        *profile.feature_flags,
        *dflags,
        paths.manifest_ref,
    ]


def run_build(
    compiler: str,
    paths: BootstrapPaths,
    profile: Profile,
    dflags: Sequence[str],
    run: Runner = run_command,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run the compile once; on failure print the command and its output."""
    command = compose_build_command(compiler, paths, profile, dflags)

    print(f"Building {profile.program_name} using {compiler}, this may take a while...")
    result = run(command, cwd=paths.root, timeout=timeout)

    if not result.ok:
        print(f"Command `{command}` failed, output was:")
        print(result.output)
    else:
        logger.debug("Build output:\n%s", result.output)
    return result

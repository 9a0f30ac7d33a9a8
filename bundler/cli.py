"""Command line interface for the library bundler."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping
import os
import sys
import traceback

import yaml

from core.command_runner import RecordingCommandRunner, SubprocessCommandRunner

from .driver import BuildDriver, BuildResult, DriverState
from .errors import BuildError, ConfigurationError
from .manifest import Manifest
from .module_systems import ModuleSystem
from .settings import BundlerSettings, load_settings
from .switches import Switches, split_arguments

USAGE = f"""usage: bundler [MODULE_SYSTEM ...] [--min] [--closure] [--analyze] [-v|--verbose] [-n|--dry-run] [--config=PATH] [-h|--help]

Bundle src/index.ts with Rollup into each requested module system, then build the themes bundle.

module systems: {", ".join(ModuleSystem.values())}

switches:
  --min            minify bundles with terser
  --closure        optimize bundles with the closure compiler
  --analyze        attach the bundle analyzer to ES builds (or set ANALYZE)
  -v, --verbose    print each Rollup configuration before bundling
  -n, --dry-run    render configurations and print Rollup commands without running them
  --config=PATH    settings file (defaults to $BUNDLER_CONFIG or ./bundler.toml)
  -h, --help       show this message and exit
"""


def _make_runner(switches: Switches) -> SubprocessCommandRunner | RecordingCommandRunner:
    return RecordingCommandRunner() if switches.dry_run else SubprocessCommandRunner(echo=switches.verbose)


def _emit_dry_run_output(runner: RecordingCommandRunner) -> None:
    for line in runner.iter_formatted():
        print(line)


def _report_failure(error: BuildError) -> None:
    if not error.show_traceback:
        print(f"{error}\n")
        return
    print(f"- 👎 {error}")
    cause = error.__cause__ or error
    stack = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
    print(f"\n{stack}")


def _load_inputs(
    workspace: Path,
    switches: Switches,
    environ: Mapping[str, str] | None,
) -> tuple[BundlerSettings, Manifest]:
    try:
        settings = load_settings(workspace, switches.get("config"), environ)
        manifest = Manifest.load(workspace / "package.json")
    except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"the build failed loading its configuration: {exc}") from exc
    return settings, manifest


def run(
    tokens: list[str],
    switches: Switches,
    *,
    workspace: Path,
    environ: Mapping[str, str] | None = None,
) -> tuple[BuildResult, SubprocessCommandRunner | RecordingCommandRunner | None]:
    try:
        settings, manifest = _load_inputs(workspace, switches, environ)
    except ConfigurationError as exc:
        return BuildResult(state=DriverState.FATAL, error=exc), None

    runner = _make_runner(switches)
    driver = BuildDriver(
        manifest=manifest,
        settings=settings,
        switches=switches,
        runner=runner,
        workspace=workspace,
        environ=environ,
    )
    return driver.run(tokens), runner


def main(argv: Iterable[str] | None = None, *, workspace: Path | None = None) -> int:
    try:
        tokens, switches = split_arguments(sys.argv[1:] if argv is None else argv)
    except ValueError as exc:
        print(f"bundler: error: {exc}\n\n{USAGE}")
        return 2
    if switches.help:
        print(USAGE)
        return 0

    root = workspace or Path.cwd()
    result, runner = run(tokens, switches, workspace=root, environ=os.environ)

    if isinstance(runner, RecordingCommandRunner):
        _emit_dry_run_output(runner)
    if result.error is not None:
        _report_failure(result.error)
    return result.exit_code

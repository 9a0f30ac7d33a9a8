"""Sequential build driver.

The driver walks a fixed state machine::

    IDLE -> VALIDATING -> BUILDING_MODULE (once per requested module system)
         -> THEME_BUILD -> DONE

Any failure moves it to FATAL and stops the run. Nothing is retried and
bundles already written for earlier module systems stay on disk.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Sequence
import math

from core.command_runner import CommandRunner

from .configuration import BuildConfiguration, ConfigurationBuilder
from .errors import BuildError, BundlingError
from .externals import external_modules, relevant_externals
from .manifest import Manifest, output_path
from .module_systems import CanonicalForm, ModuleSystem, emits_declarations
from .rollup import OutputOptions, RollupBundler
from .settings import BundlerSettings
from .switches import Switches


class DriverState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING_MODULE = "building-module"
    THEME_BUILD = "theme-build"
    DONE = "done"
    FATAL = "fatal"


@dataclass(slots=True)
class BuildArtifact:
    name: str
    path: Path
    size: int | None


@dataclass(slots=True)
class BuildResult:
    state: DriverState
    error: BuildError | None = None
    artifacts: List[BuildArtifact] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code


def format_size(size: int) -> str:
    """Tenths of a kilobyte, rounded down; whole values print without ``.0``."""
    tenths = math.floor(size / 100)
    kilobytes = tenths // 10 if tenths % 10 == 0 else tenths / 10
    return f"{kilobytes} kb"


class BuildDriver:
    def __init__(
        self,
        *,
        manifest: Manifest,
        settings: BundlerSettings,
        switches: Switches,
        runner: CommandRunner,
        workspace: Path,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._manifest = manifest
        self._settings = settings
        self._switches = switches
        self._workspace = workspace
        self.externals = external_modules(manifest, settings.builtin_modules)
        self._configs = ConfigurationBuilder(
            manifest=manifest,
            settings=settings,
            switches=switches,
            externals=self.externals,
            workspace=workspace,
            environ=environ,
        )
        self._bundler = RollupBundler(runner=runner, settings=settings, workspace=workspace)
        self.state = DriverState.IDLE
        self.history: List[DriverState] = [DriverState.IDLE]
        self.current_index: int | None = None
        self.configurations: List[BuildConfiguration] = []

    def _transition(self, state: DriverState) -> None:
        self.state = state
        self.history.append(state)

    def run(self, tokens: Sequence[str]) -> BuildResult:
        result = BuildResult(state=self.state)
        try:
            self._transition(DriverState.VALIDATING)
            systems = self._validate(tokens)
            self._announce(systems)

            for index, system in enumerate(systems):
                self.current_index = index
                self._transition(DriverState.BUILDING_MODULE)
                emit = emits_declarations(system.canonical, len(systems))
                result.artifacts.append(self._build_module(system, emit))

            self.current_index = None
            self._transition(DriverState.THEME_BUILD)
            result.artifacts.append(self._build_themes())
        except BuildError as exc:
            self._transition(DriverState.FATAL)
            result.state = self.state
            result.error = exc
            return result

        self._transition(DriverState.DONE)
        result.state = self.state
        print("\n- Build completed!\n")
        return result

    def _validate(self, tokens: Sequence[str]) -> List[ModuleSystem]:
        return ModuleSystem.parse_all(tokens)

    def _announce(self, systems: Sequence[ModuleSystem]) -> None:
        print(f"- Building library to {', '.join(system.value.upper() for system in systems)} modules.")
        relevant = relevant_externals(self.externals, self._settings.builtin_modules)
        if relevant:
            print(f'- While bundling will configure the following to be "external modules": {", ".join(relevant)}')
        if ModuleSystem.IIFE in systems or ModuleSystem.UMD in systems:
            mapping = "".join(
                f'- "{module}" module found in global scope as "{name}"\n\t'
                for module, name in self._settings.globals.items()
            )
            print(f"- The IIFE and UMD modules will link to global scope:\n\t{mapping}")
        print()

    def _build_module(self, system: ModuleSystem, emit_declarations: bool) -> BuildArtifact:
        minimized = " (minimized)" if self._switches.minify else ""
        print(f"- 📦 starting bundling of {system.value.upper()} module{minimized}")
        if self._switches.closure:
            print("- using closure compiler to minimize file size")
        if system.canonical is CanonicalForm.ES and not self._manifest.module:
            print(
                "- 🤨 while you are building for the ES module system your package.json "
                "doesn't specify a \"module\" entrypoint."
            )
        file = output_path(system.canonical, self._manifest)
        print(f"- transpiled source will be saved as: {file}")

        config = self._configs.module_config(system, file, emit_declarations)
        self.configurations.append(config)
        output = OutputOptions.for_module(system, file, self._manifest, self._settings.globals)
        if self._switches.verbose:
            print(f"- bundle config is:\n{config.serialize()}")

        path = self._bundler.bundle(system.value, config, output)
        return self._report(system.value, path, file)

    def _build_themes(self) -> BuildArtifact:
        config = self._configs.theme_config()
        self.configurations.append(config)
        output = OutputOptions(file=config.output_path, format="es")
        if self._switches.verbose:
            print(f"- themes bundle config is:\n{config.serialize()}")
        path = self._bundler.bundle("themes", config, output)
        return self._report("themes", path, config.output_path)

    def _report(self, name: str, path: Path, file: str) -> BuildArtifact:
        if self._switches.dry_run:
            return BuildArtifact(name=name, path=path, size=None)
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise BundlingError(f"Rollup finished but '{path}' was not written: {exc}") from exc
        print(f'- 🚀 bundling saved to the "{file}" file [ {format_size(size)} ].\n')
        return BuildArtifact(name=name, path=path, size=size)

"""Assembly of per-module-system Rollup configurations."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple
import json
import os

from . import plugins as rollup_plugins
from .errors import BuildError, ConfigurationError, MissingEntryPointError
from .manifest import Manifest, infer_directory
from .module_systems import CanonicalForm, ModuleSystem
from .plugins import OptimizationPlugins, PluginSpec
from .settings import BundlerSettings
from .switches import Switches


@dataclass(frozen=True)
class BuildConfiguration:
    module_system: str
    canonical: CanonicalForm
    entry_point: str
    externals: Tuple[str, ...]
    output_path: str
    emit_declarations: bool
    plugins: Tuple[PluginSpec, ...]

    def plugin_names(self) -> list[str]:
        return [plugin.name for plugin in self.plugins]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_system": self.module_system,
            "canonical": self.canonical.value,
            "input": self.entry_point,
            "external": list(self.externals),
            "output": self.output_path,
            "emit_declarations": self.emit_declarations,
            "plugins": [plugin.to_dict() for plugin in self.plugins],
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


class ConfigurationBuilder:
    def __init__(
        self,
        *,
        manifest: Manifest,
        settings: BundlerSettings,
        switches: Switches,
        externals: Tuple[str, ...],
        workspace: Path,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._manifest = manifest
        self._settings = settings
        self._switches = switches
        self._externals = externals
        self._workspace = workspace
        self._environ = os.environ if environ is None else environ

    @property
    def analyze_requested(self) -> bool:
        return bool(self._environ.get("ANALYZE")) or self._switches.analyze

    def _optimizations(self, *, analyze: bool) -> list[PluginSpec]:
        return OptimizationPlugins(
            analyze=analyze,
            closure=self._switches.closure,
            minify=self._switches.minify,
        ).build()

    def module_config(self, system: ModuleSystem, file: str, emit_declarations: bool) -> BuildConfiguration:
        """Rollup configuration for one requested module system.

        Raises :class:`MissingEntryPointError` when the entry point is absent
        and wraps any other failure in :class:`ConfigurationError`.
        """

        try:
            return self._module_config(system, file, emit_declarations)
        except BuildError:
            raise
        except Exception as exc:
            raise ConfigurationError(f"the build failed building Rollup configuration: {exc}") from exc

    def _module_config(self, system: ModuleSystem, file: str, emit_declarations: bool) -> BuildConfiguration:
        entry = self._settings.entry
        if not (self._workspace / entry).exists():
            raise MissingEntryPointError(entry)

        out_dir = infer_directory(file)
        declaration_dir = self._manifest.declaration_dir
        print(f'- the source\'s entrypoint is "{entry}" and output will be put in "{out_dir}" folder')
        if emit_declarations:
            print(f'- the typings will also be generated and placed in the "{declaration_dir}" directory')

        compiler_options: Dict[str, Any] = {}
        if emit_declarations:
            compiler_options["declaration"] = True
            compiler_options["declarationDir"] = declaration_dir
        compiler_options["outDir"] = out_dir
        compiler_options["module"] = "esnext"

        canonical = system.canonical
        plugins = [
            rollup_plugins.commonjs(),
            rollup_plugins.json_loader(),
            rollup_plugins.node_resolve(),
            rollup_plugins.vue(),
            rollup_plugins.postcss(),
            rollup_plugins.typescript(
                tsconfig=self._settings.tsconfig,
                overrides={
                    "compilerOptions": compiler_options,
                    "exclude": list(self._settings.exclude),
                },
            ),
            *self._optimizations(analyze=canonical is CanonicalForm.ES and self.analyze_requested),
        ]

        return BuildConfiguration(
            module_system=system.value,
            canonical=canonical,
            entry_point=entry,
            externals=self._externals,
            output_path=file,
            emit_declarations=emit_declarations,
            plugins=tuple(plugins),
        )

    def theme_config(self) -> BuildConfiguration:
        themes = self._settings.themes
        try:
            plugins = [
                rollup_plugins.typescript(
                    tsconfig=self._settings.tsconfig,
                    overrides={
                        "compilerOptions": {
                            "declaration": True,
                            "declarationDir": themes.declaration_dir,
                            "outDir": themes.out_dir,
                            "module": "esnext",
                        },
                        "include": list(themes.include),
                        "exclude": list(themes.exclude),
                    },
                ),
                *self._optimizations(analyze=self.analyze_requested),
            ]
        except Exception as exc:
            raise ConfigurationError(f"the build failed building the themes configuration: {exc}") from exc

        return BuildConfiguration(
            module_system="themes",
            canonical=CanonicalForm.ES,
            entry_point=themes.entry,
            externals=(),
            output_path=themes.output,
            emit_declarations=True,
            plugins=tuple(plugins),
        )

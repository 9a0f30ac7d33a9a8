"""Rendering Rollup config files and running Rollup on them."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping
import json

from core.command_runner import CommandError, CommandRunner

from .configuration import BuildConfiguration
from .errors import BundlingError
from .manifest import Manifest
from .module_systems import ModuleSystem, output_format, uses_global_vars
from .plugins import JsReference, PluginSpec
from .settings import BundlerSettings

_INDENT = "  "


@dataclass(frozen=True)
class OutputOptions:
    file: str
    format: str
    name: str | None = None
    globals: Mapping[str, str] = field(default_factory=dict)
    exports: str = "auto"
    sourcemap: bool = False

    @classmethod
    def for_module(
        cls,
        system: ModuleSystem,
        file: str,
        manifest: Manifest,
        globals: Mapping[str, str],
    ) -> "OutputOptions":
        if uses_global_vars(system):
            return cls(file=file, format=output_format(system), name=manifest.global_name, globals=dict(globals))
        return cls(file=file, format=output_format(system))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.name is not None:
            data["name"] = self.name
            data["globals"] = dict(self.globals)
        data["file"] = self.file
        data["format"] = self.format
        data["exports"] = self.exports
        data["sourcemap"] = self.sourcemap
        return data


def _to_js(value: Any, depth: int = 0) -> str:
    if isinstance(value, JsReference):
        return value.binding
    pad = _INDENT * (depth + 1)
    closing = _INDENT * depth
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = [f"{pad}{json.dumps(str(key))}: {_to_js(item, depth + 1)}" for key, item in value.items()]
        return "{\n" + ",\n".join(items) + f",\n{closing}}}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [f"{pad}{_to_js(item, depth + 1)}" for item in value]
        return "[\n" + ",\n".join(items) + f",\n{closing}]"
    return json.dumps(value)


def _references(value: Any) -> Iterable[JsReference]:
    if isinstance(value, JsReference):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _references(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _references(item)


def _import_lines(plugins: Iterable[PluginSpec]) -> List[str]:
    lines: Dict[str, str] = {}
    for plugin in plugins:
        if plugin.export is None:
            statement = f"import {plugin.binding} from {json.dumps(plugin.package)};"
        elif plugin.export == plugin.binding:
            statement = f"import {{ {plugin.export} }} from {json.dumps(plugin.package)};"
        else:
            statement = f"import {{ {plugin.export} as {plugin.binding} }} from {json.dumps(plugin.package)};"
        lines.setdefault(f"{plugin.package}:{plugin.binding}", statement)
        for reference in _references(plugin.options):
            if reference.namespace:
                statement = f"import * as {reference.binding} from {json.dumps(reference.package)};"
            else:
                statement = f"import {reference.binding} from {json.dumps(reference.package)};"
            lines.setdefault(f"{reference.package}:{reference.binding}", statement)
    return list(lines.values())


def _plugin_call(plugin: PluginSpec, depth: int) -> str:
    if plugin.options is None:
        return f"{plugin.binding}()"
    return f"{plugin.binding}({_to_js(plugin.options, depth)})"


def render_config(config: BuildConfiguration, output: OutputOptions) -> str:
    """Text of an ES-module Rollup config for ``config`` writing ``output``."""

    lines = [f"// Generated by bundler for the {config.module_system} build; do not edit."]
    lines.extend(_import_lines(config.plugins))
    lines.append("")
    lines.append("export default {")
    lines.append(f"{_INDENT}input: {json.dumps(config.entry_point)},")
    lines.append(f"{_INDENT}external: {_to_js(list(config.externals), 1)},")
    if config.plugins:
        lines.append(f"{_INDENT}plugins: [")
        for plugin in config.plugins:
            lines.append(f"{_INDENT * 2}{_plugin_call(plugin, 2)},")
        lines.append(f"{_INDENT}],")
    else:
        lines.append(f"{_INDENT}plugins: [],")
    lines.append(f"{_INDENT}output: {_to_js(output.to_dict(), 1)},")
    lines.append("};")
    return "\n".join(lines) + "\n"


class RollupBundler:
    """Bundles one configuration at a time by running the Rollup CLI."""

    def __init__(self, *, runner: CommandRunner, settings: BundlerSettings, workspace: Path) -> None:
        self._runner = runner
        self._settings = settings
        self._workspace = workspace

    @property
    def config_dir(self) -> Path:
        # Inside the workspace so plugin imports resolve against its node_modules.
        return self._workspace / self._settings.config_dir

    def config_path(self, name: str) -> Path:
        return self.config_dir / f"rollup.{name}.config.mjs"

    def command(self, config_file: Path) -> List[str]:
        return [*self._settings.rollup, "--config", str(config_file)]

    def bundle(self, name: str, config: BuildConfiguration, output: OutputOptions) -> Path:
        try:
            config_file = self.config_path(name)
            config_file.parent.mkdir(parents=True, exist_ok=True)
            config_file.write_text(render_config(config, output), encoding="utf-8")
            self._runner.run(
                self.command(config_file),
                cwd=self._workspace,
                note=f"rollup {name}",
            )
        except (CommandError, OSError) as exc:
            raise BundlingError(f"the build failed during Rollup bundling: {exc}") from exc
        return self._workspace / output.file

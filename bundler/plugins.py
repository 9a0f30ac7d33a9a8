"""Rollup plugin handles.

A :class:`PluginSpec` describes one plugin call in the rendered Rollup config:
the npm package it is imported from, the local binding, and the options object
passed to the factory. Options are plain JSON data except for
:class:`JsReference` values, which render as a bare identifier bound to an
imported module.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class JsReference:
    binding: str
    package: str
    namespace: bool = True

    def to_json(self) -> str:
        return f"<{self.package}>"


@dataclass(frozen=True)
class PluginSpec:
    name: str
    package: str
    binding: str
    options: Mapping[str, Any] | None = None
    export: str | None = None
    """Named export to import; the package default export when ``None``."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "package": self.package,
            "options": _jsonable(self.options) if self.options is not None else None,
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, JsReference):
        return value.to_json()
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


TYPESCRIPT_COMPILER = JsReference(binding="ttypescript", package="typescript")


def commonjs() -> PluginSpec:
    return PluginSpec("commonjs", "@rollup/plugin-commonjs", "commonjs")


def json_loader() -> PluginSpec:
    return PluginSpec("json", "@rollup/plugin-json", "json")


def node_resolve() -> PluginSpec:
    return PluginSpec("resolve", "@rollup/plugin-node-resolve", "resolve")


def vue() -> PluginSpec:
    return PluginSpec(
        "vue",
        "@vitejs/plugin-vue",
        "vue",
        options={"preprocessStyles": True, "template": {"isProduction": True}},
    )


def postcss() -> PluginSpec:
    return PluginSpec("postcss", "rollup-plugin-postcss", "postcss")


def typescript(*, tsconfig: str, overrides: Mapping[str, Any]) -> PluginSpec:
    return PluginSpec(
        "typescript",
        "rollup-plugin-typescript2",
        "typescript",
        options={
            "tsconfig": tsconfig,
            "typescript": TYPESCRIPT_COMPILER,
            "useTsconfigDeclarationDir": True,
            "tsconfigOverride": dict(overrides),
        },
    )


def analyzer() -> PluginSpec:
    return PluginSpec("analyze", "rollup-plugin-analyzer", "analyze")


def closure() -> PluginSpec:
    return PluginSpec("closure", "@ampproject/rollup-plugin-closure-compiler", "closure")


def terser() -> PluginSpec:
    return PluginSpec("terser", "rollup-plugin-terser", "terser", export="terser")


@dataclass(frozen=True)
class OptimizationPlugins:
    """Optional trailing plugins, in the order Rollup must apply them."""

    analyze: bool = False
    closure: bool = False
    minify: bool = False

    def build(self) -> list[PluginSpec]:
        plugins: list[PluginSpec] = []
        if self.analyze:
            plugins.append(analyzer())
        if self.closure:
            plugins.append(closure())
        if self.minify:
            plugins.append(terser())
        return plugins

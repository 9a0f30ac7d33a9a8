"""Optional ``bundler.toml`` settings."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple
import os

from core.config_loader import find_config_file, load_config_file, merge_mappings, normalize_string_list

from .externals import NODE_BUILTIN_MODULES

SETTINGS_STEM = "bundler"
SETTINGS_ENV = "BUNDLER_CONFIG"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "bundler": {
        "entry": "src/index.ts",
        "tsconfig": "tsconfig.json",
        "rollup": ["node_modules/.bin/rollup"],
        "config_dir": ".bundler",
        "exclude": ["test", "tests", "node_modules", "docs", "src/themes"],
    },
    "themes": {
        "entry": "src/themes/index.ts",
        "output": "dist/themes/es/index.js",
        "out_dir": "dist/themes",
        "declaration_dir": "dist/themes/types",
        "include": ["src/themes"],
        "exclude": ["test", "tests", "node_modules", "docs"],
    },
    "globals": {},
}


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, Mapping):
        raise TypeError(f"[{name}] must be a table")
    return section


@dataclass(frozen=True, slots=True)
class ThemeSettings:
    entry: str
    output: str
    out_dir: str
    declaration_dir: str
    include: Tuple[str, ...]
    exclude: Tuple[str, ...]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ThemeSettings":
        return cls(
            entry=str(data["entry"]),
            output=str(data["output"]),
            out_dir=str(data["out_dir"]),
            declaration_dir=str(data["declaration_dir"]),
            include=tuple(normalize_string_list(data.get("include"), field_name="themes.include")),
            exclude=tuple(normalize_string_list(data.get("exclude"), field_name="themes.exclude")),
        )


@dataclass(frozen=True, slots=True)
class BundlerSettings:
    """Resolved settings; build instances with ``from_mapping`` or ``defaults``."""

    entry: str
    tsconfig: str
    rollup: Tuple[str, ...]
    config_dir: str
    exclude: Tuple[str, ...]
    builtin_modules: Tuple[str, ...]
    themes: ThemeSettings
    globals: Mapping[str, str]
    source: Path | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: Path | None = None) -> "BundlerSettings":
        merged = merge_mappings(DEFAULT_SETTINGS, data)
        bundler = _section(merged, "bundler")
        rollup = normalize_string_list(bundler.get("rollup"), field_name="bundler.rollup")
        if not rollup:
            raise ValueError("bundler.rollup must name the Rollup executable")
        builtins = bundler.get("builtin_modules")
        globals_section = _section(merged, "globals")
        return cls(
            entry=str(bundler["entry"]),
            tsconfig=str(bundler["tsconfig"]),
            rollup=tuple(rollup),
            config_dir=str(bundler["config_dir"]),
            exclude=tuple(normalize_string_list(bundler.get("exclude"), field_name="bundler.exclude")),
            builtin_modules=(
                tuple(normalize_string_list(builtins, field_name="bundler.builtin_modules"))
                if builtins is not None
                else NODE_BUILTIN_MODULES
            ),
            themes=ThemeSettings.from_mapping(_section(merged, "themes")),
            globals={str(key): str(value) for key, value in globals_section.items()},
            source=source,
        )

    @classmethod
    def defaults(cls) -> "BundlerSettings":
        return cls.from_mapping({})


def resolve_settings_path(
    workspace: Path,
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Settings file to use: ``--config``, then ``$BUNDLER_CONFIG``, then the workspace."""

    env = os.environ if environ is None else environ
    candidates: List[str] = [value for value in (explicit, env.get(SETTINGS_ENV)) if value]
    for candidate in candidates:
        path = Path(candidate).expanduser()
        if not path.is_absolute():
            path = workspace / path
        if not path.is_file():
            raise FileNotFoundError(f"Settings file '{path}' does not exist")
        return path
    return find_config_file(workspace, SETTINGS_STEM)


def load_settings(
    workspace: Path,
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> BundlerSettings:
    path = resolve_settings_path(workspace, explicit, environ)
    if path is None:
        return BundlerSettings.defaults()
    return BundlerSettings.from_mapping(load_config_file(path), source=path)

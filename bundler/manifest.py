"""Package manifest (``package.json``) access and output path resolution."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Tuple

from core.config_loader import load_config_file

from .module_systems import CanonicalForm

DEFAULT_DECLARATION_DIR = "dist/types"


def _optional_string(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"package.json field '{key}' must be a string")
    return value or None


def _dependency_names(data: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, Mapping):
        raise TypeError(f"package.json field '{key}' must be a mapping of package names to versions")
    return tuple(str(name) for name in value)


@dataclass(frozen=True, slots=True)
class Manifest:
    name: str
    main: str | None = None
    module: str | None = None
    typings: str | None = None
    peer_dependencies: Tuple[str, ...] = ()
    optional_dependencies: Tuple[str, ...] = ()
    path: Path | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, path: Path | None = None) -> "Manifest":
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("package.json must define a non-empty 'name'")
        return cls(
            name=name,
            main=_optional_string(data, "main"),
            module=_optional_string(data, "module"),
            typings=_optional_string(data, "typings") or _optional_string(data, "types"),
            peer_dependencies=_dependency_names(data, "peerDependencies"),
            optional_dependencies=_dependency_names(data, "optionalDependencies"),
            path=path,
        )

    @classmethod
    def load(cls, path: Path) -> "Manifest":
        return cls.from_mapping(load_config_file(path), path=path)

    @property
    def global_name(self) -> str:
        """Name under which IIFE and UMD bundles expose their exports."""

        return self.name.replace("-", "")

    @property
    def declaration_dir(self) -> str:
        if self.typings:
            return infer_directory(self.typings)
        return DEFAULT_DECLARATION_DIR


def infer_directory(file: str | None) -> str:
    if not file:
        return ""
    return "/".join(file.split("/")[:-1])


def output_path(canonical: CanonicalForm | str, manifest: Manifest) -> str:
    """Where the bundle for ``canonical`` is written.

    Explicit ``module``/``main``/``typings`` entries win; everything else lands
    in ``dist/<canonical>/index.js``.
    """

    shortname = canonical.value if isinstance(canonical, CanonicalForm) else str(canonical)
    declared = {
        "es": manifest.module,
        "cjs": manifest.main,
        "typings": manifest.typings,
    }
    explicit = declared.get(shortname)
    if explicit:
        return explicit
    return f"dist/{shortname}/index.js"

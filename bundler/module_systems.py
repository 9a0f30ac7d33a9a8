"""Requested module systems and their canonical short forms."""
from __future__ import annotations

from enum import Enum
from typing import Sequence

from .errors import InvalidModuleSystemError


class ModuleSystem(str, Enum):
    ESNEXT = "esnext"
    ES2020 = "es2020"
    ES2015 = "es2015"
    COMMONJS = "commonjs"
    IIFE = "iife"
    UMD = "umd"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse_all(cls, tokens: Sequence[str]) -> list["ModuleSystem"]:
        """Exact, case-sensitive match; the error names every requested token."""
        valid = cls.values()
        if not all(token in valid for token in tokens):
            raise InvalidModuleSystemError(tokens, valid)
        return [cls(token) for token in tokens]

    @property
    def canonical(self) -> "CanonicalForm":
        return normalize(self.value)


class CanonicalForm(str, Enum):
    ES = "es"
    CJS = "cjs"
    IIFE = "iife"
    UMD = "umd"


def normalize(token: str) -> CanonicalForm:
    """Reduce ES and CommonJS targets to ``es`` and ``cjs``.

    Matching is case-insensitive and works on prefixes, so ``ES2020`` and
    ``esnext`` both become ``es``. Canonical forms map to themselves.
    """

    lowered = token.lower()
    if lowered.startswith("es"):
        return CanonicalForm.ES
    if lowered.startswith("commonjs"):
        return CanonicalForm.CJS
    try:
        return CanonicalForm(lowered)
    except ValueError:
        raise InvalidModuleSystemError([token], ModuleSystem.values()) from None


def output_format(system: ModuleSystem) -> str:
    """Rollup ``output.format`` for ``system``."""

    if system.canonical.value.startswith("es"):
        return "es"
    return system.value


def uses_global_vars(system: ModuleSystem) -> bool:
    return system in (ModuleSystem.UMD, ModuleSystem.IIFE)


def emits_declarations(canonical: CanonicalForm, requested_count: int) -> bool:
    """Type declarations come from the ES build unless it is the only build."""

    return requested_count == 1 or canonical is CanonicalForm.ES

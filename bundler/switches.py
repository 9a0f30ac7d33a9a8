"""Command line switch handling."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping
import re

_LEADING_DASHES = re.compile(r"^-(-)?")

# Switches that only make sense as ``--name=value``.
VALUE_SWITCHES = ("config",)


@dataclass(frozen=True)
class Switches:
    """Flags collected from ``-x``/``--x`` arguments, dashes stripped.

    ``--name=value`` switches also record ``value`` under ``name``.
    """

    flags: FrozenSet[str] = frozenset()
    values: Mapping[str, str] = field(default_factory=dict)

    def has(self, *names: str) -> bool:
        return any(name in self.flags for name in names)

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    @property
    def minify(self) -> bool:
        return self.has("min")

    @property
    def closure(self) -> bool:
        return self.has("closure")

    @property
    def verbose(self) -> bool:
        return self.has("v", "verbose")

    @property
    def analyze(self) -> bool:
        return self.has("analyze")

    @property
    def dry_run(self) -> bool:
        return self.has("n", "dry-run")

    @property
    def help(self) -> bool:
        return self.has("h", "help")


def split_arguments(argv: Iterable[str]) -> tuple[List[str], Switches]:
    """Separate requested module systems from switches.

    Raises ValueError for a bare dash or a value switch without ``=value``.
    """

    tokens: List[str] = []
    flags: set[str] = set()
    values: Dict[str, str] = {}
    for raw in argv:
        if not raw.startswith("-"):
            tokens.append(raw)
            continue
        name = _LEADING_DASHES.sub("", raw, count=1)
        value = None
        if "=" in name:
            name, _, value = name.partition("=")
        if not name:
            raise ValueError(f"empty switch '{raw}'")
        if value is not None:
            values[name] = value
        if name in VALUE_SWITCHES and not value:
            raise ValueError(f"switch '{raw}' expects a value: --{name}=VALUE")
        flags.add(name)
    return tokens, Switches(flags=frozenset(flags), values=values)

"""Failure kinds reported by the build driver."""
from __future__ import annotations

from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    INVALID_MODULE_SYSTEM = "invalid-module-system"
    MISSING_ENTRY_POINT = "missing-entry-point"
    CONFIGURATION = "configuration"
    BUNDLING = "bundling"


# An invalid module system exits with 0, matching the historical build script.
EXIT_CODES = {
    ErrorKind.INVALID_MODULE_SYSTEM: 0,
    ErrorKind.MISSING_ENTRY_POINT: 1,
    ErrorKind.CONFIGURATION: 1,
    ErrorKind.BUNDLING: 1,
}


class BuildError(RuntimeError):
    """Base class for every fatal build failure."""

    kind: ErrorKind = ErrorKind.CONFIGURATION
    show_traceback = False

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]


class InvalidModuleSystemError(BuildError):
    kind = ErrorKind.INVALID_MODULE_SYSTEM

    def __init__(self, requested: Iterable[str], valid: Iterable[str]):
        self.requested = list(requested)
        self.valid = list(valid)
        super().__init__(
            "You specified an invalid module system. "
            f"Valid module systems are: {', '.join(self.valid)}; "
            f"and you specified: {', '.join(self.requested)}!"
        )


class MissingEntryPointError(BuildError):
    kind = ErrorKind.MISSING_ENTRY_POINT

    def __init__(self, entry_point: str):
        self.entry_point = entry_point
        super().__init__(f'The source entry point was set as "{entry_point}" but this was not found!')


class ConfigurationError(BuildError):
    """Raised when a Rollup configuration (or its inputs) cannot be assembled."""

    kind = ErrorKind.CONFIGURATION
    show_traceback = True


class BundlingError(BuildError):
    """Raised when Rollup fails to produce or write a bundle."""

    kind = ErrorKind.BUNDLING
    show_traceback = True

"""Running external tools (Rollup) with optional dry-run support."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence
import shlex
import subprocess


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


@dataclass
class CommandResult:
    """Exit status of a command whose output went straight to the terminal."""

    command: Sequence[str]
    returncode: int


class CommandError(RuntimeError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, result: CommandResult):
        super().__init__(
            f"Command failed with exit code {result.returncode}: {format_command(result.command)}\n"
            "stdout/stderr already streamed above."
        )
        self.result = result


class CommandRunner:
    """Abstract command runner interface."""

    def run(self, command: Sequence[str], *, cwd: Path | None = None, note: str | None = None) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """Runs commands via :mod:`subprocess`, inheriting stdout and stderr.

    With ``echo`` enabled every command is printed (``$ cmd``) before it runs.
    """

    def __init__(self, *, echo: bool = False) -> None:
        self.echo = echo

    def run(self, command: Sequence[str], *, cwd: Path | None = None, note: str | None = None) -> CommandResult:
        if self.echo:
            print(f"$ {format_command(command)}")
        process = subprocess.run(command, cwd=str(cwd) if cwd else None, check=False)
        result = CommandResult(command=list(command), returncode=process.returncode)
        if result.returncode != 0:
            raise CommandError(result)
        return result


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    note: str | None


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them."""

    def __init__(self) -> None:
        self.commands: List[RecordedCommand] = []

    def run(self, command: Sequence[str], *, cwd: Path | None = None, note: str | None = None) -> CommandResult:
        self.commands.append(RecordedCommand(command=list(command), cwd=str(cwd) if cwd else None, note=note))
        return CommandResult(command=list(command), returncode=0)

    def iter_formatted(self) -> Iterable[str]:
        for record in self.commands:
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if record.cwd:
                parts.append(f"(cwd={record.cwd})")
            parts.append(format_command(record.command))
            yield " ".join(parts)

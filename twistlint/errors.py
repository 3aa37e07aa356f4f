# twistlint/errors.py
"""
Exception hierarchy for twistlint.

Only two situations abort a run: a broken configuration (which includes a
malformed decorator table) and an internal failure. Source files that do
not parse are reported per file as ``parseError`` diagnostics, so
:class:`SourceParseError` is caught by the checker runner and never
reaches the command line.

Hierarchy::

    TwistLintError
    ├── SourceParseError     - the front end rejected a source file
    └── ConfigError          - .twistrc / command-line configuration
        └── RegistryError    - decorator table cannot be turned into a registry
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceSpan:
    """A region of a source file, 1-based line and column."""

    file: str = "<input>"
    line: int = 1
    column: int = 1
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    def __post_init__(self) -> None:
        # A single point: collapse a missing end onto the start.
        if self.end_line is None:
            object.__setattr__(self, "end_line", self.line)
        if self.end_column is None:
            object.__setattr__(self, "end_column", self.column)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class TwistLintError(Exception):
    """Base class of every error raised by twistlint."""

    def __init__(self, message: str, span: Optional[SourceSpan] = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        if self.span is not None:
            return f"{self.span}: {self.message}"
        return self.message


class SourceParseError(TwistLintError):
    """Raised by :func:`twistlint.parser.parse` on malformed input."""


class ConfigError(TwistLintError):
    """Invalid configuration: unknown rule, bad severity, bad option."""


class RegistryError(ConfigError):
    """The decorator table is malformed; no partial registry is built."""


__all__ = [
    "SourceSpan",
    "TwistLintError",
    "SourceParseError",
    "ConfigError",
    "RegistryError",
]

"""
twistlint/diagnostics.py
════════════════════════

Diagnostic model shared by the analyses and the checkers.

Two levels exist:

  * :class:`Finding`: what the binding resolver and the attribute
    validator produce.  It points at a syntax node and carries one of the
    two core kinds (unresolved identifier, invalid binding value).
  * :class:`Diagnostic`: what a checker reports.  It has a location,
    a severity, an error id and the rule that raised it, and serialises to
    GCC-style text or one JSON object per line.

:class:`SuppressionManager` filters diagnostics through inline
``twistlint-disable`` comments, per-file patterns and global ids.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatch
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from twistlint.directives import WILDCARD, Directives
from twistlint.nodes import Node


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — CORE FINDINGS
# ═════════════════════════════════════════════════════════════════════════

class FindingKind(Enum):
    UNRESOLVED_IDENTIFIER = "undefinedIdentifier"
    INVALID_BINDING_VALUE = "invalidBindingValue"


@dataclass(frozen=True)
class Finding:
    """A problem found by the binding resolver, anchored on a syntax node."""
    node: Node
    message: str
    kind: FindingKind

    @property
    def error_id(self) -> str:
        return self.kind.value


def undefined_message(name: str) -> str:
    return f"'{name}' is not defined."


def invalid_binding_message(expr_text: str, attr_name: str) -> str:
    return (
        f'"{expr_text}" is not an identifier. '
        f'The "{attr_name}" attribute can only be used with an identifier.'
    )


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """Severity levels, named the way rule configuration names them."""
    ERROR = "error"
    WARNING = "warning"

    @property
    def rank(self) -> int:
        return 2 if self is DiagnosticSeverity.ERROR else 1


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single reported problem.

    Attributes
    ----------
    error_id  : Machine-readable id (e.g., "undefinedIdentifier")
    message   : Human-readable description
    severity  : DiagnosticSeverity
    location  : Primary source location
    rule      : Name of the rule (checker) that produced this
    node_type : Syntax node type the diagnostic is anchored on
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    rule: str = ""
    node_type: str = ""

    @property
    def sort_key(self) -> Tuple[str, int, int]:
        return (self.location.file, self.location.line, self.location.column)

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "errorId": self.error_id,
            "rule": self.rule,
        }
        if self.node_type:
            result["nodeType"] = self.node_type
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message [id]."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"


def diagnostic_at(node: Node, filename: str, error_id: str, message: str,
                  severity: DiagnosticSeverity, rule: str) -> Diagnostic:
    return Diagnostic(
        error_id=error_id,
        message=message,
        severity=severity,
        location=SourceLocation(filename, node.line, node.column),
        rule=rule,
        node_type=node.type,
    )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Inline comments:  ``// twistlint-disable-line no-undef``
      2. File-level suppressions (``/* twistlint-disable id */`` or passed
         programmatically with a file pattern)
      3. Global suppressions (command-line or config)

    A suppression id matches a diagnostic's error id or its rule name.
    """

    def __init__(self) -> None:
        # (file, line) → ids suppressed at that line
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # file pattern → ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_directives(self, filename: str, directives: Directives) -> None:
        """Register the suppression comments of one file."""
        for line, ids in directives.line_suppressions.items():
            self._inline[(filename, line)].update(ids)
        if directives.file_suppressions:
            self._file_level[filename].update(directives.file_suppressions)

    def add_file_suppression(self, error_id: str, file_pattern: str) -> None:
        """Suppress ``error_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(error_id)

    def add_global_suppression(self, error_id: str) -> None:
        self._global.add(error_id)

    @staticmethod
    def _matches(ids: Set[str], diag: Diagnostic) -> bool:
        return WILDCARD in ids or diag.error_id in ids or (bool(diag.rule) and diag.rule in ids)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        if self._matches(self._global, diag):
            return True
        loc = diag.location
        if self._matches(self._inline.get((loc.file, loc.line), set()), diag):
            return True
        for pattern, ids in self._file_level.items():
            if self._matches(ids, diag):
                if pattern == loc.file or loc.file.endswith(pattern) or fnmatch(loc.file, pattern):
                    return True
        return False

    def filter_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
    return sorted(diagnostics, key=lambda d: d.sort_key)


def parse_severity(value: Optional[str]) -> Optional[DiagnosticSeverity]:
    """``"error"``/``"warn"``/``"warning"`` (or 2/1) → severity; ``"off"``/0 → None."""
    mapping = {
        "error": DiagnosticSeverity.ERROR, "2": DiagnosticSeverity.ERROR,
        "warn": DiagnosticSeverity.WARNING, "warning": DiagnosticSeverity.WARNING,
        "1": DiagnosticSeverity.WARNING,
        "off": None, "0": None,
    }
    key = str(value).lower()
    if key not in mapping:
        raise ValueError(f"unknown severity {value!r}")
    return mapping[key]


__all__ = [
    "FindingKind",
    "Finding",
    "undefined_message",
    "invalid_binding_message",
    "DiagnosticSeverity",
    "SourceLocation",
    "Diagnostic",
    "diagnostic_at",
    "SuppressionManager",
    "sort_diagnostics",
    "parse_severity",
]

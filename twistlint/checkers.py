"""
twistlint/checkers.py
═════════════════════

Checker framework and the Twist rules.

A checker is a class with metadata (``name``, ``description``,
``error_ids``, ``default_severity``) and a four-phase lifecycle::

    configure(ctx)         read the rule setting (severity, options)
    collect_evidence(ctx)  run or consume analyses
    diagnose(ctx)          turn evidence into diagnostics
    report(ctx)            drop suppressed diagnostics

The runner parses a file once, runs scope analysis once, and hands the
same :class:`CheckerContext` to every enabled checker in registry order.

Rules
─────
  jsx-member-vars     JSX tag names count as uses of their variables
  no-undef            unresolved identifiers, template-aware
  constructor-super   ``super()`` calls of constructors, decorator-aware
  no-unused-vars      declared variables that nothing uses

Usage
─────
    runner = CheckerRunner(LintConfig.recommended())
    results = runner.run_source(source, "app.jsx")
    print(results.to_gcc_format())
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Set, Type

from twistlint.codepath import SuperProblem, analyze_constructor
from twistlint.config import LintConfig
from twistlint.derived import is_derived, is_possible_constructor
from twistlint.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    FindingKind,
    SourceLocation,
    SuppressionManager,
    diagnostic_at,
    sort_diagnostics,
)
from twistlint.directives import WILDCARD, Directives, parse_directives
from twistlint.environments import ENVIRONMENTS, globals_for
from twistlint.errors import ConfigError, SourceParseError, SourceSpan
from twistlint.nodes import (
    JSXOpeningElement,
    MethodDefinition,
    Node,
    Program,
    recursion_headroom,
)
from twistlint.parser import parse
from twistlint.registry import DecoratorRegistry
from twistlint.resolver import ScopeWalkResolver
from twistlint.scope import ScopeManager, analyze
from twistlint.usage import tag_root_name

logger = logging.getLogger(__name__)

PARSE_ERROR_ID = "parseError"
INTERNAL_ERROR_ID = "checkerInternalError"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Checker(ABC):
    """
    Abstract base class for all rules.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING
    option_types: ClassVar[Dict[str, type]] = {}

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []
        self.severity: DiagnosticSeverity = self.default_severity
        self.options: Dict[str, Any] = {}

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    @classmethod
    def check_options(cls, options: Dict[str, Any]) -> None:
        """Raise :class:`ConfigError` for unknown or mistyped options."""
        for key, value in options.items():
            expected = cls.option_types.get(key)
            if expected is None:
                raise ConfigError(f"rule {cls.name!r} has no option {key!r}")
            if not isinstance(value, expected):
                raise ConfigError(
                    f"rule {cls.name!r}: option {key!r} must be {expected.__name__}")

    def configure(self, ctx: CheckerContext) -> None:
        """Take severity and options from the rule setting, if there is one."""
        setting = ctx.config.rule(self.name)
        if setting.severity is not None:
            self.severity = setting.severity
        self.options = dict(setting.options)

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(self, node: Node, error_id: str, message: str, ctx: CheckerContext) -> None:
        self._diagnostics.append(
            diagnostic_at(node, ctx.filename, error_id, message, self.severity, self.name))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


@dataclass
class CheckerContext:
    """
    Shared per-file context passed to every checker.

    Attributes
    ----------
    filename      : name used in diagnostic locations
    source        : text of the file
    program       : parsed syntax tree
    scope_manager : scope analysis of ``program``
    decorators    : decorator registry of the run
    config        : lint configuration of the run
    suppressions  : SuppressionManager
    analyses      : results shared between checkers (keyed by name)
    """
    filename: str
    source: str
    program: Program
    scope_manager: ScopeManager
    decorators: DecoratorRegistry
    config: LintConfig = field(default_factory=LintConfig.recommended)
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    analyses: Dict[str, Any] = field(default_factory=dict)

    def get_analysis(self, name: str) -> Any:
        return self.analyses.get(name)

    def set_analysis(self, name: str, result: Any) -> None:
        self.analyses[name] = result


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """
    Registry of available checkers.  Registration order is run order.

    Usage
    -----
    >>> registry = CheckerRegistry()
    >>> registry.register(NoUndefChecker)
    >>> registry.filter_by_error_id("undefinedIdentifier")
    [<class 'twistlint.checkers.NoUndefChecker'>]
    """

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[Checker]] = {}

    def register(self, checker_cls: Type[Checker]) -> Type[Checker]:
        """Register a checker class.  Usable as a class decorator."""
        self._checkers[checker_cls.name] = checker_cls
        return checker_cls

    def get_all(self) -> List[Type[Checker]]:
        return list(self._checkers.values())

    def get_by_name(self, name: str) -> Optional[Type[Checker]]:
        return self._checkers.get(name)

    def filter_by_error_id(self, error_id: str) -> List[Type[Checker]]:
        return [cls for cls in self._checkers.values() if error_id in cls.error_ids]

    @property
    def names(self) -> List[str]:
        return sorted(self._checkers.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._checkers


_DEFAULT_REGISTRY = CheckerRegistry()


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — RULES
# ═════════════════════════════════════════════════════════════════════════

@_DEFAULT_REGISTRY.register
class JsxMemberVarsChecker(Checker):
    """
    Marks the variables named by JSX tags as used.

    ``<App>`` uses ``App``, ``<App:Member>`` and ``<App.Foo>`` use ``App``.
    The rule reports nothing itself; it only affects ``no-unused-vars``,
    which must run after it.
    """

    name = "jsx-member-vars"
    description = "Count JSX tag names as uses of the variables they name"
    error_ids = frozenset()
    default_severity = DiagnosticSeverity.WARNING

    def collect_evidence(self, ctx: CheckerContext) -> None:
        marked = []
        for node in ctx.program.walk():
            if not isinstance(node, JSXOpeningElement):
                continue
            name = tag_root_name(node)
            if name is not None and ctx.scope_manager.mark_used(name, node):
                marked.append(name)
        ctx.set_analysis("jsx-used-names", marked)

    def diagnose(self, ctx: CheckerContext) -> None:
        pass


@_DEFAULT_REGISTRY.register
class NoUndefChecker(Checker):
    """
    Unresolved identifiers, with Twist template bindings taken into account.

    Names bound by ``<repeat for=...>``, ``<repeat as=...>``,
    ``<using as=...>`` and ``as`` on any element resolve inside that
    element; registered global decorators resolve inside decorators.
    Option ``typeof`` (default false) also checks operands of ``typeof``.
    """

    name = "no-undef"
    description = "Disallow undeclared variables unless a template binds them"
    error_ids = frozenset({
        FindingKind.UNRESOLVED_IDENTIFIER.value,
        FindingKind.INVALID_BINDING_VALUE.value,
    })
    default_severity = DiagnosticSeverity.ERROR
    option_types = {"typeof": bool}

    def __init__(self) -> None:
        super().__init__()
        self._findings = []

    def configure(self, ctx: CheckerContext) -> None:
        super().configure(ctx)
        self.consider_typeof = self.options.get("typeof", False)

    def collect_evidence(self, ctx: CheckerContext) -> None:
        resolver = ScopeWalkResolver(ctx.decorators, ctx.source, self.consider_typeof)
        self._findings = resolver.validate_bindings(ctx.program)
        self._findings.extend(resolver.resolve(ctx.scope_manager.through))

    def diagnose(self, ctx: CheckerContext) -> None:
        for finding in self._findings:
            self._emit(finding.node, finding.error_id, finding.message, ctx)


@_DEFAULT_REGISTRY.register
class ConstructorSuperChecker(Checker):
    """
    Constructors of derived classes call ``super()`` exactly once on every
    path; constructors of other classes do not call it.

    A class is derived when it has an ``extends`` clause or when one of
    its decorators injects a base class.
    """

    name = "constructor-super"
    description = "Require super() calls in constructors of derived classes"
    error_ids = frozenset(problem.value for problem in SuperProblem)
    default_severity = DiagnosticSeverity.ERROR

    def __init__(self) -> None:
        super().__init__()
        self._findings = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        for node in ctx.program.walk():
            if not isinstance(node, MethodDefinition) or node.kind != "constructor":
                continue
            class_node = node.parent.parent
            derived = is_derived(class_node, ctx.decorators)
            super_class = class_node.super_class
            super_is_constructor = is_possible_constructor(super_class) if super_class else True
            self._findings.extend(analyze_constructor(node, derived, super_is_constructor))

    def diagnose(self, ctx: CheckerContext) -> None:
        for finding in self._findings:
            self._emit(finding.node, finding.problem.value, finding.message, ctx)


@_DEFAULT_REGISTRY.register
class NoUnusedVarsChecker(Checker):
    """Declared variables that are never read, used in JSX or exported."""

    name = "no-unused-vars"
    description = "Disallow unused variables"
    error_ids = frozenset({"unusedVariable"})
    default_severity = DiagnosticSeverity.WARNING

    def __init__(self) -> None:
        super().__init__()
        self._unused = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._unused = ctx.scope_manager.unused_variables()

    def diagnose(self, ctx: CheckerContext) -> None:
        for variable in self._unused:
            if any(ref.is_write for ref in variable.references):
                message = f"'{variable.name}' is assigned a value but never used."
            else:
                message = f"'{variable.name}' is defined but never used."
            self._emit(variable.defs[0], "unusedVariable", message, ctx)


def default_checker_registry() -> CheckerRegistry:
    return _DEFAULT_REGISTRY


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running the rules over one or more files.

    Attributes
    ----------
    diagnostics            : All diagnostics, sorted by file, line, column
    diagnostics_by_checker : Diagnostics grouped by rule name
    stats                  : Timing and counting statistics
    checker_names          : Names of rules that were run
    files                  : Files that were checked
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == DiagnosticSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == DiagnosticSeverity.WARNING)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    def messages(self) -> List[str]:
        return [d.message for d in self.diagnostics]

    def extend(self, other: "CheckerRunResults") -> None:
        """Fold the results of another run into this one."""
        self.diagnostics = sort_diagnostics(self.diagnostics + other.diagnostics)
        for name, diags in other.diagnostics_by_checker.items():
            self.diagnostics_by_checker[name].extend(diags)
        for key, val in other.stats.items():
            self.stats[key] = self.stats.get(key, 0) + val
        for name in other.checker_names:
            if name not in self.checker_names:
                self.checker_names.append(name)
        self.files.extend(other.files)

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Checked {len(self.files)} file(s): {self.total_count} problems "
            f"({self.error_count} errors, {self.warning_count} warnings)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs the enabled rules of a configuration over source files.

    The configuration is validated and its decorator table is turned into
    a registry once, here, so a broken table fails before any file is
    read.

    Parameters
    ----------
    config       : LintConfig (default: recommended rules)
    registry     : CheckerRegistry, source of checker classes
    suppressions : SuppressionManager with command-line suppressions
    """

    def __init__(
        self,
        config: Optional[LintConfig] = None,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
    ) -> None:
        self.config = config if config is not None else LintConfig.recommended()
        self.registry = registry or _DEFAULT_REGISTRY
        self.suppressions = suppressions or SuppressionManager()
        self.config.validate(self.registry.names)
        for name, setting in self.config.rules.items():
            self.registry.get_by_name(name).check_options(dict(setting.options))
        globals_for(self.config.env)
        for error_id, patterns in self.config.suppressions.items():
            for pattern in patterns:
                self.suppressions.add_file_suppression(error_id, pattern)
        self.decorators = self.config.build_registry()
        logger.debug("decorator registry: %r", self.decorators)

    def _checker_classes(self) -> List[Type[Checker]]:
        enabled = set(self.config.enabled_rules())
        return [cls for cls in self.registry.get_all() if cls.name in enabled]

    def _known_ids(self) -> Set[str]:
        known = {WILDCARD, PARSE_ERROR_ID}
        for cls in self.registry.get_all():
            known.add(cls.name)
            known.update(cls.error_ids)
        return known

    def _load_directives(self, filename: str, directives: Directives) -> None:
        known = self._known_ids()
        mentioned = set(directives.file_suppressions)
        for ids in directives.line_suppressions.values():
            mentioned.update(ids)
        for unknown in sorted(mentioned - known):
            logger.warning("%s: suppression comment names unknown rule %r", filename, unknown)
        self.suppressions.load_directives(filename, directives)

    def _globals(self, filename: str, directives: Directives) -> Dict[str, bool]:
        envs = list(self.config.env)
        for env in directives.env:
            if env in ENVIRONMENTS:
                envs.append(env)
            else:
                logger.warning("%s: unknown environment %r in eslint-env comment", filename, env)
        names = globals_for(envs)
        names.update(self.config.globals)
        names.update(directives.globals)
        return names

    def _parse_failure(self, results: CheckerRunResults, exc: SourceParseError) -> CheckerRunResults:
        filename = results.files[0]
        span = exc.span
        diag = Diagnostic(
            error_id=PARSE_ERROR_ID,
            message=exc.message,
            severity=DiagnosticSeverity.ERROR,
            location=SourceLocation(filename, span.line if span else 0,
                                    span.column if span else 0),
        )
        logger.info("%s: %s", filename, exc)
        results.diagnostics = self.suppressions.filter_diagnostics([diag])
        return results

    def _run_checkers(self, ctx: CheckerContext, results: CheckerRunResults) -> List[Diagnostic]:
        filename = ctx.filename
        diagnostics: List[Diagnostic] = []
        for cls in self._checker_classes():
            checker = cls()
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except Exception as exc:
                # report the failure, keep checking the other rules and files
                logger.warning("%s: rule %s failed: %s", filename, checker_name, exc)
                diags = [Diagnostic(
                    error_id=INTERNAL_ERROR_ID,
                    message=f"Rule '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.ERROR,
                    location=SourceLocation(filename, 1, 1),
                    rule=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name] = diags
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms
        return diagnostics

    def run_source(self, source: str, filename: str = "<input>") -> CheckerRunResults:
        """Check one source text.

        A file that cannot be parsed, or is nested too deeply to analyse,
        yields a single ``parseError`` diagnostic.
        """
        results = CheckerRunResults(files=[filename])
        directives = parse_directives(source)
        self._load_directives(filename, directives)
        names = self._globals(filename, directives)

        t0 = time.monotonic()
        try:
            program = parse(source, filename)
            with recursion_headroom():
                scope_manager = analyze(program, names)
        except SourceParseError as exc:
            return self._parse_failure(results, exc)
        except RecursionError:
            exc = SourceParseError("Parsing error: input is nested too deeply",
                                   SourceSpan(filename, 1, 1))
            return self._parse_failure(results, exc)
        results.stats["parse_elapsed_ms"] = (time.monotonic() - t0) * 1000.0

        ctx = CheckerContext(
            filename=filename,
            source=source,
            program=program,
            scope_manager=scope_manager,
            decorators=self.decorators,
            config=self.config,
            suppressions=self.suppressions,
        )
        with recursion_headroom():
            diagnostics = self._run_checkers(ctx, results)

        results.diagnostics = sort_diagnostics(diagnostics)
        logger.debug("%s: %d diagnostics", filename, len(results.diagnostics))
        return results

    def run_files(self, paths: Iterable[Path]) -> CheckerRunResults:
        """Check files.  Unreadable files raise :class:`OSError`."""
        combined = CheckerRunResults()
        for path in paths:
            path = Path(path)
            source = path.read_text(encoding="utf-8")
            combined.extend(self.run_source(source, str(path)))
        return combined


def lint(source: str, config: Optional[LintConfig] = None,
         filename: str = "<input>") -> List[Diagnostic]:
    """Diagnostics for *source* under *config* (recommended rules by default)."""
    return CheckerRunner(config).run_source(source, filename).diagnostics


__all__ = [
    "PARSE_ERROR_ID",
    "Checker",
    "CheckerContext",
    "CheckerRegistry",
    "JsxMemberVarsChecker",
    "NoUndefChecker",
    "ConstructorSuperChecker",
    "NoUnusedVarsChecker",
    "default_checker_registry",
    "CheckerRunResults",
    "CheckerRunner",
    "lint",
]

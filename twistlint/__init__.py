"""
twistlint — lint JavaScript and JSX written for the Twist framework.

Ordinary scope analysis reports names that Twist templates and decorators
legitimately provide.  twistlint resolves those names the way Twist
does: ``<repeat>``, ``<using>`` and ``as`` attributes bind names for the
markup inside them, registered decorators are available without an
import, and decorators that inject a base class make a class derived
for the constructor ``super()`` check.

Quick start::

    from twistlint import lint
    for diag in lint(source):
        print(diag.to_gcc_format())
"""

__version__ = "0.1.0"

from twistlint.checkers import CheckerRunner, CheckerRunResults, lint
from twistlint.config import LintConfig
from twistlint.derived import is_derived, is_effectively_derived
from twistlint.diagnostics import Diagnostic, DiagnosticSeverity, Finding, FindingKind
from twistlint.errors import ConfigError, RegistryError, SourceParseError, TwistLintError
from twistlint.parser import parse
from twistlint.registry import DecoratorRegistry, DecoratorSpec, default_registry
from twistlint.resolver import ScopeWalkResolver
from twistlint.scope import analyze

__all__ = [
    "__version__",
    "CheckerRunner",
    "CheckerRunResults",
    "lint",
    "LintConfig",
    "is_derived",
    "is_effectively_derived",
    "Diagnostic",
    "DiagnosticSeverity",
    "Finding",
    "FindingKind",
    "ConfigError",
    "RegistryError",
    "SourceParseError",
    "TwistLintError",
    "parse",
    "DecoratorRegistry",
    "DecoratorSpec",
    "default_registry",
    "ScopeWalkResolver",
    "analyze",
]

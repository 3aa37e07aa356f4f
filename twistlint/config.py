# twistlint/config.py
"""
Lint configuration.

A configuration says which rules run and how severe their diagnostics are,
which extra globals and environments are in effect, and which decorators
the project's Twist setup provides.  It is read from a JSON ``.twistrc``
(or ``.twistrc.json``) file::

    {
        "extends": "recommended",
        "rules": {
            "no-undef": ["error", {"typeof": true}],
            "no-unused-vars": "off"
        },
        "globals": {"analytics": false},
        "env": ["browser"],
        "decorators": {
            "Model": {"inherits": "BaseModel", "module": "app/model"}
        },
        "suppressions": {"no-unused-vars": ["*/vendor/*.js"]}
    }

Command-line options are layered on top with :meth:`LintConfig.merge`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from twistlint.diagnostics import DiagnosticSeverity, parse_severity
from twistlint.environments import ENVIRONMENTS
from twistlint.errors import ConfigError, RegistryError
from twistlint.registry import DecoratorRegistry, default_registry

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".twistrc", ".twistrc.json")

_TOP_LEVEL_KEYS = frozenset({
    "extends", "rules", "globals", "env", "decorators", "defaultDecorators", "suppressions",
})


@dataclass(frozen=True)
class RuleSetting:
    """Severity of one rule (None = off) and its options."""
    severity: Optional[DiagnosticSeverity]
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.severity is not None


def parse_rule_setting(name: str, value: Any) -> RuleSetting:
    options: Any = {}
    if isinstance(value, (list, tuple)):
        if not value:
            raise ConfigError(f"rule {name!r}: empty setting")
        if len(value) > 2:
            raise ConfigError(f"rule {name!r}: expected [severity, options]")
        value, options = value[0], (value[1] if len(value) > 1 else {})
    try:
        severity = parse_severity(value)
    except ValueError as exc:
        raise ConfigError(f"rule {name!r}: {exc}") from None
    if not isinstance(options, Mapping):
        raise ConfigError(f"rule {name!r}: options must be an object")
    return RuleSetting(severity, dict(options))


@dataclass
class LintConfig:
    rules: Dict[str, RuleSetting] = field(default_factory=dict)
    globals: Dict[str, bool] = field(default_factory=dict)
    env: List[str] = field(default_factory=list)
    decorators: Dict[str, Any] = field(default_factory=dict)
    default_decorators: bool = True
    # error id or rule name -> file patterns it is suppressed in
    suppressions: Dict[str, List[str]] = field(default_factory=dict)
    source: Optional[Path] = None

    # ── construction ─────────────────────────────────────────────

    @classmethod
    def recommended(cls) -> "LintConfig":
        return cls(rules={
            "jsx-member-vars": RuleSetting(DiagnosticSeverity.WARNING),
            "no-undef": RuleSetting(DiagnosticSeverity.ERROR),
            "constructor-super": RuleSetting(DiagnosticSeverity.ERROR),
            "no-unused-vars": RuleSetting(DiagnosticSeverity.WARNING),
        })

    @classmethod
    def from_dict(cls, data: Any, source: Optional[Path] = None) -> "LintConfig":
        where = f" in {source}" if source else ""
        if not isinstance(data, Mapping):
            raise ConfigError(f"configuration{where} must be a JSON object")
        unknown = set(data) - _TOP_LEVEL_KEYS
        if unknown:
            raise ConfigError(f"unknown configuration keys{where}: {', '.join(sorted(unknown))}")

        extends = data.get("extends")
        if extends is None:
            base = cls()
        elif extends == "recommended":
            base = cls.recommended()
        else:
            raise ConfigError(f"cannot extend {extends!r}{where}; only 'recommended' is built in")

        rules = data.get("rules", {})
        if not isinstance(rules, Mapping):
            raise ConfigError(f"'rules'{where} must be an object")
        for name, value in rules.items():
            base.rules[name] = parse_rule_setting(name, value)

        globals_ = data.get("globals", {})
        if not isinstance(globals_, Mapping):
            raise ConfigError(f"'globals'{where} must be an object")
        for name, writable in globals_.items():
            base.globals[name] = writable in (True, "writable", "writeable", "true")

        env = data.get("env", [])
        if isinstance(env, Mapping):
            env = [name for name, on in env.items() if on]
        if not isinstance(env, list):
            raise ConfigError(f"'env'{where} must be a list or an object")
        base.env.extend(env)

        decorators = data.get("decorators", {})
        if not isinstance(decorators, Mapping):
            raise ConfigError(f"'decorators'{where} must be an object")
        base.decorators.update(decorators)

        default_decorators = data.get("defaultDecorators", True)
        if not isinstance(default_decorators, bool):
            raise ConfigError(f"'defaultDecorators'{where} must be true or false")
        base.default_decorators = default_decorators

        suppressions = data.get("suppressions", {})
        if not isinstance(suppressions, Mapping):
            raise ConfigError(f"'suppressions'{where} must be an object")
        for error_id, patterns in suppressions.items():
            if isinstance(patterns, str):
                patterns = [patterns]
            if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
                raise ConfigError(f"suppression {error_id!r}{where}: expected a list of file patterns")
            base.suppressions.setdefault(error_id, []).extend(patterns)

        base.source = source
        base.validate()
        return base

    @classmethod
    def from_file(cls, path: Path) -> "LintConfig":
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"cannot read configuration {path}: {exc}") from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ConfigError(f"configuration {path} is not valid JSON: {exc}") from exc
        logger.debug("loaded configuration from %s", path)
        return cls.from_dict(data, source=path)

    @staticmethod
    def discover(start: Path) -> Optional[Path]:
        """First configuration file found walking up from *start*."""
        start = Path(start).resolve()
        directory = start if start.is_dir() else start.parent
        for candidate_dir in [directory, *directory.parents]:
            for filename in CONFIG_FILENAMES:
                candidate = candidate_dir / filename
                if candidate.is_file():
                    return candidate
        return None

    def merge(self, other: "LintConfig") -> "LintConfig":
        """A new configuration with *other* layered over this one."""
        rules = dict(self.rules)
        rules.update(other.rules)
        globals_ = dict(self.globals)
        globals_.update(other.globals)
        decorators = dict(self.decorators)
        decorators.update(other.decorators)
        env = list(self.env) + [e for e in other.env if e not in self.env]
        suppressions = {key: list(patterns) for key, patterns in self.suppressions.items()}
        for key, patterns in other.suppressions.items():
            suppressions.setdefault(key, []).extend(p for p in patterns if p not in suppressions[key])
        return replace(
            self,
            rules=rules,
            globals=globals_,
            env=env,
            decorators=decorators,
            suppressions=suppressions,
            default_decorators=self.default_decorators and other.default_decorators,
        )

    # ── validation and derived values ────────────────────────────

    def validate(self, known_rules: Optional[Iterable[str]] = None) -> None:
        """Raise :class:`ConfigError` for unknown environments or rules."""
        for env in self.env:
            if env not in ENVIRONMENTS:
                raise ConfigError(f"unknown environment {env!r}")
        if known_rules is not None:
            known = set(known_rules)
            for name in self.rules:
                if name not in known:
                    raise ConfigError(f"unknown rule {name!r}")
        if not isinstance(self.decorators, Mapping):
            raise RegistryError("decorator table must be a mapping")

    def rule(self, name: str) -> RuleSetting:
        return self.rules.get(name, RuleSetting(None))

    def enabled_rules(self) -> List[str]:
        return [name for name, setting in self.rules.items() if setting.enabled]

    def build_registry(self) -> DecoratorRegistry:
        """Decorator registry for the run: the bundled table plus ``decorators``.

        A malformed table raises :class:`RegistryError`; nothing partial is
        returned.
        """
        configured = DecoratorRegistry.from_config(self.decorators)
        if not self.default_decorators:
            return configured
        return default_registry().merged(configured)


__all__ = ["CONFIG_FILENAMES", "RuleSetting", "LintConfig", "parse_rule_setting"]

# tests/test_config.py
"""
Tests for LintConfig: reading .twistrc files, layering, validation and
the decorator registry a configuration produces.
"""

import json

import pytest

from twistlint.config import LintConfig, RuleSetting, parse_rule_setting
from twistlint.diagnostics import DiagnosticSeverity
from twistlint.errors import ConfigError, RegistryError


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestRuleSettings:

    @pytest.mark.parametrize("value, severity", [
        ("off", None),
        ("warn", DiagnosticSeverity.WARNING),
        ("error", DiagnosticSeverity.ERROR),
        (0, None),
        (1, DiagnosticSeverity.WARNING),
        (2, DiagnosticSeverity.ERROR),
        (["error"], DiagnosticSeverity.ERROR),
    ])
    def test_severities(self, value, severity):
        setting = parse_rule_setting("no-undef", value)
        assert setting.severity is severity
        assert setting.enabled is (severity is not None)

    def test_options(self):
        setting = parse_rule_setting("no-undef", ["error", {"typeof": True}])
        assert setting.options == {"typeof": True}

    @pytest.mark.parametrize("value", ["loud", [], ["error", {}, 3], ["error", "typeof"]])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            parse_rule_setting("no-undef", value)


class TestFromDict:

    def test_empty(self):
        config = LintConfig.from_dict({})
        assert config.rules == {}
        assert config.enabled_rules() == []
        assert config.default_decorators is True

    def test_extends_recommended(self):
        config = LintConfig.from_dict({"extends": "recommended", "rules": {"no-unused-vars": "off"}})
        assert config.rule("no-undef").severity is DiagnosticSeverity.ERROR
        assert not config.rule("no-unused-vars").enabled
        assert "no-unused-vars" not in config.enabled_rules()

    def test_unknown_base(self):
        with pytest.raises(ConfigError):
            LintConfig.from_dict({"extends": "airbnb"})

    def test_globals(self):
        config = LintConfig.from_dict({"globals": {"a": False, "b": True, "c": "writable", "d": "readonly"}})
        assert config.globals == {"a": False, "b": True, "c": True, "d": False}

    def test_env_as_list_or_object(self):
        assert LintConfig.from_dict({"env": ["browser"]}).env == ["browser"]
        assert LintConfig.from_dict({"env": {"browser": True, "node": False}}).env == ["browser"]

    def test_decorators(self):
        config = LintConfig.from_dict({"decorators": {"Model": {"inherits": "Base"}}, "defaultDecorators": False})
        registry = config.build_registry()
        assert registry.implies_base_class("Model")
        assert "Store" not in registry

    def test_suppressions(self):
        config = LintConfig.from_dict({"suppressions": {
            "no-unused-vars": ["*/vendor/*.js", "*.min.js"],
            "undefinedIdentifier": "legacy/*",
        }})
        assert config.suppressions == {
            "no-unused-vars": ["*/vendor/*.js", "*.min.js"],
            "undefinedIdentifier": ["legacy/*"],
        }

    @pytest.mark.parametrize("data", [
        [],
        {"unknown": 1},
        {"rules": []},
        {"globals": ["a"]},
        {"env": "browser"},
        {"env": ["mars"]},
        {"decorators": []},
        {"defaultDecorators": "yes"},
        {"suppressions": ["no-undef"]},
        {"suppressions": {"no-undef": [1]}},
    ])
    def test_invalid(self, data):
        with pytest.raises(ConfigError):
            LintConfig.from_dict(data)

    def test_unconfigured_rule_is_off(self):
        assert LintConfig().rule("no-undef") == RuleSetting(None)


class TestFiles:

    def test_from_file(self, tmp_path):
        path = _write(tmp_path / ".twistrc", {"rules": {"no-undef": "warn"}})
        config = LintConfig.from_file(path)
        assert config.rule("no-undef").severity is DiagnosticSeverity.WARNING
        assert config.source == path

    def test_bad_json(self, tmp_path):
        path = tmp_path / ".twistrc"
        path.write_text("{ rules: }", encoding="utf-8")
        with pytest.raises(ConfigError, match="not valid JSON"):
            LintConfig.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            LintConfig.from_file(tmp_path / "absent")

    def test_discover_walks_up(self, tmp_path):
        path = _write(tmp_path / ".twistrc.json", {})
        nested = tmp_path / "src" / "components"
        nested.mkdir(parents=True)
        source = nested / "app.jsx"
        source.write_text("", encoding="utf-8")
        assert LintConfig.discover(source) == path.resolve()
        assert LintConfig.discover(nested) == path.resolve()

    def test_discover_prefers_nearest(self, tmp_path):
        _write(tmp_path / ".twistrc", {})
        inner = tmp_path / "pkg"
        inner.mkdir()
        nearest = _write(inner / ".twistrc", {})
        assert LintConfig.discover(inner) == nearest.resolve()

    def test_discover_prefers_twistrc_over_json(self, tmp_path):
        plain = _write(tmp_path / ".twistrc", {})
        _write(tmp_path / ".twistrc.json", {})
        assert LintConfig.discover(tmp_path) == plain.resolve()


class TestMergeAndValidate:

    def test_merge_layers_values(self):
        base = LintConfig.from_dict({
            "extends": "recommended",
            "globals": {"a": False},
            "env": ["browser"],
            "decorators": {"Model": {}},
        })
        override = LintConfig(
            rules={"no-undef": RuleSetting(DiagnosticSeverity.WARNING)},
            globals={"a": True, "b": False},
            env=["browser", "node"],
            decorators={"View": {}},
        )
        merged = base.merge(override)
        assert merged.rule("no-undef").severity is DiagnosticSeverity.WARNING
        assert merged.rule("constructor-super").severity is DiagnosticSeverity.ERROR
        assert merged.globals == {"a": True, "b": False}
        assert merged.env == ["browser", "node"]
        assert set(merged.decorators) == {"Model", "View"}
        assert base.globals == {"a": False}

    def test_merge_suppressions(self):
        base = LintConfig(suppressions={"no-undef": ["a/*"]})
        merged = base.merge(LintConfig(suppressions={"no-undef": ["a/*", "b/*"], "x": ["c"]}))
        assert merged.suppressions == {"no-undef": ["a/*", "b/*"], "x": ["c"]}
        assert base.suppressions == {"no-undef": ["a/*"]}

    def test_merge_default_decorators(self):
        merged = LintConfig(default_decorators=False).merge(LintConfig())
        assert merged.default_decorators is False

    def test_unknown_rule(self):
        config = LintConfig(rules={"no-such-rule": RuleSetting(DiagnosticSeverity.ERROR)})
        config.validate()
        with pytest.raises(ConfigError, match="no-such-rule"):
            config.validate(known_rules=["no-undef"])

    def test_malformed_decorators_fail_registry_build(self):
        config = LintConfig(decorators={"Store": {"inherits": 1}})
        with pytest.raises(RegistryError):
            config.build_registry()

    def test_recommended(self):
        config = LintConfig.recommended()
        assert sorted(config.enabled_rules()) == [
            "constructor-super", "jsx-member-vars", "no-undef", "no-unused-vars",
        ]

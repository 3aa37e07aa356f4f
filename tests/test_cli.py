# tests/test_cli.py
"""
Tests for the twistlint command line: exit codes, output formats and
configuration handling.
"""

import json

import pytest

from twistlint import __version__, checkers
from twistlint.cli import EXIT_ERROR, EXIT_INFRA, EXIT_OK, iter_source_files, main


@pytest.fixture
def project(tmp_path):
    """A small source tree with one clean and one broken file."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "clean.jsx").write_text("export default <div />;\n", encoding="utf-8")
    (src / "broken.js").write_text("var unused;\nmissing();\n", encoding="utf-8")
    (src / "notes.txt").write_text("missing();\n", encoding="utf-8")
    modules = src / "node_modules" / "dep"
    modules.mkdir(parents=True)
    (modules / "index.js").write_text("alsoMissing();\n", encoding="utf-8")
    return tmp_path


class TestSourceFiles:

    def test_directory_walk(self, project):
        found = [p.name for p in iter_source_files([str(project / "src")])]
        assert found == ["broken.js", "clean.jsx"]

    def test_explicit_file(self, project):
        path = project / "src" / "notes.txt"
        assert list(iter_source_files([str(path)])) == [path]

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(iter_source_files([str(tmp_path / "nope")]))


class TestMain:

    def test_clean_file(self, project, capsys):
        assert main(["--no-config", str(project / "src" / "clean.jsx")]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_errors_give_exit_one(self, project, capsys):
        assert main(["--no-config", str(project / "src")]) == EXIT_ERROR
        out = capsys.readouterr().out.splitlines()
        assert len(out) == 2
        assert out[0].endswith("warning: 'unused' is defined but never used. [unusedVariable]")
        assert out[1].endswith("error: 'missing' is not defined. [undefinedIdentifier]")
        assert "broken.js:2:1:" in out[1]

    def test_warnings_only_exit_zero(self, project, capsys):
        path = project / "src" / "broken.js"
        assert main(["--no-config", "--global", "missing", str(path)]) == EXIT_OK
        assert "unusedVariable" in capsys.readouterr().out

    def test_quiet(self, project, capsys):
        main(["--no-config", "--quiet", str(project / "src")])
        out = capsys.readouterr().out
        assert "unusedVariable" not in out
        assert "undefinedIdentifier" in out

    def test_json_format(self, project, capsys):
        main(["--no-config", "--format", "json", str(project / "src" / "broken.js")])
        records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [r["errorId"] for r in records] == ["unusedVariable", "undefinedIdentifier"]
        assert records[1]["line"] == 2
        assert records[1]["nodeType"] == "Identifier"

    def test_summary_format(self, project, capsys):
        main(["--no-config", "--format", "summary", str(project / "src")])
        out = capsys.readouterr().out
        assert "Checked 2 file(s): 2 problems (1 errors, 1 warnings)" in out

    def test_rule_override(self, project, capsys):
        path = project / "src" / "broken.js"
        assert main(["--no-config", "--rule", "no-undef=off", str(path)]) == EXIT_OK
        assert "undefinedIdentifier" not in capsys.readouterr().out

    def test_rule_override_with_options(self, project, capsys):
        path = project / "src" / "typeof.js"
        path.write_text("typeof x;\n", encoding="utf-8")
        argv = ["--no-config", "--rule", 'no-undef=["error", {"typeof": true}]', str(path)]
        assert main(argv) == EXIT_ERROR
        assert "'x' is not defined." in capsys.readouterr().out

    def test_suppress(self, project, capsys):
        argv = ["--no-config", "--suppress", "undefinedIdentifier", str(project / "src")]
        assert main(argv) == EXIT_OK

    def test_suppress_by_file_pattern(self, project, capsys):
        argv = ["--no-config", "--suppress", "undefinedIdentifier:*/broken.js", str(project / "src")]
        assert main(argv) == EXIT_OK
        assert "unusedVariable" in capsys.readouterr().out

    def test_env(self, project, capsys):
        path = project / "src" / "browser.js"
        path.write_text("window.alert(1);\n", encoding="utf-8")
        assert main(["--no-config", str(path)]) == EXIT_ERROR
        assert main(["--no-config", "--env", "browser", str(path)]) == EXIT_OK

    def test_discovered_configuration(self, project, capsys):
        (project / ".twistrc").write_text(
            json.dumps({"extends": "recommended", "globals": {"missing": False}}),
            encoding="utf-8",
        )
        assert main([str(project / "src")]) == EXIT_OK

    def test_explicit_configuration(self, project, tmp_path, capsys):
        config = tmp_path / "lint.json"
        config.write_text(json.dumps({"rules": {"no-unused-vars": "error"}}), encoding="utf-8")
        assert main(["--config", str(config), str(project / "src" / "broken.js")]) == EXIT_ERROR
        out = capsys.readouterr().out
        assert "error: 'unused' is defined but never used." in out
        assert "undefinedIdentifier" not in out


class TestInfrastructureErrors:

    def test_file_too_deep_to_analyse(self, tmp_path, monkeypatch, capsys):
        real_analyze = checkers.analyze

        def analyze(program, globals):
            if any(n.type == "JSXElement" for n in program.body[0].child_nodes()):
                raise RecursionError("maximum recursion depth exceeded")
            return real_analyze(program, globals)

        monkeypatch.setattr(checkers, "analyze", analyze)
        (tmp_path / "deep.jsx").write_text("<div />;\n", encoding="utf-8")
        (tmp_path / "ok.js").write_text("missing();\n", encoding="utf-8")
        assert main(["--no-config", str(tmp_path)]) == EXIT_ERROR
        out = capsys.readouterr().out.splitlines()
        assert out[0].endswith("error: Parsing error: input is nested too deeply [parseError]")
        assert "deep.jsx:1:1:" in out[0]
        assert out[1].endswith("error: 'missing' is not defined. [undefinedIdentifier]")

    def test_missing_path(self, tmp_path, capsys):
        assert main(["--no-config", str(tmp_path / "nope.js")]) == EXIT_INFRA

    def test_unknown_rule(self, project, capsys):
        assert main(["--no-config", "--rule", "no-such=error", str(project)]) == EXIT_INFRA

    def test_bad_severity(self, project, capsys):
        assert main(["--no-config", "--rule", "no-undef=loud", str(project)]) == EXIT_INFRA

    def test_unknown_env(self, project, capsys):
        assert main(["--no-config", "--env", "mars", str(project)]) == EXIT_INFRA

    def test_bad_config_file(self, project, capsys):
        config = project / "broken.json"
        config.write_text("{", encoding="utf-8")
        assert main(["--config", str(config), str(project / "src")]) == EXIT_INFRA

    def test_malformed_decorator_table(self, project, capsys):
        config = project / "decorators.json"
        config.write_text(json.dumps({"decorators": {"Store": {"global": "yes"}}}), encoding="utf-8")
        assert main(["--config", str(config), str(project / "src")]) == EXIT_INFRA


class TestInformational:

    def test_list_rules(self, capsys):
        assert main(["--list-rules"]) == EXIT_OK
        out = capsys.readouterr().out
        for name in ("constructor-super", "jsx-member-vars", "no-undef", "no-unused-vars"):
            assert name in out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out

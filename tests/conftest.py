# tests/conftest.py
"""
Shared fixtures for the twistlint test suite.

``lint_rules`` runs chosen rules over a source snippet and returns the
diagnostics; ``messages`` strips them down to their messages.  Snippets
are dedented, so they can be written indented inside the tests.
"""

import textwrap

import pytest

from twistlint.checkers import CheckerRunner
from twistlint.config import LintConfig, RuleSetting
from twistlint.diagnostics import DiagnosticSeverity
from twistlint.parser import parse
from twistlint.registry import DecoratorRegistry, default_registry
from twistlint.scope import analyze


# ---------------------------------------------------------------------------
# Source snippets shared by several modules
# ---------------------------------------------------------------------------

REPEAT_FOR_SRC = """
var fruits = [ "apple", "orange", "watermelon" ];
export default <ul>
    <repeat for={ item in fruits }>
        <li>{ item }</li>
    </repeat>
</ul>;
"""

USING_OUTSIDE_SRC = """
var fruits = "apple";
export default <ul>
    <using value={ fruits } as={ fruit }>
        <li>{ fruit }</li>
    </using>
    <div>{ fruit }</div>
</ul>;
"""

STORE_WITHOUT_SUPER_SRC = """
@Store
class MyStore {
    constructor() {
        this.x = 2;
    }
}
"""


def make_config(*rules, options=None, **kwargs) -> LintConfig:
    """A configuration enabling exactly *rules* at error severity."""
    options = options or {}
    settings = {
        name: RuleSetting(DiagnosticSeverity.ERROR, options.get(name, {}))
        for name in rules
    }
    return LintConfig(rules=settings, **kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def registry() -> DecoratorRegistry:
    return default_registry()


@pytest.fixture
def lint_rules():
    """``lint_rules(source, *rules, options=None, **config)`` → diagnostics."""
    def _lint(source, *rules, options=None, filename="test.jsx", **kwargs):
        config = make_config(*rules, options=options, **kwargs)
        runner = CheckerRunner(config)
        return runner.run_source(textwrap.dedent(source), filename).diagnostics
    return _lint


@pytest.fixture
def messages(lint_rules):
    """``messages(source, *rules, **kw)`` → list of diagnostic messages."""
    def _messages(source, *rules, **kwargs):
        return [d.message for d in lint_rules(source, *rules, **kwargs)]
    return _messages


@pytest.fixture
def analyzed():
    """``analyzed(source, globals=None)`` → (program, scope manager)."""
    def _analyzed(source, globals=None):
        program = parse(textwrap.dedent(source))
        return program, analyze(program, globals)
    return _analyzed

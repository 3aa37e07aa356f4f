# tests/test_no_undef.py
"""
Tests for the no-undef rule: Twist template bindings, auto-imported
decorators, and compatibility with ordinary undefined-variable checks.
"""

import pytest

from twistlint.checkers import CheckerRunner
from twistlint.errors import ConfigError

from conftest import REPEAT_FOR_SRC, USING_OUTSIDE_SRC, make_config


class TestTwistTemplates:
    """Names bound by <repeat>, <using> and ``as`` attributes."""

    def test_repeat_for_binds_item(self, messages):
        assert messages(REPEAT_FOR_SRC, "no-undef") == []

    def test_using_as_binds_value(self, messages):
        src = """
            var fruits = "apple";
            export default <ul>
                <using value={ fruits } as={ fruit }>
                    <li>{ fruit }</li>
                </using>
            </ul>;
        """
        assert messages(src, "no-undef") == []

    def test_repeat_collection_as_after_bare_return(self, messages):
        src = """
            var fruits = [ "apple", "orange", "watermelon" ];
            export default function() {
                return
                    <ul>
                        <repeat collection={ fruits } as={ item }>
                            <li>{ item }</li>
                        </repeat>
                    </ul>;
            };
        """
        assert messages(src, "no-undef") == []

    def test_repeat_for_pair(self, messages):
        src = """
            var fruits = [ "apple", "orange", "watermelon" ];
            export default function() {
            return <ol>
                    <repeat for={ (item, index) in fruits }>
                        <li selected={ item.selected } index={ index }>
                            { item.name }
                        </li>
                    </repeat>
                </ol>;
            };
        """
        assert messages(src, "no-undef") == []

    def test_repeat_collection_as(self, messages):
        src = """
            var fruits = [ "apple", "orange", "watermelon" ];
            export default <ul>
                <repeat collection={ fruits } as={ item }>
                    <li>{ item }</li>
                </repeat>
            </ul>;
        """
        assert messages(src, "no-undef") == []

    def test_repeat_collection_as_pair(self, messages):
        src = """
            var fruits = [ "apple", "orange", "watermelon" ];
            export default <ul>
                <repeat collection={ fruits } as={ item, index }>
                    <li>{ index }{ item }</li>
                </repeat>
            </ul>;
        """
        assert messages(src, "no-undef") == []

    def test_namespaced_component_parameters(self, messages):
        src = """
            export default <ul>
                <spectrum:dialog>
                    <dialog:footer as={ accept, cancel }>
                        <button on-click={ accept() }>OK</button>
                        <button on-click={ cancel() }>Cancel</button>
                    </dialog:footer>
                </spectrum:dialog>
            </ul>;
        """
        assert messages(src, "no-undef") == []

    def test_component_parameter(self, messages):
        src = """
            export default <ul>
                <MyComponent as={ data }>
                    <div>{ data }</div>
                </MyComponent>
            </ul>;
        """
        assert messages(src, "no-undef") == []

    def test_unbound_name_in_repeat_for(self, lint_rules):
        src = """
            var fruits = [ "apple", "orange", "watermelon" ];
            export default <ul>
                <repeat for={ item in fruits }>
                    <li>{ index }</li>
                </repeat>
            </ul>;
        """
        diags = lint_rules(src, "no-undef")
        assert [d.message for d in diags] == ["'index' is not defined."]
        assert diags[0].node_type == "Identifier"
        assert diags[0].error_id == "undefinedIdentifier"
        assert diags[0].location.line == 5

    def test_unbound_name_in_repeat_collection(self, messages):
        src = """
            var fruits = [ "apple", "orange", "watermelon" ];
            export default <ul>
                <repeat collection={ fruits } as={ item }>
                    <li>{ index }</li>
                </repeat>
            </ul>;
        """
        assert messages(src, "no-undef") == ["'index' is not defined."]

    def test_plain_elements_bind_nothing(self, messages):
        src = """
            export default <g>
                <div ref={ element }></div>
                <div>{ element.tagName }</div>
            </g>;
        """
        assert messages(src, "no-undef") == [
            "'element' is not defined.",
            "'element' is not defined.",
        ]

    def test_using_binding_does_not_leak(self, lint_rules):
        diags = lint_rules(USING_OUTSIDE_SRC, "no-undef")
        assert [d.message for d in diags] == ["'fruit' is not defined."]
        assert diags[0].location.line == 7

    def test_parameter_binding_does_not_leak(self, messages):
        src = """
            export default <ul>
                <spectrum:dialog>
                    <dialog:footer as={ accept, cancel }>
                        <button on-click={ accept() }>OK</button>
                        <button on-click={ cancel() }>Cancel</button>
                    </dialog:footer>
                    <button on-click={ accept() }>OK</button>
                </spectrum:dialog>
            </ul>;
        """
        assert messages(src, "no-undef") == ["'accept' is not defined."]

    def test_member_expression_as_value(self, lint_rules):
        src = """
            var fruits = "apple";
            export default <using value={ fruits } as={ this.fruit } ></using>;
        """
        diags = lint_rules(src, "no-undef")
        assert [d.message for d in diags] == [
            '"this.fruit" is not an identifier. '
            'The "as" attribute can only be used with an identifier.'
        ]
        assert diags[0].node_type == "JSXAttribute"
        assert diags[0].error_id == "invalidBindingValue"

    def test_call_as_value(self, messages):
        src = """
            var f = function() { return 'apple'; };
            export default <repeat collection={ f() } as={ f() } ></repeat>;
        """
        assert messages(src, "no-undef") == [
            '"f()" is not an identifier. '
            'The "as" attribute can only be used with an identifier.'
        ]

    def test_invalid_as_reported_once_with_many_references(self, messages):
        src = """
            export default <X as={ this.fruit }>
                <a>{ one }</a>
                <b>{ two }</b>
            </X>;
        """
        result = messages(src, "no-undef")
        assert result.count(
            '"this.fruit" is not an identifier. '
            'The "as" attribute can only be used with an identifier.') == 1
        assert "'one' is not defined." in result
        assert "'two' is not defined." in result

    def test_invalid_for_value(self, messages):
        src = """
            export default <repeat for={ items }><li /></repeat>;
        """
        assert messages(src, "no-undef") == [
            '"items" is not an identifier. '
            'The "for" attribute can only be used with an identifier.',
            "'items' is not defined.",
        ]

    def test_nearest_binding_wins(self, messages):
        src = """
            export default <A as={ x }>
                <B as={ y }>
                    <i>{ x }{ y }</i>
                </B>
            </A>;
        """
        assert messages(src, "no-undef") == []


class TestDecorators:
    """Registered decorators are available inside decorators only."""

    def test_registered_decorators_resolve(self, messages):
        src = """
            @Store
            export default class MyStore {
                @State.byVal x;
            }
        """
        assert messages(src, "no-undef") == []

    def test_unregistered_decorator(self, messages):
        src = """
            @Comp
            export default class C {}
        """
        assert messages(src, "no-undef") == ["'Comp' is not defined."]

    def test_decorator_name_outside_decorator(self, messages):
        assert messages("let x = new Store();", "no-undef") == ["'Store' is not defined."]

    def test_configured_decorator(self, messages):
        src = """
            @Model
            export default class C {}
        """
        assert messages(src, "no-undef", decorators={"Model": {}}) == []

    def test_non_global_decorator(self, messages):
        src = """
            @Model
            export default class C {}
        """
        result = messages(src, "no-undef", decorators={"Model": {"global": False}})
        assert result == ["'Model' is not defined."]

    def test_without_default_table(self, messages):
        src = """
            @Store
            export default class C {}
        """
        result = messages(src, "no-undef", default_decorators=False)
        assert result == ["'Store' is not defined."]


class TestTypeofOption:

    def test_typeof_ignored_by_default(self, messages):
        assert messages("if (typeof anUndefinedVar === 'string') {}", "no-undef") == []

    def test_typeof_checked_with_option(self, messages):
        result = messages(
            "if (typeof anUndefinedVar === 'string') {}",
            "no-undef",
            options={"no-undef": {"typeof": True}},
        )
        assert result == ["'anUndefinedVar' is not defined."]

    def test_typeof_option_must_be_bool(self):
        config = make_config("no-undef", options={"no-undef": {"typeof": "yes"}})
        with pytest.raises(ConfigError):
            CheckerRunner(config)

    def test_unknown_option(self):
        config = make_config("no-undef", options={"no-undef": {"strict": True}})
        with pytest.raises(ConfigError):
            CheckerRunner(config)


ESLINT_VALID = [
    "var a = 1, b = 2; a;",
    "/*global b*/ function f() { b; }",
    "/*global b a:false*/  a;  function f() { b; a; }",
    "function a(){}  a();",
    "function f(b) { b; }",
    "var a; a = 1; a++;",
    "var a; function f() { a = 1; }",
    "/*global b:true*/ b++;",
    "/*eslint-env browser*/ window;",
    "/*eslint-env node*/ require(\"a\");",
    "Object; isNaN();",
    "toString()",
    "hasOwnProperty()",
    "function evilEval(stuffToEval) { var ultimateAnswer; ultimateAnswer = 42; eval(stuffToEval); }",
    "typeof a",
    "typeof (a)",
    "var b = typeof a",
    "typeof a === 'undefined'",
    "if (typeof a === 'undefined') {}",
    "function foo() { var [a, b=4] = [1, 2]; return {a, b}; }",
    "var toString = 1;",
    "function myFunc(...foo) {  return foo;}",
    "var React, App, a=1; React.render(<App attr={a} />);",
    "var console; [1,2,3].forEach(obj => {\n  console.log(obj);\n});",
    "var Foo; class Bar extends Foo { constructor() { super();  }}",
    "import Warning from '../lib/warning'; var warn = new Warning('text');",
    "import * as Warning from '../lib/warning'; var warn = new Warning('text');",
    "var a; [a] = [0];",
    "var a; ({a} = {});",
    "var a; ({b: a} = {});",
    "var obj; [obj.a, obj.b] = [0, 1];",
    "/*global b:false*/ function f() { b = 1; }",
    "/*global b:false*/ function f() { b++; }",
    "/*global b*/ b = 1;",
    "/*global b:false*/ var b = 1;",
    "Array = 1;",
    "class A { constructor() { new.target; } }",
    "export function f() { return arguments.length; }",
]

ESLINT_BROWSER_VALID = [
    "URLSearchParams;",
    "Intl;",
    "IntersectionObserver;",
    "Credential;",
    "requestIdleCallback;",
    "customElements;",
    "PromiseRejectionEvent;",
]

ESLINT_INVALID = [
    ("a = 1;", ["'a' is not defined."]),
    ("var a = b;", ["'b' is not defined."]),
    ("function f() { b; }", ["'b' is not defined."]),
    ("window;", ["'window' is not defined."]),
    ("require(\"a\");", ["'require' is not defined."]),
    ("var React; React.render(<img attr={a} />);", ["'a' is not defined."]),
    ("var React, App; React.render(<App attr={a} />);", ["'a' is not defined."]),
    ("[a] = [0];", ["'a' is not defined."]),
    ("({a} = {});", ["'a' is not defined."]),
    ("({b: a} = {});", ["'a' is not defined."]),
    ("[obj.a, obj.b] = [0, 1];", ["'obj' is not defined.", "'obj' is not defined."]),
    ("const c = 0; const a = {...b, c};", ["'b' is not defined."]),
]


class TestCompatibility:
    """Ordinary undefined-variable behaviour is unchanged."""

    @pytest.mark.parametrize("src", ESLINT_VALID)
    def test_valid(self, messages, src):
        assert messages(src, "no-undef") == []

    @pytest.mark.parametrize("src", ESLINT_BROWSER_VALID)
    def test_valid_in_browser(self, messages, src):
        assert messages(src, "no-undef", env=["browser"]) == []

    @pytest.mark.parametrize("src, expected", ESLINT_INVALID)
    def test_invalid(self, messages, src, expected):
        assert messages(src, "no-undef") == expected

    def test_configured_globals(self, messages):
        assert messages("function f() { b; }", "no-undef", globals={"b": False}) == []
        assert messages("function f() { b = 1; }", "no-undef", globals={"b": False}) == []

    def test_rest_with_configured_globals(self, messages):
        src = "var {bacon, ...others} = stuff; foo(others)"
        assert messages(src, "no-undef", globals={"stuff": False, "foo": False}) == []

# tests/test_parser.py
"""
Tests for twistlint.parser: the PEG front end and the syntax tree it
builds.
"""

import sys

import pytest

from twistlint.errors import SourceParseError
from twistlint.nodes import (
    ArrowFunctionExpression,
    AssignmentExpression,
    CallExpression,
    ClassDeclaration,
    ExportDefaultDeclaration,
    ExpressionStatement,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXFragment,
    JSXOpeningElement,
    MethodDefinition,
    ObjectPattern,
    ReturnStatement,
    VariableDeclaration,
)
from twistlint import parser
from twistlint.parser import LineIndex, jsx_tag_name, parse


def _first(program, cls):
    return next(node for node in program.walk() if isinstance(node, cls))


def _all(program, cls):
    return [node for node in program.walk() if isinstance(node, cls)]


class TestLineIndex:

    def test_positions_are_one_based(self):
        index = LineIndex("ab\ncd\n")
        assert index.position(0) == (1, 1)
        assert index.position(1) == (1, 2)
        assert index.position(3) == (2, 1)
        assert index.position(4) == (2, 2)


class TestStatements:

    def test_program_body(self):
        program = parse("var a = 1; function f() {} class C {}")
        assert [n.type for n in program.body] == [
            "VariableDeclaration", "FunctionDeclaration", "ClassDeclaration",
        ]
        assert program.source_type == "module"

    def test_positions(self):
        program = parse("var a;\n  foo(a);")
        call = _first(program, CallExpression)
        assert (call.line, call.column) == (2, 3)
        assert call.callee.name == "foo"

    def test_parent_links(self):
        program = parse("var a = b;")
        ident = [n for n in _all(program, Identifier) if n.name == "b"][0]
        assert ident.parent.type == "VariableDeclarator"
        assert ident.parent.parent.type == "VariableDeclaration"
        assert program.parent is None

    def test_bare_return_before_newline(self):
        program = parse("function f() {\n  return\n    <ul></ul>;\n}")
        body = _first(program, FunctionDeclaration).body.body
        assert isinstance(body[0], ReturnStatement)
        assert body[0].argument is None
        assert isinstance(body[1], ExpressionStatement)
        assert isinstance(body[1].expression, JSXElement)

    def test_return_with_argument(self):
        program = parse("function f() { return a + 1; }")
        ret = _first(program, ReturnStatement)
        assert ret.argument.type == "BinaryExpression"

    def test_destructuring_assignment_becomes_pattern(self):
        program = parse("var a; ({a} = {});")
        assignment = _first(program, AssignmentExpression)
        assert isinstance(assignment.left, ObjectPattern)

    def test_arrow_function(self):
        program = parse("var f = (a, b) => a + b;")
        arrow = _first(program, ArrowFunctionExpression)
        assert [p.name for p in arrow.params] == ["a", "b"]
        assert arrow.expression is True

    def test_imports(self):
        program = parse("import React, {Component as C} from 'react';")
        decl = _first(program, ImportDeclaration)
        assert [s.type for s in decl.specifiers] == ["ImportDefaultSpecifier", "ImportSpecifier"]
        assert [s.local.name for s in decl.specifiers] == ["React", "C"]

    def test_let_and_const(self):
        program = parse("let a = 1; const b = 2;")
        assert [d.kind for d in _all(program, VariableDeclaration)] == ["let", "const"]

    def test_comments_are_skipped(self):
        program = parse("// one\n/* two */ var a; /* three */")
        assert len(program.body) == 1


class TestClasses:

    def test_decorators_attach_to_class(self):
        program = parse("@Store({ mutable: true })\n@Prototype\nclass S {}")
        cls = _first(program, ClassDeclaration)
        assert len(cls.decorators) == 2
        assert isinstance(cls.decorators[0].expression, CallExpression)
        assert cls.decorators[1].expression.name == "Prototype"

    def test_decorators_before_export(self):
        program = parse("@Store\nexport default class S {}")
        export = program.body[0]
        assert isinstance(export, ExportDefaultDeclaration)
        assert [d.expression.name for d in export.declaration.decorators] == ["Store"]

    def test_member_decorator(self):
        program = parse("class S { @State.byVal x; }")
        prop = _first(program, ClassDeclaration).body.body[0]
        assert prop.type == "ClassProperty"
        assert prop.decorators[0].expression.type == "MemberExpression"

    def test_constructor_kind(self):
        program = parse("class A extends B { constructor() { super(); } static constructor() {} m() {} }")
        kinds = [m.kind for m in _all(program, MethodDefinition)]
        assert kinds == ["constructor", "method", "method"]

    def test_accessors(self):
        program = parse("class A { get x() { return 1; } set x(v) {} }")
        assert [m.kind for m in _all(program, MethodDefinition)] == ["get", "set"]

    def test_super_class_expression(self):
        program = parse("class A extends (B || C) {}")
        assert _first(program, ClassDeclaration).super_class.type == "LogicalExpression"


class TestJSX:

    def test_element_structure(self):
        program = parse('<repeat for={ item in items }><li>{ item }</li></repeat>;')
        element = _first(program, JSXElement)
        assert jsx_tag_name(element.opening_element.name) == "repeat"
        attribute = element.opening_element.attributes[0]
        assert isinstance(attribute, JSXAttribute)
        assert isinstance(attribute.value, JSXExpressionContainer)
        assert attribute.value.expression.type == "BinaryExpression"
        assert attribute.value.expression.operator == "in"

    def test_as_pair_is_sequence(self):
        program = parse("<X as={ item, index }></X>;")
        attribute = _first(program, JSXAttribute)
        assert attribute.value.expression.type == "SequenceExpression"

    def test_tag_names(self):
        program = parse("<a:b><A.B.C /></a:b>;")
        names = [jsx_tag_name(o.name) for o in _all(program, JSXOpeningElement)]
        assert names == ["a:b", "A.B.C"]

    def test_self_closing(self):
        opening = _first(parse("<img src='x' />;"), JSXOpeningElement)
        assert opening.self_closing is True
        assert opening.attributes[0].value.value == "x"

    def test_fragment(self):
        program = parse("<><a /><b /></>;")
        fragment = _first(program, JSXFragment)
        assert [c.type for c in fragment.children] == ["JSXElement", "JSXElement"]

    def test_text_and_empty_container(self):
        program = parse("<p>Hello {/* nothing */}</p>;")
        children = _first(program, JSXElement).children
        assert children[0].type == "JSXText"
        assert children[1].expression.type == "JSXEmptyExpression"

    def test_attribute_without_value(self):
        attribute = _first(parse("<input disabled />;"), JSXAttribute)
        assert attribute.value is None

    def test_spread_attribute(self):
        opening = _first(parse("<A {...props} />;"), JSXOpeningElement)
        assert opening.attributes[0].type == "JSXSpreadAttribute"


class TestErrors:

    def test_mismatched_closing_tag(self):
        with pytest.raises(SourceParseError) as info:
            parse("<a></b>;", "bad.jsx")
        assert "<a>" in info.value.message
        assert "</b>" in info.value.message
        assert info.value.span.file == "bad.jsx"

    def test_unexpected_token(self):
        with pytest.raises(SourceParseError) as info:
            parse("var = ;", "bad.js")
        assert info.value.message.startswith("Parsing error")
        assert info.value.span.line == 1

    def test_error_position(self):
        with pytest.raises(SourceParseError) as info:
            parse("var a;\nvar b = );")
        assert info.value.span.line == 2

    def test_decorators_need_a_class(self):
        with pytest.raises(SourceParseError):
            parse("@Store\nexport const x = 1;")

    def test_bad_meta_property(self):
        with pytest.raises(SourceParseError):
            parse("function f() { new.foo; }")

    def test_too_deep_to_build(self, monkeypatch):
        def overflow(program):
            raise RecursionError("maximum recursion depth exceeded")

        limit = sys.getrecursionlimit()
        monkeypatch.setattr(parser, "link_parents", overflow)
        with pytest.raises(SourceParseError) as info:
            parse("<div />;", "deep.jsx")
        assert info.value.message == "Parsing error: input is nested too deeply"
        assert (info.value.span.file, info.value.span.line) == ("deep.jsx", 1)
        assert sys.getrecursionlimit() == limit

    def test_deeply_nested_jsx(self):
        depth = 100
        program = parse("<div>" * depth + "{ x }" + "</div>" * depth + ";")
        assert len(_all(program, JSXElement)) == depth

# twistlint/nodes.py
"""
Syntax tree for the JavaScript + JSX subset understood by twistlint.

Node classes are named after their ESTree counterparts so that rule code
and diagnostics read the same way they do in the ESLint ecosystem
(``node.type == "JSXElement"``).  Field names are the snake_case form of
the ESTree ones (``superClass`` -> ``super_class``).

Every node carries

    parent          non-owning back-reference, set by :func:`link_parents`
    start, end      character offsets into the source
    line, column    1-based position of ``start``

The tree is owned by whoever called the parser; analyses only navigate it.
"""

from __future__ import annotations

import dataclasses
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional


class Node:
    """Base class for all syntax tree nodes."""

    parent: Optional["Node"] = None
    start: int = 0
    end: int = 0
    line: int = 1
    column: int = 1

    @property
    def type(self) -> str:
        return self.__class__.__name__

    def child_nodes(self) -> Iterator["Node"]:
        """Yield direct child nodes in source order."""
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal of this node and its descendants."""
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.child_nodes())))

    def ancestors(self) -> Iterator["Node"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def text(self, source: str) -> str:
        return source[self.start:self.end]

    def __repr__(self) -> str:
        return f"<{self.type} {self.line}:{self.column}>"


def link_parents(root: Node) -> Node:
    """Set ``parent`` on every descendant of *root*."""
    root.parent = None
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        for child in node.child_nodes():
            child.parent = node
            stack.append(child)
    return root


@contextmanager
def recursion_headroom(needed: int = 20000) -> Iterator[None]:
    """Raise the interpreter recursion limit to at least *needed* for the block."""
    sys_limit = sys.getrecursionlimit()
    if needed > sys_limit:
        sys.setrecursionlimit(needed)
    try:
        yield
    finally:
        sys.setrecursionlimit(sys_limit)


# ── Program, modules ─────────────────────────────────────────────

@dataclass(eq=False, repr=False)
class Program(Node):
    body: List[Node] = field(default_factory=list)
    source_type: str = "module"


@dataclass(eq=False, repr=False)
class ImportDeclaration(Node):
    specifiers: List[Node] = field(default_factory=list)
    source: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ImportSpecifier(Node):
    imported: Optional[Node] = None
    local: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ImportDefaultSpecifier(Node):
    local: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ImportNamespaceSpecifier(Node):
    local: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ExportNamedDeclaration(Node):
    declaration: Optional[Node] = None
    specifiers: List[Node] = field(default_factory=list)
    source: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ExportSpecifier(Node):
    local: Optional[Node] = None
    exported: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ExportDefaultDeclaration(Node):
    declaration: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ExportAllDeclaration(Node):
    source: Optional[Node] = None


# ── Classes and decorators ───────────────────────────────────────

@dataclass(eq=False, repr=False)
class Decorator(Node):
    expression: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ClassDeclaration(Node):
    decorators: List[Node] = field(default_factory=list)
    id: Optional[Node] = None
    super_class: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ClassExpression(Node):
    decorators: List[Node] = field(default_factory=list)
    id: Optional[Node] = None
    super_class: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ClassBody(Node):
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class MethodDefinition(Node):
    decorators: List[Node] = field(default_factory=list)
    key: Optional[Node] = None
    value: Optional[Node] = None
    kind: str = "method"
    static: bool = False
    computed: bool = False


@dataclass(eq=False, repr=False)
class ClassProperty(Node):
    decorators: List[Node] = field(default_factory=list)
    key: Optional[Node] = None
    value: Optional[Node] = None
    static: bool = False
    computed: bool = False


# ── Functions and patterns ───────────────────────────────────────

@dataclass(eq=False, repr=False)
class FunctionDeclaration(Node):
    id: Optional[Node] = None
    params: List[Node] = field(default_factory=list)
    body: Optional[Node] = None
    is_async: bool = False
    generator: bool = False


@dataclass(eq=False, repr=False)
class FunctionExpression(Node):
    id: Optional[Node] = None
    params: List[Node] = field(default_factory=list)
    body: Optional[Node] = None
    is_async: bool = False
    generator: bool = False


@dataclass(eq=False, repr=False)
class ArrowFunctionExpression(Node):
    params: List[Node] = field(default_factory=list)
    body: Optional[Node] = None
    is_async: bool = False
    expression: bool = False


@dataclass(eq=False, repr=False)
class VariableDeclaration(Node):
    declarations: List[Node] = field(default_factory=list)
    kind: str = "var"


@dataclass(eq=False, repr=False)
class VariableDeclarator(Node):
    id: Optional[Node] = None
    init: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ArrayPattern(Node):
    elements: List[Optional[Node]] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class ObjectPattern(Node):
    properties: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class AssignmentPattern(Node):
    left: Optional[Node] = None
    right: Optional[Node] = None


@dataclass(eq=False, repr=False)
class RestElement(Node):
    argument: Optional[Node] = None


# ── Expressions ──────────────────────────────────────────────────

@dataclass(eq=False, repr=False)
class Identifier(Node):
    name: str = ""

    def __repr__(self) -> str:
        return f"<Identifier {self.name!r} {self.line}:{self.column}>"


@dataclass(eq=False, repr=False)
class Literal(Node):
    value: Any = None
    raw: str = ""


@dataclass(eq=False, repr=False)
class TemplateLiteral(Node):
    quasis: List[str] = field(default_factory=list)
    expressions: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class TaggedTemplateExpression(Node):
    tag: Optional[Node] = None
    quasi: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ThisExpression(Node):
    pass


@dataclass(eq=False, repr=False)
class Super(Node):
    pass


@dataclass(eq=False, repr=False)
class MetaProperty(Node):
    meta: str = ""
    property: str = ""


@dataclass(eq=False, repr=False)
class ArrayExpression(Node):
    elements: List[Optional[Node]] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class ObjectExpression(Node):
    properties: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class Property(Node):
    key: Optional[Node] = None
    value: Optional[Node] = None
    kind: str = "init"
    computed: bool = False
    shorthand: bool = False
    method: bool = False


@dataclass(eq=False, repr=False)
class SpreadElement(Node):
    argument: Optional[Node] = None


@dataclass(eq=False, repr=False)
class MemberExpression(Node):
    object: Optional[Node] = None
    property: Optional[Node] = None
    computed: bool = False
    optional: bool = False


@dataclass(eq=False, repr=False)
class CallExpression(Node):
    callee: Optional[Node] = None
    arguments: List[Node] = field(default_factory=list)
    optional: bool = False


@dataclass(eq=False, repr=False)
class NewExpression(Node):
    callee: Optional[Node] = None
    arguments: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class UnaryExpression(Node):
    operator: str = ""
    argument: Optional[Node] = None


@dataclass(eq=False, repr=False)
class UpdateExpression(Node):
    operator: str = ""
    argument: Optional[Node] = None
    prefix: bool = False


@dataclass(eq=False, repr=False)
class BinaryExpression(Node):
    left: Optional[Node] = None
    operator: str = ""
    right: Optional[Node] = None


@dataclass(eq=False, repr=False)
class LogicalExpression(Node):
    left: Optional[Node] = None
    operator: str = ""
    right: Optional[Node] = None


@dataclass(eq=False, repr=False)
class AssignmentExpression(Node):
    left: Optional[Node] = None
    operator: str = "="
    right: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ConditionalExpression(Node):
    test: Optional[Node] = None
    consequent: Optional[Node] = None
    alternate: Optional[Node] = None


@dataclass(eq=False, repr=False)
class SequenceExpression(Node):
    expressions: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class AwaitExpression(Node):
    argument: Optional[Node] = None


@dataclass(eq=False, repr=False)
class YieldExpression(Node):
    argument: Optional[Node] = None
    delegate: bool = False


# ── Statements ───────────────────────────────────────────────────

@dataclass(eq=False, repr=False)
class BlockStatement(Node):
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class ExpressionStatement(Node):
    expression: Optional[Node] = None


@dataclass(eq=False, repr=False)
class EmptyStatement(Node):
    pass


@dataclass(eq=False, repr=False)
class IfStatement(Node):
    test: Optional[Node] = None
    consequent: Optional[Node] = None
    alternate: Optional[Node] = None


@dataclass(eq=False, repr=False)
class WhileStatement(Node):
    test: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class DoWhileStatement(Node):
    body: Optional[Node] = None
    test: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ForStatement(Node):
    init: Optional[Node] = None
    test: Optional[Node] = None
    update: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ForInStatement(Node):
    left: Optional[Node] = None
    right: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ForOfStatement(Node):
    left: Optional[Node] = None
    right: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class SwitchStatement(Node):
    discriminant: Optional[Node] = None
    cases: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class SwitchCase(Node):
    test: Optional[Node] = None
    consequent: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class TryStatement(Node):
    block: Optional[Node] = None
    handler: Optional[Node] = None
    finalizer: Optional[Node] = None


@dataclass(eq=False, repr=False)
class CatchClause(Node):
    param: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ReturnStatement(Node):
    argument: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ThrowStatement(Node):
    argument: Optional[Node] = None


@dataclass(eq=False, repr=False)
class BreakStatement(Node):
    label: Optional[Node] = None


@dataclass(eq=False, repr=False)
class ContinueStatement(Node):
    label: Optional[Node] = None


@dataclass(eq=False, repr=False)
class LabeledStatement(Node):
    label: Optional[Node] = None
    body: Optional[Node] = None


# ── JSX ──────────────────────────────────────────────────────────

@dataclass(eq=False, repr=False)
class JSXElement(Node):
    opening_element: Optional[Node] = None
    children: List[Node] = field(default_factory=list)
    closing_element: Optional[Node] = None



@dataclass(eq=False, repr=False)
class JSXFragment(Node):
    children: List[Node] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class JSXOpeningElement(Node):
    name: Optional[Node] = None
    attributes: List[Node] = field(default_factory=list)
    self_closing: bool = False


@dataclass(eq=False, repr=False)
class JSXClosingElement(Node):
    name: Optional[Node] = None


@dataclass(eq=False, repr=False)
class JSXAttribute(Node):
    name: Optional[Node] = None
    value: Optional[Node] = None


@dataclass(eq=False, repr=False)
class JSXSpreadAttribute(Node):
    argument: Optional[Node] = None


@dataclass(eq=False, repr=False)
class JSXIdentifier(Node):
    name: str = ""


@dataclass(eq=False, repr=False)
class JSXNamespacedName(Node):
    namespace: Optional[Node] = None
    name: Optional[Node] = None


@dataclass(eq=False, repr=False)
class JSXMemberExpression(Node):
    object: Optional[Node] = None
    property: Optional[Node] = None


@dataclass(eq=False, repr=False)
class JSXExpressionContainer(Node):
    expression: Optional[Node] = None


@dataclass(eq=False, repr=False)
class JSXEmptyExpression(Node):
    pass


@dataclass(eq=False, repr=False)
class JSXText(Node):
    value: str = ""


@dataclass(eq=False, repr=False)
class JSXSpreadChild(Node):
    expression: Optional[Node] = None


FUNCTION_TYPES = (FunctionDeclaration, FunctionExpression, ArrowFunctionExpression)
CLASS_TYPES = (ClassDeclaration, ClassExpression)

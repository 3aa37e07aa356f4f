# twistlint/scope.py
"""
Lexical scope analysis for the JavaScript + JSX syntax tree.

Builds the scope chain of a :class:`~twistlint.nodes.Program`, records
every variable declaration and every identifier reference, and resolves
references against the chain once the whole tree has been walked (so
hoisted declarations are visible everywhere in their scope).

The outcome most rules care about is :attr:`ScopeManager.through`: the
references no enclosing scope declares and no configured global covers.
Those are the *free references* the template binding resolver examines.

Scope model
───────────
    global                      configured and environment globals
     └── module                 the file's top level
          ├── function          parameters, ``var``, hoisted functions
          │    └── block / for / switch / catch
          ├── function-expression-name
          └── class             the class name as seen from inside

JSX tag and attribute names are not identifier references; a tag name is
made "used" only through :meth:`ScopeManager.mark_used`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from twistlint.nodes import (
    CLASS_TYPES,
    FUNCTION_TYPES,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    BlockStatement,
    BreakStatement,
    CatchClause,
    ClassProperty,
    ContinueStatement,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    ImportDeclaration,
    LabeledStatement,
    MemberExpression,
    MetaProperty,
    MethodDefinition,
    Node,
    ObjectPattern,
    Program,
    Property,
    RestElement,
    SwitchStatement,
    UpdateExpression,
    VariableDeclaration,
)

logger = logging.getLogger(__name__)

_HOISTING_SCOPES = ("function", "module", "global")

# Variable kinds never reported as unused.
_SILENT_KINDS = frozenset({"param", "catch", "class-name", "function-name", "global", "implicit"})


@dataclass(frozen=True)
class FreeReference:
    """An identifier occurrence that ordinary lexical scoping leaves unresolved."""

    identifier: Node
    name: str


@dataclass(eq=False)
class Variable:
    name: str
    scope: "Scope"
    kind: str
    defs: List[Node] = field(default_factory=list)
    references: List["Reference"] = field(default_factory=list)
    used: bool = False
    exported: bool = False

    def __repr__(self) -> str:
        return f"Variable({self.name!r}, kind={self.kind!r})"


@dataclass(eq=False)
class Reference:
    identifier: Identifier
    scope: "Scope"
    is_read: bool = True
    is_write: bool = False
    init: bool = False
    resolved: Optional[Variable] = None

    @property
    def name(self) -> str:
        return self.identifier.name


@dataclass(eq=False)
class Scope:
    type: str
    block: Node
    upper: Optional["Scope"] = None
    children: List["Scope"] = field(default_factory=list)
    variables: Dict[str, Variable] = field(default_factory=dict)
    references: List[Reference] = field(default_factory=list)

    def declare(self, name: str, kind: str, node: Optional[Node] = None) -> Variable:
        variable = self.variables.get(name)
        if variable is None:
            variable = Variable(name, self, kind)
            self.variables[name] = variable
        if node is not None:
            variable.defs.append(node)
        return variable

    def lookup(self, name: str) -> Optional[Variable]:
        scope: Optional[Scope] = self
        while scope is not None:
            variable = scope.variables.get(name)
            if variable is not None:
                return variable
            scope = scope.upper
        return None

    def variable_scope(self) -> "Scope":
        scope = self
        while scope.type not in _HOISTING_SCOPES:
            scope = scope.upper
        return scope

    def __repr__(self) -> str:
        return f"<Scope {self.type} {self.block!r}>"


class ScopeManager:
    """The scopes of one program and the result of resolving references."""

    def __init__(self, program: Program, global_scope: Scope) -> None:
        self.program = program
        self.global_scope = global_scope
        self.scopes: List[Scope] = []
        self.through: List[FreeReference] = []
        self._by_block: Dict[int, Scope] = {}

    def _register(self, scope: Scope) -> None:
        self.scopes.append(scope)
        # the innermost scope wins for blocks that own two (named function expressions)
        self._by_block[id(scope.block)] = scope

    def acquire(self, node: Node) -> Scope:
        """Innermost scope containing *node*."""
        current: Optional[Node] = node
        while current is not None:
            scope = self._by_block.get(id(current))
            if scope is not None:
                return scope
            current = current.parent
        return self.global_scope

    def mark_used(self, name: str, node: Node) -> bool:
        """Flag the variable *name* visible at *node* as used.

        Returns whether such a variable exists.
        """
        variable = self.acquire(node).lookup(name)
        if variable is None:
            return False
        variable.used = True
        return True

    def iter_variables(self) -> Iterator[Variable]:
        for scope in self.scopes:
            yield from scope.variables.values()

    def unused_variables(self) -> List[Variable]:
        """Declared variables that nothing reads, in declaration order."""
        unused = [
            variable for variable in self.iter_variables()
            if variable.kind not in _SILENT_KINDS
            and not variable.used
            and not variable.exported
            and variable.defs
            and not any(_counts_as_read(ref, variable) for ref in variable.references)
        ]
        unused.sort(key=lambda v: (v.defs[0].line, v.defs[0].column))
        return unused


def _counts_as_read(ref: Reference, variable: Variable) -> bool:
    if not ref.is_read:
        return False
    if variable.kind in ("function", "class"):
        # recursion and self-references do not make a declaration used
        declaration = variable.defs[0].parent
        if declaration is not None and any(a is declaration for a in ref.identifier.ancestors()):
            return False
    return True


# ═══════════════════════════════════════════════════════════════════
#  Walker
# ═══════════════════════════════════════════════════════════════════

class _ScopeBuilder:
    """Single pre-order pass that creates scopes, declarations and references."""

    def __init__(self, manager: ScopeManager) -> None:
        self.manager = manager
        self.scope = manager.global_scope
        self.references: List[Reference] = []
        self.exported_names: List[tuple] = []

    # ── scope plumbing ───────────────────────────────────────────

    def _push(self, type_: str, block: Node) -> Scope:
        scope = Scope(type_, block, upper=self.scope)
        self.scope.children.append(scope)
        self.manager._register(scope)
        self.scope = scope
        return scope

    def _pop(self) -> None:
        self.scope = self.scope.upper

    def _reference(self, ident: Identifier, read: bool = True,
                   write: bool = False, init: bool = False) -> None:
        ref = Reference(ident, self.scope, is_read=read, is_write=write, init=init)
        self.scope.references.append(ref)
        self.references.append(ref)

    # ── dispatch ─────────────────────────────────────────────────

    def visit(self, node: Optional[Node]) -> None:
        if node is None:
            return
        method = getattr(self, "visit_" + node.type, None)
        if method is not None:
            method(node)
        else:
            self.visit_children(node)

    def visit_children(self, node: Node) -> None:
        for child in node.child_nodes():
            self.visit(child)

    def visit_all(self, nodes: Iterable[Optional[Node]]) -> None:
        for node in nodes:
            self.visit(node)

    # ── declarations ─────────────────────────────────────────────

    def _declare_pattern(self, pattern: Optional[Node], kind: str, scope: Scope,
                         write: bool = False) -> None:
        """Declare the names bound by *pattern* in *scope*.

        Default values and computed keys inside the pattern are read
        references in the current scope.
        """
        if pattern is None:
            return
        if isinstance(pattern, Identifier):
            scope.declare(pattern.name, kind, pattern)
            if write:
                self._reference(pattern, read=False, write=True, init=True)
        elif isinstance(pattern, ArrayPattern):
            for element in pattern.elements:
                self._declare_pattern(element, kind, scope, write)
        elif isinstance(pattern, ObjectPattern):
            for prop in pattern.properties:
                if isinstance(prop, Property):
                    if prop.computed:
                        self.visit(prop.key)
                    self._declare_pattern(prop.value, kind, scope, write)
                else:
                    self._declare_pattern(prop, kind, scope, write)
        elif isinstance(pattern, AssignmentPattern):
            self._declare_pattern(pattern.left, kind, scope, write)
            self.visit(pattern.right)
        elif isinstance(pattern, RestElement):
            self._declare_pattern(pattern.argument, kind, scope, write)

    def _assign_pattern(self, pattern: Optional[Node], compound: bool = False) -> None:
        """Record write references for an assignment target."""
        if pattern is None:
            return
        if isinstance(pattern, Identifier):
            self._reference(pattern, read=compound, write=True)
        elif isinstance(pattern, ArrayPattern):
            for element in pattern.elements:
                self._assign_pattern(element)
        elif isinstance(pattern, ObjectPattern):
            for prop in pattern.properties:
                if isinstance(prop, Property):
                    if prop.computed:
                        self.visit(prop.key)
                    self._assign_pattern(prop.value)
                else:
                    self._assign_pattern(prop)
        elif isinstance(pattern, AssignmentPattern):
            self._assign_pattern(pattern.left)
            self.visit(pattern.right)
        elif isinstance(pattern, RestElement):
            self._assign_pattern(pattern.argument)
        else:
            # member expressions and anything else are evaluated, not bound
            self.visit(pattern)

    # ── program and modules ──────────────────────────────────────

    def visit_Program(self, node: Program) -> None:
        self._push("module", node)
        self.visit_all(node.body)
        self._pop()

    def visit_ImportDeclaration(self, node: ImportDeclaration) -> None:
        module = self.scope.variable_scope()
        for spec in node.specifiers:
            module.declare(spec.local.name, "import", spec.local)

    def visit_ExportNamedDeclaration(self, node: ExportNamedDeclaration) -> None:
        if node.declaration is not None:
            self.visit(node.declaration)
            for ident in _declared_identifiers(node.declaration):
                self.exported_names.append((self.scope, ident.name))
            return
        if node.source is None:
            for spec in node.specifiers:
                self._reference(spec.local)
                self.exported_names.append((self.scope, spec.local.name))

    def visit_ExportDefaultDeclaration(self, node: ExportDefaultDeclaration) -> None:
        declaration = node.declaration
        self.visit(declaration)
        if isinstance(declaration, (FunctionDeclaration,) + CLASS_TYPES) and declaration.id is not None:
            self.exported_names.append((self.scope, declaration.id.name))

    def visit_ExportAllDeclaration(self, node: Node) -> None:
        pass

    # ── variables ────────────────────────────────────────────────

    def visit_VariableDeclaration(self, node: VariableDeclaration) -> None:
        target = self.scope.variable_scope() if node.kind == "var" else self.scope
        for declarator in node.declarations:
            has_init = declarator.init is not None
            self._declare_pattern(declarator.id, node.kind, target, write=has_init)
            self.visit(declarator.init)

    def visit_AssignmentExpression(self, node: AssignmentExpression) -> None:
        self._assign_pattern(node.left, compound=node.operator != "=")
        self.visit(node.right)

    def visit_UpdateExpression(self, node: UpdateExpression) -> None:
        if isinstance(node.argument, Identifier):
            self._reference(node.argument, read=True, write=True)
        else:
            self.visit(node.argument)

    def visit_Identifier(self, node: Identifier) -> None:
        self._reference(node)

    # ── functions and classes ────────────────────────────────────

    def visit_FunctionDeclaration(self, node: FunctionDeclaration) -> None:
        if node.id is not None:
            self.scope.declare(node.id.name, "function", node.id)
        self._function(node)

    def visit_FunctionExpression(self, node: FunctionExpression) -> None:
        if node.id is not None:
            self._push("function-expression-name", node)
            self.scope.declare(node.id.name, "function-name", node.id)
            self._function(node)
            self._pop()
        else:
            self._function(node)

    def visit_ArrowFunctionExpression(self, node: ArrowFunctionExpression) -> None:
        self._function(node)

    def _function(self, node: Node) -> None:
        scope = self._push("function", node)
        if not isinstance(node, ArrowFunctionExpression):
            scope.declare("arguments", "implicit")
        for param in node.params:
            self._declare_pattern(param, "param", scope)
        body = node.body
        if isinstance(body, BlockStatement):
            self.visit_all(body.body)
        else:
            self.visit(body)
        self._pop()

    def _class(self, node: Node, declare_outer: bool) -> None:
        self.visit_all(node.decorators)
        if node.id is not None and declare_outer:
            self.scope.declare(node.id.name, "class", node.id)
        self.visit(node.super_class)
        scope = self._push("class", node)
        if node.id is not None:
            scope.declare(node.id.name, "class-name", node.id)
        self.visit_all(node.body.body)
        self._pop()

    def visit_ClassDeclaration(self, node: Node) -> None:
        self._class(node, declare_outer=True)

    def visit_ClassExpression(self, node: Node) -> None:
        self._class(node, declare_outer=False)

    def visit_MethodDefinition(self, node: MethodDefinition) -> None:
        self.visit_all(node.decorators)
        if node.computed:
            self.visit(node.key)
        self.visit(node.value)

    def visit_ClassProperty(self, node: ClassProperty) -> None:
        self.visit_all(node.decorators)
        if node.computed:
            self.visit(node.key)
        self.visit(node.value)

    # ── statements that open scopes ──────────────────────────────

    def visit_BlockStatement(self, node: BlockStatement) -> None:
        self._push("block", node)
        self.visit_all(node.body)
        self._pop()

    def visit_ForStatement(self, node: ForStatement) -> None:
        scoped = isinstance(node.init, VariableDeclaration) and node.init.kind != "var"
        if scoped:
            self._push("for", node)
        self.visit(node.init)
        self.visit(node.test)
        self.visit(node.update)
        self.visit(node.body)
        if scoped:
            self._pop()

    def _for_in(self, node: Node) -> None:
        left = node.left
        scoped = isinstance(left, VariableDeclaration) and left.kind != "var"
        if scoped:
            self._push("for", node)
        self.visit(node.right)
        if isinstance(left, VariableDeclaration):
            target = self.scope.variable_scope() if left.kind == "var" else self.scope
            for declarator in left.declarations:
                self._declare_pattern(declarator.id, left.kind, target, write=True)
        else:
            self._assign_pattern(left)
        self.visit(node.body)
        if scoped:
            self._pop()

    def visit_ForInStatement(self, node: ForInStatement) -> None:
        self._for_in(node)

    def visit_ForOfStatement(self, node: ForOfStatement) -> None:
        self._for_in(node)

    def visit_SwitchStatement(self, node: SwitchStatement) -> None:
        self.visit(node.discriminant)
        self._push("switch", node)
        self.visit_all(node.cases)
        self._pop()

    def visit_CatchClause(self, node: CatchClause) -> None:
        scope = self._push("catch", node)
        self._declare_pattern(node.param, "catch", scope)
        self.visit(node.body)
        self._pop()

    # ── identifiers that are not references ──────────────────────

    def visit_MemberExpression(self, node: MemberExpression) -> None:
        self.visit(node.object)
        if node.computed:
            self.visit(node.property)

    def visit_Property(self, node: Property) -> None:
        if node.computed:
            self.visit(node.key)
        self.visit(node.value)

    def visit_LabeledStatement(self, node: LabeledStatement) -> None:
        self.visit(node.body)

    def visit_BreakStatement(self, node: BreakStatement) -> None:
        pass

    def visit_ContinueStatement(self, node: ContinueStatement) -> None:
        pass

    def visit_MetaProperty(self, node: MetaProperty) -> None:
        pass


def _declared_identifiers(declaration: Node) -> List[Identifier]:
    if isinstance(declaration, VariableDeclaration):
        found: List[Identifier] = []
        for declarator in declaration.declarations:
            found.extend(pattern_identifiers(declarator.id))
        return found
    if isinstance(declaration, FUNCTION_TYPES + CLASS_TYPES) and declaration.id is not None:
        return [declaration.id]
    return []


def pattern_identifiers(pattern: Optional[Node]) -> List[Identifier]:
    """Identifiers bound by a binding pattern, in source order."""
    if pattern is None:
        return []
    if isinstance(pattern, Identifier):
        return [pattern]
    if isinstance(pattern, ArrayPattern):
        return [i for element in pattern.elements for i in pattern_identifiers(element)]
    if isinstance(pattern, ObjectPattern):
        return [i for prop in pattern.properties
                for i in pattern_identifiers(prop.value if isinstance(prop, Property) else prop)]
    if isinstance(pattern, AssignmentPattern):
        return pattern_identifiers(pattern.left)
    if isinstance(pattern, RestElement):
        return pattern_identifiers(pattern.argument)
    return []


def analyze(program: Program, globals: Optional[Mapping[str, bool]] = None) -> ScopeManager:
    """Build the scopes of *program* and resolve its references.

    *globals* maps the names of predefined globals to whether they are
    writable.  References to them resolve to variables of the global
    scope and do not appear in :attr:`ScopeManager.through`.
    """
    global_scope = Scope("global", program)
    manager = ScopeManager(program, global_scope)
    manager.scopes.append(global_scope)
    builder = _ScopeBuilder(manager)
    builder.visit(program)

    known = globals or {}
    for ref in builder.references:
        variable = ref.scope.lookup(ref.name)
        if variable is None and ref.name in known:
            variable = global_scope.declare(ref.name, "global")
        if variable is None:
            manager.through.append(FreeReference(ref.identifier, ref.name))
            continue
        ref.resolved = variable
        variable.references.append(ref)

    for scope, name in builder.exported_names:
        variable = scope.lookup(name)
        if variable is not None:
            variable.exported = True

    logger.debug(
        "scope analysis: %d scopes, %d references, %d free",
        len(manager.scopes), len(builder.references), len(manager.through),
    )
    return manager


__all__ = [
    "FreeReference",
    "Variable",
    "Reference",
    "Scope",
    "ScopeManager",
    "analyze",
    "pattern_identifiers",
]

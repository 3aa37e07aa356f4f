"""
twistlint/parser.py
═══════════════════

Front end: turns JavaScript + JSX + decorator source text into the
ESTree-shaped tree of :mod:`twistlint.nodes`.

The grammar is a Parsimonious PEG covering the module-level subset that
Twist components are written in: imports/exports, decorated classes,
ES2017 functions and expressions, destructuring and JSX (including
namespaced tags such as ``<dialog:footer>``).  A :class:`NodeVisitor`
folds the parse tree into syntax nodes, and :func:`parse` links parent
pointers before handing the tree to the analyses.

Conventions inside the grammar:

  * every token rule swallows the whitespace/comments that follow it
    (``_``), so spans are trimmed back with :func:`_content_end`;
  * binary operators are parsed flat and folded by precedence in the
    visitor, which keeps the parse tree (and the recursion depth) shallow;
  * ``return`` / ``break`` / ``continue`` / ``yield`` do not look past a
    line break, which is the only automatic-semicolon rule that changes
    the meaning of real code.
"""

from __future__ import annotations

import bisect
import logging
import re
from typing import Any, List, Optional, Tuple

from parsimonious.exceptions import IncompleteParseError, ParseError, VisitationError
from parsimonious.expressions import Literal as PLiteral
from parsimonious.expressions import OneOf, Regex
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node as PNode
from parsimonious.nodes import NodeVisitor

from twistlint.errors import SourceParseError, SourceSpan
from twistlint.nodes import (
    CLASS_TYPES,
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    AwaitExpression,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    CallExpression,
    CatchClause,
    ClassBody,
    ClassDeclaration,
    ClassExpression,
    ClassProperty,
    ConditionalExpression,
    ContinueStatement,
    Decorator,
    DoWhileStatement,
    EmptyStatement,
    ExportAllDeclaration,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ExportSpecifier,
    ExpressionStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    JSXAttribute,
    JSXClosingElement,
    JSXElement,
    JSXEmptyExpression,
    JSXExpressionContainer,
    JSXFragment,
    JSXIdentifier,
    JSXMemberExpression,
    JSXNamespacedName,
    JSXOpeningElement,
    JSXSpreadAttribute,
    JSXSpreadChild,
    JSXText,
    LabeledStatement,
    Literal,
    LogicalExpression,
    MemberExpression,
    MetaProperty,
    MethodDefinition,
    NewExpression,
    Node,
    ObjectExpression,
    ObjectPattern,
    Program,
    Property,
    RestElement,
    ReturnStatement,
    SequenceExpression,
    SpreadElement,
    Super,
    SwitchCase,
    SwitchStatement,
    TaggedTemplateExpression,
    TemplateLiteral,
    ThisExpression,
    ThrowStatement,
    TryStatement,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
    YieldExpression,
    link_parents,
    recursion_headroom,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

JSX_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Program and statements
    # ─────────────────────────────────────────────────────────────

    program             = _ statement*

    statement           = block / empty_stmt / var_stmt / function_decl
                        / class_decl / import_decl / export_decl / if_stmt
                        / for_in_stmt / for_stmt / while_stmt / do_while_stmt
                        / switch_stmt / try_stmt / return_stmt / throw_stmt
                        / break_stmt / continue_stmt / labeled_stmt / expr_stmt

    block               = "{" _ statement* "}" _
    empty_stmt          = ";" _
    expr_stmt           = expression semi
    semi                = (";" _)?

    var_stmt            = var_decl semi
    var_decl            = var_kind var_declarator ("," _ var_declarator)*
    var_kind            = ~r"(?:var|let|const)(?![A-Za-z0-9_$])" _
    var_declarator      = binding_target initializer?
    initializer         = assign_eq assignment
    assign_eq           = ~r"=(?![=>])" _

    if_stmt             = kw_if "(" _ expression ")" _ statement else_clause?
    else_clause         = kw_else statement
    while_stmt          = kw_while "(" _ expression ")" _ statement
    do_while_stmt       = kw_do statement kw_while "(" _ expression ")" _ semi
    for_in_stmt         = kw_for "(" _ for_in_left for_in_op expression ")" _ statement
    for_in_left         = for_in_decl / call_expression
    for_in_decl         = var_kind binding_target
    for_in_op           = kw_in / kw_of
    for_stmt            = kw_for "(" _ for_init? ";" _ expression? ";" _ expression? ")" _ statement
    for_init            = var_decl / expression

    switch_stmt         = kw_switch "(" _ expression ")" _ "{" _ switch_case* "}" _
    switch_case         = case_label statement*
    case_label          = case_test / default_label
    case_test           = kw_case expression ":" _
    default_label       = kw_default ":" _

    try_stmt            = kw_try block catch_clause? finally_clause?
    catch_clause        = kw_catch catch_param? block
    catch_param         = "(" _ binding_target ")" _
    finally_clause      = kw_finally block

    return_stmt         = kw_return return_argument? _ semi
    return_argument     = !~r"[\r\n;}]" expression
    throw_stmt          = kw_throw expression semi
    break_stmt          = kw_break identifier? _ semi
    continue_stmt       = kw_continue identifier? _ semi
    labeled_stmt        = identifier ":" _ statement

    # ─────────────────────────────────────────────────────────────
    # Modules
    # ─────────────────────────────────────────────────────────────

    import_decl         = kw_import import_body semi
    import_body         = import_from / string_literal
    import_from         = import_clause kw_from string_literal
    import_clause       = import_namespace / import_named / import_default_plus
    import_default_plus = identifier ("," _ (import_namespace / import_named))?
    import_namespace    = "*" _ kw_as identifier
    import_named        = "{" _ import_specifier_list? "}" _
    import_specifier_list = import_specifier ("," _ import_specifier)* ("," _)?
    import_specifier    = identifier_name import_alias?
    import_alias        = kw_as identifier

    export_decl         = decorator* kw_export export_body
    export_body         = export_default / export_all / export_named_list / export_declaration
    export_default      = kw_default export_default_value
    export_default_value = default_class / default_function / default_expression
    default_class       = decorator* kw_class identifier? class_heritage? class_body
    default_function    = async_prefix? kw_function generator_star? identifier? params function_body
    default_expression  = assignment semi
    export_all          = "*" _ kw_from string_literal semi
    export_named_list   = "{" _ export_specifier_list? "}" _ export_from? semi
    export_from         = kw_from string_literal
    export_specifier_list = export_specifier ("," _ export_specifier)* ("," _)?
    export_specifier    = identifier_name export_alias?
    export_alias        = kw_as identifier_name
    export_declaration  = var_stmt / function_decl / class_decl

    # ─────────────────────────────────────────────────────────────
    # Classes and decorators
    # ─────────────────────────────────────────────────────────────

    decorator           = "@" identifier dot_member* arguments?
    class_decl          = decorator* kw_class identifier class_heritage? class_body
    class_expr          = decorator* kw_class identifier? class_heritage? class_body
    class_heritage      = kw_extends call_expression
    class_body          = "{" _ class_member* "}" _
    class_member        = method_def / class_property / empty_member
    empty_member        = ";" _
    method_def          = decorator* static_prefix? accessor_prefix? generator_star? property_key params function_body
    class_property      = decorator* static_prefix? property_key initializer? semi
    static_prefix       = ~r"static(?=\s+[A-Za-z_$\[\"'*@])" _
    accessor_prefix     = ~r"(?:get|set|async)(?=\s+[A-Za-z_$\[\"'*])" _
    property_key        = computed_key / identifier_name / string_literal / number_literal
    computed_key        = "[" _ assignment "]" _

    # ─────────────────────────────────────────────────────────────
    # Functions and binding patterns
    # ─────────────────────────────────────────────────────────────

    function_decl       = async_prefix? kw_function generator_star? identifier params function_body
    function_expr       = async_prefix? kw_function generator_star? identifier? params function_body
    async_prefix        = ~r"async(?=\s+function(?![A-Za-z0-9_$]))" _
    generator_star      = "*" _
    params              = "(" _ param_list? ")" _
    param_list          = param ("," _ param)* ("," _)?
    param               = rest_param / binding_element
    rest_param          = "..." _ binding_target
    binding_element     = binding_target initializer?
    binding_target      = identifier / array_pattern / object_pattern
    function_body       = "{" _ statement* "}" _

    array_pattern       = "[" _ pattern_slot ("," _ pattern_slot)* "]" _
    pattern_slot        = (rest_param / binding_element)?
    object_pattern      = "{" _ object_pattern_list? "}" _
    object_pattern_list = object_pattern_prop ("," _ object_pattern_prop)* ("," _)?
    object_pattern_prop = rest_param / keyed_pattern_prop / shorthand_pattern_prop
    keyed_pattern_prop  = property_key ":" _ binding_element
    shorthand_pattern_prop = identifier initializer?

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    expression          = assignment ("," _ assignment)*
    assignment          = arrow_function / yield_expr / assign_expr / conditional
    assign_expr         = call_expression assign_op assignment
    assign_op           = ~r"(?:>>>|<<|>>|\*\*|\|\||&&|\?\?|[-+*/%&|^])?=(?![=>])" _
    conditional         = binary_expr ternary_tail?
    ternary_tail        = ~r"\?(?![?.])" _ assignment ":" _ assignment

    arrow_function      = async_arrow? arrow_params "=>" _ arrow_body
    async_arrow         = ~r"async(?![A-Za-z0-9_$])" _
    arrow_params        = params / identifier
    arrow_body          = function_body / assignment

    yield_expr          = kw_yield generator_star? yield_argument? _
    yield_argument      = !~r"[\r\n;})\],:]" assignment

    binary_expr         = unary (binary_op unary)*
    binary_op           = (~r"(?:\?\?|\|\||&&|===|!==|==|!=|<=|>=|>>>|<<|>>|\*\*|[|^&%*+\-<>]|/(?![/*]))(?!=)" _)
                        / (~r"(?:instanceof|in)(?![A-Za-z0-9_$])" _)

    unary               = prefix_unary / prefix_update / postfix_expr
    prefix_unary        = unary_op unary
    unary_op            = (~r"(?:typeof|void|delete|await)(?![A-Za-z0-9_$])" _)
                        / (~r"[!~]|\+(?!\+)|-(?!-)" _)
    prefix_update       = update_op unary
    postfix_expr        = call_expression update_op?
    update_op           = ~r"\+\+|--" _

    call_expression     = callee_head call_tail*
    callee_head         = super_expr / new_expression / primary
    call_tail           = arguments / dot_member / computed_member / template_literal
    dot_member          = "." _ identifier_name
    computed_member     = "[" _ expression "]" _
    member_tail         = dot_member / computed_member
    arguments           = "(" _ argument_list? ")" _
    argument_list       = argument ("," _ argument)* ("," _)?
    argument            = spread_element / assignment
    spread_element      = "..." _ assignment

    super_expr          = ~r"super(?![A-Za-z0-9_$])" _
    new_expression      = new_target / new_call
    new_target          = kw_new "." _ identifier_name
    new_call            = kw_new new_callee arguments?
    new_callee          = (new_expression / primary) member_tail*

    primary             = this_expr / literal / template_literal / regex_literal
                        / jsx_expr / function_expr / class_expr / array_literal
                        / object_literal / paren_expr / identifier

    this_expr           = ~r"this(?![A-Za-z0-9_$])" _
    paren_expr          = "(" _ expression ")" _
    array_literal       = "[" _ array_slot ("," _ array_slot)* "]" _
    array_slot          = (spread_element / assignment)?
    object_literal      = "{" _ object_member_list? "}" _
    object_member_list  = object_member ("," _ object_member)* ("," _)?
    object_member       = spread_element / object_method / keyed_property / shorthand_property
    object_method       = accessor_prefix? generator_star? property_key params function_body
    keyed_property      = property_key ":" _ assignment
    shorthand_property  = identifier initializer?

    literal             = null_lit / bool_lit / number_literal / string_literal
    null_lit            = ~r"null(?![A-Za-z0-9_$])" _
    bool_lit            = ~r"(?:true|false)(?![A-Za-z0-9_$])" _
    number_literal      = ~r"(?:0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)(?![A-Za-z0-9_$])" _
    string_literal      = ~r"\"(?:[^\"\\\n]|\\[\s\S])*\"|'(?:[^'\\\n]|\\[\s\S])*'" _
    regex_literal       = ~r"/(?![*/])(?:\\.|\[(?:\\.|[^\]\\\n])*\]|[^/\\\n\[])+/[A-Za-z]*" _
    template_literal    = "`" template_part* "`" _
    template_part       = template_chars / template_subst
    template_chars      = ~r"(?:[^`\\$]|\\[\s\S]|\$(?!\{))+"
    template_subst      = "${" _ expression "}"

    # ─────────────────────────────────────────────────────────────
    # JSX
    # ─────────────────────────────────────────────────────────────

    jsx_expr            = (jsx_fragment / jsx_element) _
    jsx_element         = jsx_self_closing / jsx_full_element
    jsx_self_closing    = "<" _ jsx_element_name jsx_attribute* "/>"
    jsx_full_element    = jsx_opening jsx_child* jsx_closing
    jsx_opening         = "<" _ jsx_element_name jsx_attribute* ">"
    jsx_closing         = "</" _ jsx_element_name ">"
    jsx_fragment        = "<" _ ">" jsx_child* "</" _ ">"

    jsx_element_name    = jsx_namespaced_name / jsx_member_name / jsx_simple_name
    jsx_namespaced_name = jsx_name_raw ":" jsx_name_raw _
    jsx_member_name     = jsx_name_raw jsx_name_member+ _
    jsx_name_member     = "." jsx_name_raw
    jsx_simple_name     = jsx_name_raw _
    jsx_name_raw        = ~r"[A-Za-z_$][A-Za-z0-9_$\-]*"

    jsx_attribute       = jsx_spread_attribute / jsx_named_attribute
    jsx_spread_attribute = "{" _ "..." _ assignment "}" _
    jsx_named_attribute = jsx_attribute_name jsx_attribute_value?
    jsx_attribute_name  = jsx_namespaced_name / jsx_simple_name
    jsx_attribute_value = "=" _ jsx_value
    jsx_value           = jsx_string / jsx_attr_container / jsx_expr
    jsx_string          = ~r"\"[^\"]*\"|'[^']*'" _
    jsx_attr_container  = "{" _ expression "}" _

    jsx_child           = jsx_text / jsx_child_container / jsx_element / jsx_fragment
    jsx_text            = ~r"[^<>{}]+"
    jsx_child_container = "{" _ jsx_child_body? "}"
    jsx_child_body      = jsx_spread_child / expression
    jsx_spread_child    = "..." _ expression

    # ─────────────────────────────────────────────────────────────
    # Tokens
    # ─────────────────────────────────────────────────────────────

    identifier          = ~r"(?!(?:break|case|catch|class|const|continue|debugger|default|delete|do|else|export|extends|false|finally|for|function|if|import|in|instanceof|new|null|return|super|switch|this|throw|true|try|typeof|var|void|while|with|yield)(?![A-Za-z0-9_$]))[A-Za-z_$][A-Za-z0-9_$]*" _
    identifier_name     = ~r"[A-Za-z_$][A-Za-z0-9_$]*" _

    kw_as               = ~r"as(?![A-Za-z0-9_$])" _
    kw_case             = ~r"case(?![A-Za-z0-9_$])" _
    kw_catch            = ~r"catch(?![A-Za-z0-9_$])" _
    kw_class            = ~r"class(?![A-Za-z0-9_$])" _
    kw_default          = ~r"default(?![A-Za-z0-9_$])" _
    kw_do               = ~r"do(?![A-Za-z0-9_$])" _
    kw_else             = ~r"else(?![A-Za-z0-9_$])" _
    kw_export           = ~r"export(?![A-Za-z0-9_$])" _
    kw_extends          = ~r"extends(?![A-Za-z0-9_$])" _
    kw_finally          = ~r"finally(?![A-Za-z0-9_$])" _
    kw_for              = ~r"for(?![A-Za-z0-9_$])" _
    kw_from             = ~r"from(?![A-Za-z0-9_$])" _
    kw_function         = ~r"function(?![A-Za-z0-9_$])" _
    kw_if               = ~r"if(?![A-Za-z0-9_$])" _
    kw_import           = ~r"import(?![A-Za-z0-9_$])" _
    kw_in               = ~r"in(?![A-Za-z0-9_$])" _
    kw_new              = ~r"new(?![A-Za-z0-9_$])" _
    kw_of               = ~r"of(?![A-Za-z0-9_$])" _
    kw_switch           = ~r"switch(?![A-Za-z0-9_$])" _
    kw_throw            = ~r"throw(?![A-Za-z0-9_$])" _
    kw_try              = ~r"try(?![A-Za-z0-9_$])" _
    kw_while            = ~r"while(?![A-Za-z0-9_$])" _
    kw_return           = ~r"return(?![A-Za-z0-9_$])[ \t]*"
    kw_break            = ~r"break(?![A-Za-z0-9_$])[ \t]*"
    kw_continue         = ~r"continue(?![A-Za-z0-9_$])[ \t]*"
    kw_yield            = ~r"yield(?![A-Za-z0-9_$])[ \t]*"

    _                   = ~r"(?:\s|//[^\n]*|/\*[\s\S]*?\*/)*"
''')


# Binary operator precedence, higher binds tighter.
_PRECEDENCE = {
    "??": 1, "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6, "!=": 6, "===": 6, "!==": 6,
    "<": 7, ">": 7, "<=": 7, ">=": 7, "instanceof": 7, "in": 7,
    "<<": 8, ">>": 8, ">>>": 8,
    "+": 9, "-": 9,
    "*": 10, "/": 10, "%": 10,
    "**": 11,
}

_LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — HELPERS
# ═══════════════════════════════════════════════════════════════════

class LineIndex:
    """Maps character offsets to 1-based (line, column) pairs."""

    def __init__(self, source: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer(r"\n", source)]

    def position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._starts, offset)
        return line, offset - self._starts[line - 1] + 1


def _content_end(pnode: PNode) -> int:
    """End offset of *pnode* without the trailing ``_`` it swallowed."""
    node = pnode
    while node.children:
        matched = [c for c in node.children if c.end > c.start]
        if not matched:
            break
        last = matched[-1]
        if last.expr_name == "_":
            return last.start
        node = last
    return node.end


def _opt(value: Any) -> Any:
    """Result of an ``x?`` expression: the child's value or None."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _comma_list(visited_children: list) -> list:
    first, rest, _ = visited_children
    return [first] + [item[2] for item in rest]


def _unescape(body: str) -> str:
    def replace(match: "re.Match[str]") -> str:
        esc = match.group(1)
        if esc.startswith("u{"):
            return chr(int(esc[2:-1], 16))
        if esc[0] in "ux" and len(esc) > 1:
            return chr(int(esc[1:], 16))
        if esc in ("\n", "\r\n", "\r"):
            return ""
        return _ESCAPES.get(esc, esc)
    return _ESCAPE_RE.sub(replace, body)


def _number_value(raw: str) -> Any:
    if raw[:2].lower() in ("0x", "0b", "0o"):
        return int(raw, 0)
    value = float(raw)
    if value.is_integer() and not any(c in raw for c in ".eE"):
        return int(raw)
    return value


def _key_name(key: Optional[Node]) -> Optional[str]:
    if isinstance(key, Identifier):
        return key.name
    if isinstance(key, Literal) and isinstance(key.value, str):
        return key.value
    return None


def jsx_tag_name(name: Optional[Node]) -> str:
    """Render a JSX element name back to source form (``a:b``, ``A.B``)."""
    if isinstance(name, JSXIdentifier):
        return name.name
    if isinstance(name, JSXNamespacedName):
        return f"{jsx_tag_name(name.namespace)}:{jsx_tag_name(name.name)}"
    if isinstance(name, JSXMemberExpression):
        return f"{jsx_tag_name(name.object)}.{jsx_tag_name(name.property)}"
    return ""


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — TREE BUILDER (parse tree → syntax tree)
# ═══════════════════════════════════════════════════════════════════

class _ASTBuilder(NodeVisitor):
    """Folds a Parsimonious parse tree into :mod:`twistlint.nodes`."""

    unwrapped_exceptions = (SourceParseError,)

    def __init__(self, filename: str, index: LineIndex) -> None:
        self.filename = filename
        self._index = index

    # ── span helpers ─────────────────────────────────────────────

    def _span(self, obj: Node, start: int, end: int) -> Node:
        obj.start, obj.end = start, end
        obj.line, obj.column = self._index.position(start)
        return obj

    def _place(self, obj: Node, pnode: PNode) -> Node:
        return self._span(obj, pnode.start, _content_end(pnode))

    def _source_span(self, pnode: PNode) -> SourceSpan:
        line, column = self._index.position(pnode.start)
        return SourceSpan(self.filename, line, column)

    def _clone_identifier(self, ident: Identifier) -> Identifier:
        return self._span(Identifier(name=ident.name), ident.start, ident.end)

    def _apply_tail(self, callee: Node, tail: tuple) -> Node:
        kind = tail[0]
        if kind == "member":
            _, prop, computed, pnode = tail
            result: Node = MemberExpression(object=callee, property=prop, computed=computed)
        elif kind == "call":
            _, args, pnode = tail
            result = CallExpression(callee=callee, arguments=args)
        else:
            _, quasi, pnode = tail
            result = TaggedTemplateExpression(tag=callee, quasi=quasi)
        return self._span(result, callee.start, _content_end(pnode))

    def _to_pattern(self, node: Node) -> Node:
        """Reinterpret an assignment target literal as a binding pattern."""
        if isinstance(node, ArrayExpression):
            pattern: Node = ArrayPattern(
                elements=[self._to_pattern(e) if e is not None else None for e in node.elements])
        elif isinstance(node, ObjectExpression):
            for prop in node.properties:
                if isinstance(prop, Property):
                    prop.value = self._to_pattern(prop.value)
            pattern = ObjectPattern(properties=[
                self._to_pattern(p) if isinstance(p, SpreadElement) else p
                for p in node.properties])
        elif isinstance(node, SpreadElement):
            pattern = RestElement(argument=self._to_pattern(node.argument))
        elif isinstance(node, AssignmentExpression) and node.operator == "=":
            pattern = AssignmentPattern(left=node.left, right=node.right)
        else:
            return node
        return self._span(pattern, node.start, node.end)

    def _fold_binary(self, operands: List[Node], operators: List[str]) -> Node:
        output: List[Node] = [operands[0]]
        pending: List[str] = []
        for op, operand in zip(operators, operands[1:]):
            prec = _PRECEDENCE[op]
            while pending:
                top = _PRECEDENCE[pending[-1]]
                # ``**`` is the only right-associative operator
                if top > prec or (top == prec and op != "**"):
                    self._reduce(output, pending)
                else:
                    break
            pending.append(op)
            output.append(operand)
        while pending:
            self._reduce(output, pending)
        return output[0]

    def _reduce(self, output: List[Node], pending: List[str]) -> None:
        op = pending.pop()
        right = output.pop()
        left = output.pop()
        cls = LogicalExpression if op in _LOGICAL_OPERATORS else BinaryExpression
        output.append(self._span(cls(left=left, operator=op, right=right), left.start, right.end))

    def generic_visit(self, node, visited_children):
        if isinstance(node.expr, OneOf):
            return visited_children[0]
        if isinstance(node.expr, (PLiteral, Regex)):
            return node
        return visited_children

    # ─────────────────────────────────────────────────────────────
    # Program and statements
    # ─────────────────────────────────────────────────────────────

    def visit_program(self, node, visited_children):
        _, body = visited_children
        program = Program(body=list(body))
        return self._span(program, 0, node.end)

    def visit_block(self, node, visited_children):
        _, _, body, _, _ = visited_children
        return self._place(BlockStatement(body=list(body)), node)

    visit_function_body = visit_block

    def visit_empty_stmt(self, node, visited_children):
        return self._place(EmptyStatement(), node)

    def visit_expr_stmt(self, node, visited_children):
        expression, _ = visited_children
        return self._place(ExpressionStatement(expression=expression), node)

    def visit_var_stmt(self, node, visited_children):
        declaration, _ = visited_children
        return self._place(declaration, node)

    def visit_var_decl(self, node, visited_children):
        kind, first, rest = visited_children
        declarations = [first] + [item[2] for item in rest]
        return self._place(VariableDeclaration(declarations=declarations, kind=kind), node)

    def visit_var_kind(self, node, visited_children):
        return node.text.strip()

    def visit_var_declarator(self, node, visited_children):
        target, init = visited_children
        return self._place(VariableDeclarator(id=target, init=_opt(init)), node)

    def visit_initializer(self, node, visited_children):
        _, value = visited_children
        return value

    def visit_if_stmt(self, node, visited_children):
        _, _, _, test, _, _, consequent, alternate = visited_children
        return self._place(IfStatement(test=test, consequent=consequent, alternate=_opt(alternate)), node)

    def visit_else_clause(self, node, visited_children):
        _, statement = visited_children
        return statement

    def visit_while_stmt(self, node, visited_children):
        _, _, _, test, _, _, body = visited_children
        return self._place(WhileStatement(test=test, body=body), node)

    def visit_do_while_stmt(self, node, visited_children):
        _, body, _, _, _, test, _, _, _ = visited_children
        return self._place(DoWhileStatement(body=body, test=test), node)

    def visit_for_in_stmt(self, node, visited_children):
        _, _, _, left, op, right, _, _, body = visited_children
        cls = ForOfStatement if op == "of" else ForInStatement
        return self._place(cls(left=left, right=right, body=body), node)

    def visit_for_in_decl(self, node, visited_children):
        kind, target = visited_children
        declarator = self._span(VariableDeclarator(id=target), target.start, target.end)
        return self._place(VariableDeclaration(declarations=[declarator], kind=kind), node)

    def visit_for_in_op(self, node, visited_children):
        return node.text.strip()

    def visit_for_stmt(self, node, visited_children):
        (_, _, _, init, _, _, test, _, _, update, _, _, body) = visited_children
        return self._place(ForStatement(
            init=_opt(init), test=_opt(test), update=_opt(update), body=body), node)

    def visit_switch_stmt(self, node, visited_children):
        _, _, _, discriminant, _, _, _, _, cases, _, _ = visited_children
        return self._place(SwitchStatement(discriminant=discriminant, cases=list(cases)), node)

    def visit_switch_case(self, node, visited_children):
        test, consequent = visited_children
        return self._place(SwitchCase(test=test, consequent=list(consequent)), node)

    def visit_case_test(self, node, visited_children):
        _, test, _, _ = visited_children
        return test

    def visit_default_label(self, node, visited_children):
        return None

    def visit_try_stmt(self, node, visited_children):
        _, block, handler, finalizer = visited_children
        return self._place(TryStatement(
            block=block, handler=_opt(handler), finalizer=_opt(finalizer)), node)

    def visit_catch_clause(self, node, visited_children):
        _, param, body = visited_children
        return self._place(CatchClause(param=_opt(param), body=body), node)

    def visit_catch_param(self, node, visited_children):
        _, _, target, _, _ = visited_children
        return target

    def visit_finally_clause(self, node, visited_children):
        _, block = visited_children
        return block

    def visit_return_stmt(self, node, visited_children):
        _, argument, _, _ = visited_children
        return self._place(ReturnStatement(argument=_opt(argument)), node)

    def visit_return_argument(self, node, visited_children):
        _, expression = visited_children
        return expression

    def visit_throw_stmt(self, node, visited_children):
        _, argument, _ = visited_children
        return self._place(ThrowStatement(argument=argument), node)

    def visit_break_stmt(self, node, visited_children):
        _, label, _, _ = visited_children
        return self._place(BreakStatement(label=_opt(label)), node)

    def visit_continue_stmt(self, node, visited_children):
        _, label, _, _ = visited_children
        return self._place(ContinueStatement(label=_opt(label)), node)

    def visit_labeled_stmt(self, node, visited_children):
        label, _, _, body = visited_children
        return self._place(LabeledStatement(label=label, body=body), node)

    # ─────────────────────────────────────────────────────────────
    # Modules
    # ─────────────────────────────────────────────────────────────

    def visit_import_decl(self, node, visited_children):
        _, body, _ = visited_children
        if isinstance(body, tuple):
            specifiers, source = body
        else:
            specifiers, source = [], body
        return self._place(ImportDeclaration(specifiers=specifiers, source=source), node)

    def visit_import_from(self, node, visited_children):
        specifiers, _, source = visited_children
        return specifiers, source

    def visit_import_default_plus(self, node, visited_children):
        local, more = visited_children
        default = self._span(ImportDefaultSpecifier(local=local), local.start, local.end)
        specifiers = [default]
        more = _opt(more)
        if more is not None:
            specifiers.extend(more[2])
        return specifiers

    def visit_import_namespace(self, node, visited_children):
        _, _, _, local = visited_children
        return [self._place(ImportNamespaceSpecifier(local=local), node)]

    def visit_import_named(self, node, visited_children):
        _, _, items, _, _ = visited_children
        return _opt(items) or []

    def visit_import_specifier_list(self, node, visited_children):
        return _comma_list(visited_children)

    def visit_import_specifier(self, node, visited_children):
        imported, alias = visited_children
        local = _opt(alias)
        if local is None:
            local = self._clone_identifier(imported)
        return self._place(ImportSpecifier(imported=imported, local=local), node)

    def visit_import_alias(self, node, visited_children):
        _, name = visited_children
        return name

    def visit_export_decl(self, node, visited_children):
        decorators, _, declaration = visited_children
        if decorators:
            target = getattr(declaration, "declaration", None)
            if not isinstance(target, CLASS_TYPES):
                raise SourceParseError(
                    "Leading decorators must be attached to a class declaration",
                    self._source_span(node))
            target.decorators[:0] = decorators
        return self._place(declaration, node)

    def visit_export_default(self, node, visited_children):
        _, value = visited_children
        return self._place(ExportDefaultDeclaration(declaration=value), node)

    def visit_default_class(self, node, visited_children):
        decorators, _, name, heritage, body = visited_children
        return self._place(ClassDeclaration(
            decorators=list(decorators), id=_opt(name),
            super_class=_opt(heritage), body=body), node)

    def visit_default_function(self, node, visited_children):
        is_async, _, star, name, params, body = visited_children
        return self._place(FunctionDeclaration(
            id=_opt(name), params=params, body=body,
            is_async=bool(is_async), generator=bool(star)), node)

    def visit_default_expression(self, node, visited_children):
        expression, _ = visited_children
        return expression

    def visit_export_all(self, node, visited_children):
        _, _, _, source, _ = visited_children
        return self._place(ExportAllDeclaration(source=source), node)

    def visit_export_named_list(self, node, visited_children):
        _, _, items, _, _, source, _ = visited_children
        return self._place(ExportNamedDeclaration(
            specifiers=_opt(items) or [], source=_opt(source)), node)

    def visit_export_from(self, node, visited_children):
        _, source = visited_children
        return source

    def visit_export_specifier_list(self, node, visited_children):
        return _comma_list(visited_children)

    def visit_export_specifier(self, node, visited_children):
        local, alias = visited_children
        exported = _opt(alias)
        if exported is None:
            exported = self._clone_identifier(local)
        return self._place(ExportSpecifier(local=local, exported=exported), node)

    def visit_export_alias(self, node, visited_children):
        _, name = visited_children
        return name

    def visit_export_declaration(self, node, visited_children):
        return self._place(ExportNamedDeclaration(declaration=visited_children[0]), node)

    # ─────────────────────────────────────────────────────────────
    # Classes and decorators
    # ─────────────────────────────────────────────────────────────

    def visit_decorator(self, node, visited_children):
        _, expression, members, args = visited_children
        for tail in members:
            expression = self._apply_tail(expression, tail)
        call_args = _opt(args)
        if call_args is not None:
            expression = self._apply_tail(expression, ("call", call_args, node.children[3]))
        return self._place(Decorator(expression=expression), node)

    def visit_class_decl(self, node, visited_children):
        decorators, _, name, heritage, body = visited_children
        return self._place(ClassDeclaration(
            decorators=list(decorators), id=name,
            super_class=_opt(heritage), body=body), node)

    def visit_class_expr(self, node, visited_children):
        decorators, _, name, heritage, body = visited_children
        return self._place(ClassExpression(
            decorators=list(decorators), id=_opt(name),
            super_class=_opt(heritage), body=body), node)

    def visit_class_heritage(self, node, visited_children):
        _, expression = visited_children
        return expression

    def visit_class_body(self, node, visited_children):
        _, _, members, _, _ = visited_children
        return self._place(ClassBody(body=[m for m in members if m is not None]), node)

    def visit_empty_member(self, node, visited_children):
        return None

    def visit_method_def(self, node, visited_children):
        decorators, static, accessor, star, key_info, params, body = visited_children
        key, computed = key_info
        accessor = _opt(accessor)
        is_static = bool(static)
        kind = "method"
        if accessor in ("get", "set"):
            kind = accessor
        elif not is_static and not computed and _key_name(key) == "constructor":
            kind = "constructor"
        function = FunctionExpression(
            params=params, body=body,
            is_async=accessor == "async", generator=bool(star))
        self._span(function, node.children[5].start, _content_end(node))
        return self._place(MethodDefinition(
            decorators=list(decorators), key=key, value=function,
            kind=kind, static=is_static, computed=computed), node)

    def visit_class_property(self, node, visited_children):
        decorators, static, key_info, value, _ = visited_children
        key, computed = key_info
        return self._place(ClassProperty(
            decorators=list(decorators), key=key, value=_opt(value),
            static=bool(static), computed=computed), node)

    def visit_accessor_prefix(self, node, visited_children):
        return node.children[0].text

    def visit_property_key(self, node, visited_children):
        computed = node.children[0].expr_name == "computed_key"
        return visited_children[0], computed

    def visit_computed_key(self, node, visited_children):
        _, _, expression, _, _ = visited_children
        return expression

    # ─────────────────────────────────────────────────────────────
    # Functions and binding patterns
    # ─────────────────────────────────────────────────────────────

    def visit_function_decl(self, node, visited_children):
        is_async, _, star, name, params, body = visited_children
        return self._place(FunctionDeclaration(
            id=name, params=params, body=body,
            is_async=bool(is_async), generator=bool(star)), node)

    def visit_function_expr(self, node, visited_children):
        is_async, _, star, name, params, body = visited_children
        return self._place(FunctionExpression(
            id=_opt(name), params=params, body=body,
            is_async=bool(is_async), generator=bool(star)), node)

    def visit_params(self, node, visited_children):
        _, _, items, _, _ = visited_children
        return _opt(items) or []

    def visit_param_list(self, node, visited_children):
        return _comma_list(visited_children)

    def visit_rest_param(self, node, visited_children):
        _, _, target = visited_children
        return self._place(RestElement(argument=target), node)

    def visit_binding_element(self, node, visited_children):
        target, default = visited_children
        default = _opt(default)
        if default is None:
            return target
        return self._place(AssignmentPattern(left=target, right=default), node)

    def visit_array_pattern(self, node, visited_children):
        _, _, first, rest, _, _ = visited_children
        elements = [_opt(first)] + [_opt(item[2]) for item in rest]
        if elements[-1] is None:
            elements.pop()
        return self._place(ArrayPattern(elements=elements), node)

    def visit_object_pattern(self, node, visited_children):
        _, _, items, _, _ = visited_children
        return self._place(ObjectPattern(properties=_opt(items) or []), node)

    def visit_object_pattern_list(self, node, visited_children):
        return _comma_list(visited_children)

    def visit_keyed_pattern_prop(self, node, visited_children):
        key_info, _, _, value = visited_children
        key, computed = key_info
        return self._place(Property(key=key, value=value, computed=computed), node)

    def visit_shorthand_pattern_prop(self, node, visited_children):
        ident, default = visited_children
        return self._shorthand(node, ident, _opt(default))

    def _shorthand(self, node, ident: Identifier, default: Optional[Node]) -> Node:
        value: Node = self._clone_identifier(ident)
        if default is not None:
            value = self._span(AssignmentPattern(left=value, right=default), ident.start, default.end)
        return self._place(Property(key=ident, value=value, shorthand=True), node)

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    def visit_expression(self, node, visited_children):
        first, rest = visited_children
        if not rest:
            return first
        expressions = [first] + [item[2] for item in rest]
        return self._place(SequenceExpression(expressions=expressions), node)

    def visit_assign_expr(self, node, visited_children):
        target, operator, value = visited_children
        if operator == "=":
            target = self._to_pattern(target)
        return self._place(AssignmentExpression(left=target, operator=operator, right=value), node)

    def visit_assign_op(self, node, visited_children):
        return node.children[0].text

    def visit_conditional(self, node, visited_children):
        test, tail = visited_children
        tail = _opt(tail)
        if tail is None:
            return test
        _, _, consequent, _, _, alternate = tail
        return self._place(ConditionalExpression(
            test=test, consequent=consequent, alternate=alternate), node)

    def visit_arrow_function(self, node, visited_children):
        is_async, params, _, _, body = visited_children
        return self._place(ArrowFunctionExpression(
            params=params, body=body, is_async=bool(is_async),
            expression=not isinstance(body, BlockStatement)), node)

    def visit_arrow_params(self, node, visited_children):
        value = visited_children[0]
        return value if isinstance(value, list) else [value]

    def visit_yield_expr(self, node, visited_children):
        _, star, argument, _ = visited_children
        return self._place(YieldExpression(argument=_opt(argument), delegate=bool(star)), node)

    def visit_yield_argument(self, node, visited_children):
        _, argument = visited_children
        return argument

    def visit_binary_expr(self, node, visited_children):
        first, rest = visited_children
        if not rest:
            return first
        operators = [op for op, _ in rest]
        operands = [first] + [operand for _, operand in rest]
        return self._fold_binary(operands, operators)

    def visit_binary_op(self, node, visited_children):
        return node.text.strip()

    def visit_prefix_unary(self, node, visited_children):
        operator, argument = visited_children
        if operator == "await":
            return self._place(AwaitExpression(argument=argument), node)
        return self._place(UnaryExpression(operator=operator, argument=argument), node)

    def visit_unary_op(self, node, visited_children):
        return node.text.strip()

    def visit_prefix_update(self, node, visited_children):
        operator, argument = visited_children
        return self._place(UpdateExpression(operator=operator, argument=argument, prefix=True), node)

    def visit_postfix_expr(self, node, visited_children):
        argument, operator = visited_children
        operator = _opt(operator)
        if operator is None:
            return argument
        return self._place(UpdateExpression(operator=operator, argument=argument, prefix=False), node)

    def visit_update_op(self, node, visited_children):
        return node.text.strip()

    def visit_call_expression(self, node, visited_children):
        callee, tails = visited_children
        for tail in tails:
            callee = self._apply_tail(callee, tail)
        return callee

    def visit_call_tail(self, node, visited_children):
        kind = node.children[0].expr_name
        if kind == "arguments":
            return ("call", visited_children[0], node)
        if kind == "template_literal":
            return ("tag", visited_children[0], node)
        return visited_children[0]

    def visit_dot_member(self, node, visited_children):
        _, _, prop = visited_children
        return ("member", prop, False, node)

    def visit_computed_member(self, node, visited_children):
        _, _, expression, _, _ = visited_children
        return ("member", expression, True, node)

    def visit_arguments(self, node, visited_children):
        _, _, items, _, _ = visited_children
        return _opt(items) or []

    def visit_argument_list(self, node, visited_children):
        return _comma_list(visited_children)

    def visit_spread_element(self, node, visited_children):
        _, _, argument = visited_children
        return self._place(SpreadElement(argument=argument), node)

    def visit_super_expr(self, node, visited_children):
        return self._place(Super(), node)

    def visit_new_target(self, node, visited_children):
        _, _, _, prop = visited_children
        if prop.name != "target":
            raise SourceParseError(
                f"The only valid meta property for new is new.target, not new.{prop.name}",
                self._source_span(node))
        return self._place(MetaProperty(meta="new", property="target"), node)

    def visit_new_call(self, node, visited_children):
        _, callee, args = visited_children
        return self._place(NewExpression(callee=callee, arguments=_opt(args) or []), node)

    def visit_new_callee(self, node, visited_children):
        head, tails = visited_children
        for tail in tails:
            head = self._apply_tail(head, tail)
        return head

    # ── primaries ────────────────────────────────────────────────

    def visit_this_expr(self, node, visited_children):
        return self._place(ThisExpression(), node)

    def visit_paren_expr(self, node, visited_children):
        _, _, expression, _, _ = visited_children
        return expression

    def visit_array_literal(self, node, visited_children):
        _, _, first, rest, _, _ = visited_children
        elements = [_opt(first)] + [_opt(item[2]) for item in rest]
        if elements[-1] is None:
            elements.pop()
        return self._place(ArrayExpression(elements=elements), node)

    def visit_object_literal(self, node, visited_children):
        _, _, items, _, _ = visited_children
        return self._place(ObjectExpression(properties=_opt(items) or []), node)

    def visit_object_member_list(self, node, visited_children):
        return _comma_list(visited_children)

    def visit_object_method(self, node, visited_children):
        accessor, star, key_info, params, body = visited_children
        key, computed = key_info
        accessor = _opt(accessor)
        kind = accessor if accessor in ("get", "set") else "init"
        function = FunctionExpression(
            params=params, body=body,
            is_async=accessor == "async", generator=bool(star))
        self._span(function, node.children[3].start, _content_end(node))
        return self._place(Property(
            key=key, value=function, kind=kind, computed=computed,
            method=kind == "init"), node)

    def visit_keyed_property(self, node, visited_children):
        key_info, _, _, value = visited_children
        key, computed = key_info
        return self._place(Property(key=key, value=value, computed=computed), node)

    def visit_shorthand_property(self, node, visited_children):
        ident, default = visited_children
        return self._shorthand(node, ident, _opt(default))

    def visit_null_lit(self, node, visited_children):
        return self._place(Literal(value=None, raw="null"), node)

    def visit_bool_lit(self, node, visited_children):
        raw = node.children[0].text
        return self._place(Literal(value=raw == "true", raw=raw), node)

    def visit_number_literal(self, node, visited_children):
        raw = node.children[0].text
        return self._place(Literal(value=_number_value(raw), raw=raw), node)

    def visit_string_literal(self, node, visited_children):
        raw = node.children[0].text
        return self._place(Literal(value=_unescape(raw[1:-1]), raw=raw), node)

    def visit_regex_literal(self, node, visited_children):
        raw = node.children[0].text
        return self._place(Literal(value=raw, raw=raw), node)

    def visit_template_literal(self, node, visited_children):
        _, parts, _, _ = visited_children
        quasis: List[str] = []
        expressions: List[Node] = []
        for part in parts:
            if isinstance(part, Node):
                expressions.append(part)
            else:
                quasis.append(part)
        return self._place(TemplateLiteral(quasis=quasis, expressions=expressions), node)

    def visit_template_chars(self, node, visited_children):
        return node.text

    def visit_template_subst(self, node, visited_children):
        _, _, expression, _ = visited_children
        return expression

    # ── identifiers ──────────────────────────────────────────────

    def visit_identifier(self, node, visited_children):
        name = node.children[0].text
        return self._span(Identifier(name=name), node.start, node.start + len(name))

    visit_identifier_name = visit_identifier

    # ─────────────────────────────────────────────────────────────
    # JSX
    # ─────────────────────────────────────────────────────────────

    def visit_jsx_expr(self, node, visited_children):
        element, _ = visited_children
        return element

    def visit_jsx_self_closing(self, node, visited_children):
        _, _, name, attributes, _ = visited_children
        opening = self._place(JSXOpeningElement(
            name=name, attributes=list(attributes), self_closing=True), node)
        return self._place(JSXElement(opening_element=opening), node)

    def visit_jsx_full_element(self, node, visited_children):
        opening, children, closing = visited_children
        expected = jsx_tag_name(opening.name)
        found = jsx_tag_name(closing.name)
        if expected != found:
            raise SourceParseError(
                f"Expected corresponding JSX closing tag for <{expected}>, found </{found}>",
                self._source_span(node.children[2]))
        return self._place(JSXElement(
            opening_element=opening, children=list(children),
            closing_element=closing), node)

    def visit_jsx_opening(self, node, visited_children):
        _, _, name, attributes, _ = visited_children
        return self._place(JSXOpeningElement(name=name, attributes=list(attributes)), node)

    def visit_jsx_closing(self, node, visited_children):
        _, _, name, _ = visited_children
        return self._place(JSXClosingElement(name=name), node)

    def visit_jsx_fragment(self, node, visited_children):
        _, _, _, children, _, _, _ = visited_children
        return self._place(JSXFragment(children=list(children)), node)

    def visit_jsx_namespaced_name(self, node, visited_children):
        namespace, _, name, _ = visited_children
        return self._place(JSXNamespacedName(namespace=namespace, name=name), node)

    def visit_jsx_member_name(self, node, visited_children):
        head, members, _ = visited_children
        for member in members:
            head = self._span(JSXMemberExpression(object=head, property=member), head.start, member.end)
        return head

    def visit_jsx_name_member(self, node, visited_children):
        _, name = visited_children
        return name

    def visit_jsx_simple_name(self, node, visited_children):
        name, _ = visited_children
        return name

    def visit_jsx_name_raw(self, node, visited_children):
        return self._place(JSXIdentifier(name=node.text), node)

    def visit_jsx_spread_attribute(self, node, visited_children):
        _, _, _, _, argument, _, _ = visited_children
        return self._place(JSXSpreadAttribute(argument=argument), node)

    def visit_jsx_named_attribute(self, node, visited_children):
        name, value = visited_children
        return self._place(JSXAttribute(name=name, value=_opt(value)), node)

    def visit_jsx_attribute_value(self, node, visited_children):
        _, _, value = visited_children
        return value

    def visit_jsx_string(self, node, visited_children):
        raw = node.children[0].text
        return self._place(Literal(value=raw[1:-1], raw=raw), node)

    def visit_jsx_attr_container(self, node, visited_children):
        _, _, expression, _, _ = visited_children
        return self._place(JSXExpressionContainer(expression=expression), node)

    def visit_jsx_text(self, node, visited_children):
        return self._place(JSXText(value=node.text), node)

    def visit_jsx_child_container(self, node, visited_children):
        _, ws, body, _ = visited_children
        body = _opt(body)
        if isinstance(body, JSXSpreadChild):
            return self._place(body, node)
        if body is None:
            inner = node.children[1].end
            body = self._span(JSXEmptyExpression(), inner, inner)
        return self._place(JSXExpressionContainer(expression=body), node)

    def visit_jsx_spread_child(self, node, visited_children):
        _, _, expression = visited_children
        return self._place(JSXSpreadChild(expression=expression), node)


# ═══════════════════════════════════════════════════════════════════
#  PART 4 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse(source: str, filename: str = "<input>") -> Program:
    """
    Parse *source* into a :class:`Program` with parent links set.

    Raises
    ------
    SourceParseError
        The text is not in the accepted JavaScript + JSX subset, or is
        nested too deeply to build a tree for.
    """
    index = LineIndex(source)
    # The packrat matcher and the visitor both recurse once per grammar
    # level, so deeply nested JSX needs more room than the default.
    with recursion_headroom():
        try:
            tree = JSX_GRAMMAR.parse(source)
            program = _ASTBuilder(filename, index).visit(tree)
            link_parents(program)
        except ParseError as exc:
            pos = max(exc.pos, 0)
            line, column = index.position(pos)
            excerpt = source[pos:pos + 20].split("\n", 1)[0]
            if isinstance(exc, IncompleteParseError):
                message = f"Parsing error: unexpected input {excerpt!r}"
            else:
                message = f"Parsing error: unexpected token {excerpt!r}" if excerpt else "Parsing error: unexpected end of input"
            raise SourceParseError(message, SourceSpan(filename, line, column)) from exc
        except (RecursionError, VisitationError) as exc:
            raise SourceParseError(
                "Parsing error: input is nested too deeply", SourceSpan(filename, 1, 1)
            ) from exc
    logger.debug("parsed %s: %d top-level statements", filename, len(program.body))
    return program


__all__ = ["JSX_GRAMMAR", "LineIndex", "parse", "jsx_tag_name"]

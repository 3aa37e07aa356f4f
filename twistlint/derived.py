# twistlint/derived.py
"""
Derived-class facts for the constructor ``super()`` analysis.

Twist decorators such as ``@Store`` or ``@Component`` make the decorated
class extend a framework base class at build time, although the source
has no ``extends`` clause.  The constructor of such a class must call
``super()`` exactly like one of a syntactically derived class.
"""

from __future__ import annotations

from typing import Optional

from twistlint.nodes import (
    AssignmentExpression,
    CallExpression,
    ClassExpression,
    ConditionalExpression,
    FunctionExpression,
    Identifier,
    LogicalExpression,
    MemberExpression,
    MetaProperty,
    NewExpression,
    Node,
    SequenceExpression,
    TaggedTemplateExpression,
    ThisExpression,
    YieldExpression,
)
from twistlint.registry import DecoratorRegistry


def decorator_name(decorator: Node) -> Optional[str]:
    """Name a decorator is registered under: ``@Name`` or ``@Name(...)``.

    The call form counts too, so ``@Store()`` makes a class derived just
    like ``@Store``.  ESLint's Twist plugin only looks at bare identifiers
    and treats ``@Store()`` as an ordinary decorator.
    """
    expression = getattr(decorator, "expression", None)
    if isinstance(expression, CallExpression):
        expression = expression.callee
    if isinstance(expression, Identifier):
        return expression.name
    return None


def is_effectively_derived(class_node: Node, registry: DecoratorRegistry) -> bool:
    """True when a decorator of *class_node* implies an injected base class.

    Only meaningful for classes without an ``extends`` clause; classes with
    one are derived on their own.
    """
    for decorator in getattr(class_node, "decorators", None) or ():
        name = decorator_name(decorator)
        if name is not None and registry.implies_base_class(name):
            return True
    return False


def is_derived(class_node: Node, registry: DecoratorRegistry) -> bool:
    """The "derived" predicate the constructor analysis keys on."""
    if class_node.super_class is not None:
        return True
    return is_effectively_derived(class_node, registry)


_CONSTRUCTOR_TYPES = (
    ClassExpression,
    FunctionExpression,
    ThisExpression,
    MemberExpression,
    CallExpression,
    NewExpression,
    YieldExpression,
    TaggedTemplateExpression,
    MetaProperty,
)


def is_possible_constructor(node: Optional[Node]) -> bool:
    """Whether the ``extends`` expression *node* can evaluate to a constructor."""
    if node is None:
        return False
    if isinstance(node, _CONSTRUCTOR_TYPES):
        return True
    if isinstance(node, Identifier):
        return node.name != "undefined"
    if isinstance(node, AssignmentExpression):
        return is_possible_constructor(node.right)
    if isinstance(node, LogicalExpression):
        return is_possible_constructor(node.left) or is_possible_constructor(node.right)
    if isinstance(node, ConditionalExpression):
        return is_possible_constructor(node.alternate) or is_possible_constructor(node.consequent)
    if isinstance(node, SequenceExpression):
        return is_possible_constructor(node.expressions[-1])
    # literals, arrows, object/array literals, arithmetic ...
    return False


__all__ = ["decorator_name", "is_effectively_derived", "is_derived", "is_possible_constructor"]

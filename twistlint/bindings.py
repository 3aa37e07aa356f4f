# twistlint/bindings.py
"""
Binding sites of Twist structural components.

A few JSX attributes introduce names that are visible to the children of
the element carrying them::

    <repeat for={ item in items }>            iteration pair (item)
    <repeat for={ (item, index) in items }>   iteration pair (item, index)
    <repeat collection={ items } as={ item }> iteration pair from ``as``
    <using value={ x } as={ y }>              single value (y)
    <MyComponent as={ params }>               parameter (params)
    <dialog:footer as={ accept, cancel }>     parameter pair

:class:`BindingSiteClassifier` decides which attributes of an element are
binding attributes and which grammar applies to each;
:class:`AttributeValueValidator` extracts the bound names and reports any
value that is not a bare name or a two-name sequence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from twistlint.diagnostics import Finding, FindingKind, invalid_binding_message
from twistlint.nodes import (
    BinaryExpression,
    Identifier,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXIdentifier,
    JSXNamespacedName,
    JSXOpeningElement,
    Node,
    SequenceExpression,
)
from twistlint.parser import jsx_tag_name

logger = logging.getLogger(__name__)

REPEAT_TAG = "repeat"
USING_TAG = "using"

FOR_ATTRIBUTE = "for"
AS_ATTRIBUTE = "as"


class TagKind(Enum):
    REPEAT = "repeat"
    USING = "using"
    GENERIC = "generic"
    # member-expression tags (<A.B>) carry no bindings
    NONE = "none"


class BindingForm(Enum):
    ITERATION = "iteration"
    SINGLE = "single"
    PARAMETER = "parameter"


# ── Bound-name shapes ────────────────────────────────────────────────

@dataclass(frozen=True)
class IterationPair:
    primary: Optional[str]
    secondary: Optional[str] = None

    @property
    def names(self) -> Tuple[Optional[str], ...]:
        return (self.primary, self.secondary)


@dataclass(frozen=True)
class SingleValue:
    name: str

    @property
    def names(self) -> Tuple[Optional[str], ...]:
        return (self.name,)


@dataclass(frozen=True)
class Parameter:
    name: Optional[str]
    index: Optional[str] = None

    @property
    def names(self) -> Tuple[Optional[str], ...]:
        return (self.name, self.index)


BindingGrammar = Union[IterationPair, SingleValue, Parameter]

# One name, or a (first, second) pair.
NameOrPair = Tuple[str, ...]


def binds(grammar: Optional[BindingGrammar], name: str) -> bool:
    return grammar is not None and name in grammar.names


# ── Classification ───────────────────────────────────────────────────

@dataclass(frozen=True)
class BindingAttribute:
    """View of one binding attribute on a JSX element."""
    attribute_name: str
    raw_value: Optional[Node]
    node: JSXAttribute
    form: BindingForm


@dataclass
class Classification:
    tag_kind: TagKind
    binding_attributes: List[BindingAttribute] = field(default_factory=list)

    def get(self, attribute_name: str) -> Optional[BindingAttribute]:
        for attribute in self.binding_attributes:
            if attribute.attribute_name == attribute_name:
                return attribute
        return None


def attribute_name(attribute: Node) -> Optional[str]:
    """Plain name of a JSX attribute; None for spreads and ``ns:name`` attributes."""
    if isinstance(attribute, JSXAttribute) and isinstance(attribute.name, JSXIdentifier):
        return attribute.name.name
    return None


def tag_kind(opening: JSXOpeningElement) -> TagKind:
    name = opening.name
    if not isinstance(name, (JSXIdentifier, JSXNamespacedName)):
        return TagKind.NONE
    tag = jsx_tag_name(name)
    if tag == REPEAT_TAG:
        return TagKind.REPEAT
    if tag == USING_TAG:
        return TagKind.USING
    return TagKind.GENERIC


class BindingSiteClassifier:
    """Finds the binding attributes of a JSX element."""

    def classify(self, element: Union[JSXElement, JSXOpeningElement]) -> Classification:
        opening = element.opening_element if isinstance(element, JSXElement) else element
        kind = tag_kind(opening)
        result = Classification(kind)
        if kind is TagKind.NONE:
            return result

        # the last occurrence of a repeated attribute wins
        by_name: Dict[str, JSXAttribute] = {}
        for attribute in opening.attributes:
            name = attribute_name(attribute)
            if name in (FOR_ATTRIBUTE, AS_ATTRIBUTE):
                by_name[name] = attribute

        if kind is TagKind.REPEAT and FOR_ATTRIBUTE in by_name:
            attr = by_name[FOR_ATTRIBUTE]
            result.binding_attributes.append(
                BindingAttribute(FOR_ATTRIBUTE, _raw_value(attr), attr, BindingForm.ITERATION))
        if AS_ATTRIBUTE in by_name:
            attr = by_name[AS_ATTRIBUTE]
            form = {
                TagKind.REPEAT: BindingForm.ITERATION,
                TagKind.USING: BindingForm.SINGLE,
            }.get(kind, BindingForm.PARAMETER)
            result.binding_attributes.append(
                BindingAttribute(AS_ATTRIBUTE, _raw_value(attr), attr, form))
        return result


def _raw_value(attribute: JSXAttribute) -> Optional[Node]:
    value = attribute.value
    if isinstance(value, JSXExpressionContainer):
        return value.expression
    return value


# ── Validation ───────────────────────────────────────────────────────

_INVALID = object()


class AttributeValueValidator:
    """
    Extracts bound names from binding attribute values.

    A value is valid when it is a bare identifier or a sequence of exactly
    two identifiers.  For ``for`` the rule applies to the left operand of
    the ``in`` expression.  Every invalid attribute is reported once,
    through *report*, however many times it is examined.
    """

    def __init__(self, source: str, report: Callable[[Finding], None]) -> None:
        self._source = source
        self._report = report
        self._cache: Dict[int, object] = {}

    def extract_names(self, attribute: BindingAttribute) -> Optional[NameOrPair]:
        """Bound names of *attribute*, or None when the value is invalid."""
        key = id(attribute.node)
        if key not in self._cache:
            self._cache[key] = self._extract(attribute)
        result = self._cache[key]
        return None if result is _INVALID else result

    def grammar(self, attribute: BindingAttribute) -> Optional[BindingGrammar]:
        """The validated binding of *attribute*, shaped by its grammar."""
        names = self.extract_names(attribute)
        if names is None:
            return None
        first = names[0]
        second = names[1] if len(names) > 1 else None
        if attribute.form is BindingForm.ITERATION:
            return IterationPair(first, second)
        if attribute.form is BindingForm.SINGLE and second is None:
            return SingleValue(first)
        return Parameter(first, second)

    def _extract(self, attribute: BindingAttribute) -> object:
        value = attribute.raw_value
        target = value
        if attribute.attribute_name == FOR_ATTRIBUTE:
            if isinstance(value, BinaryExpression) and value.operator == "in":
                target = value.left
            else:
                return self._invalid(attribute, value)
        names = _names_of(target)
        if names is None:
            return self._invalid(attribute, target)
        return names

    def _invalid(self, attribute: BindingAttribute, expression: Optional[Node]) -> object:
        text = expression.text(self._source) if expression is not None else ""
        message = invalid_binding_message(text, attribute.attribute_name)
        logger.debug("invalid binding value at %d:%d: %s",
                     attribute.node.line, attribute.node.column, text)
        self._report(Finding(attribute.node, message, FindingKind.INVALID_BINDING_VALUE))
        return _INVALID


def _names_of(expression: Optional[Node]) -> Optional[NameOrPair]:
    if isinstance(expression, Identifier):
        return (expression.name,)
    if isinstance(expression, SequenceExpression) and len(expression.expressions) == 2:
        first, second = expression.expressions
        if isinstance(first, Identifier) and isinstance(second, Identifier):
            return (first.name, second.name)
    return None


__all__ = [
    "TagKind",
    "BindingForm",
    "IterationPair",
    "SingleValue",
    "Parameter",
    "BindingGrammar",
    "BindingAttribute",
    "Classification",
    "BindingSiteClassifier",
    "AttributeValueValidator",
    "attribute_name",
    "tag_kind",
    "binds",
]

# twistlint/resolver.py
"""
Template-aware resolution of free identifiers.

Ordinary lexical scoping (:mod:`twistlint.scope`) leaves some references
unresolved.  Inside Twist templates many of those are legitimately bound
by an enclosing structural component (``<repeat>``, ``<using>``, or any
element with an ``as`` attribute).  Others are auto-imported decorators.

For each free reference, in order:

  1. under ``typeof``: skipped unless ``consider_typeof`` is set
  2. a registered global decorator used inside a decorator: resolved
  3. ascend through the enclosing JSX elements; the first element whose
     binding attributes bind the name resolves it
  4. otherwise: ``'{name}' is not defined.``

Resolution never mutates the tree, and each reference is judged on its
own, so the order of the input does not change the set of findings.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from twistlint.bindings import (
    AS_ATTRIBUTE,
    FOR_ATTRIBUTE,
    AttributeValueValidator,
    BindingAttribute,
    BindingForm,
    BindingSiteClassifier,
    TagKind,
    attribute_name,
    binds,
)
from twistlint.diagnostics import Finding, FindingKind, undefined_message
from twistlint.nodes import Decorator, JSXElement, JSXOpeningElement, Node, UnaryExpression
from twistlint.registry import DecoratorRegistry
from twistlint.scope import FreeReference

logger = logging.getLogger(__name__)


def is_typeof_operand(node: Node) -> bool:
    parent = node.parent
    return isinstance(parent, UnaryExpression) and parent.operator == "typeof"


def in_decorator(node: Node) -> bool:
    return any(isinstance(ancestor, Decorator) for ancestor in node.ancestors())


class ScopeWalkResolver:
    """
    Resolves free references against template binding sites.

    Parameters
    ----------
    registry         : decorator registry of the run
    source           : text of the file, used to render invalid values
    consider_typeof  : also resolve operands of ``typeof``
    """

    def __init__(
        self,
        registry: DecoratorRegistry,
        source: str,
        consider_typeof: bool = False,
        classifier: Optional[BindingSiteClassifier] = None,
    ) -> None:
        self.registry = registry
        self.consider_typeof = consider_typeof
        self.classifier = classifier or BindingSiteClassifier()
        self._reported: List[Finding] = []
        self.validator = AttributeValueValidator(source, self._reported.append)

    def _drain(self) -> List[Finding]:
        findings = list(self._reported)
        self._reported.clear()
        return findings

    def validate_bindings(self, program: Node) -> List[Finding]:
        """Validate every binding attribute in *program*.

        ``as`` is checked on every element, ``for`` on ``<repeat>``.
        """
        for node in program.walk():
            if not isinstance(node, JSXOpeningElement):
                continue
            classification = self.classifier.classify(node)
            checked = set()
            for attribute in classification.binding_attributes:
                self.validator.extract_names(attribute)
                checked.add(attribute.attribute_name)
            if AS_ATTRIBUTE in checked:
                continue
            # member tags bind nothing, but their ``as`` still has to be a name
            for attr in node.attributes:
                if attribute_name(attr) == AS_ATTRIBUTE:
                    value = getattr(attr.value, "expression", attr.value)
                    self.validator.extract_names(
                        BindingAttribute(AS_ATTRIBUTE, value, attr, BindingForm.PARAMETER))
        return self._drain()

    def resolve(self, free_references: Iterable[FreeReference],
                consider_typeof: Optional[bool] = None) -> List[Finding]:
        """Findings for the references that nothing binds.

        Invalid binding values met while ascending, and not already
        reported by :meth:`validate_bindings`, are included as well.
        """
        if consider_typeof is None:
            consider_typeof = self.consider_typeof
        findings: List[Finding] = []
        for ref in free_references:
            if not self.is_resolved(ref, consider_typeof):
                findings.append(Finding(
                    ref.identifier, undefined_message(ref.name),
                    FindingKind.UNRESOLVED_IDENTIFIER))
        invalid = self._drain()
        logger.debug("resolved free references: %d unresolved, %d invalid bindings",
                     len(findings), len(invalid))
        return invalid + findings

    def is_resolved(self, ref: FreeReference, consider_typeof: bool = False) -> bool:
        node = ref.identifier
        name = ref.name
        if not consider_typeof and is_typeof_operand(node):
            return True
        if self.registry.is_global(name) and in_decorator(node):
            return True
        for ancestor in node.ancestors():
            if isinstance(ancestor, JSXElement) and self._element_binds(ancestor, name):
                return True
        return False

    def _element_binds(self, element: JSXElement, name: str) -> bool:
        classification = self.classifier.classify(element)
        if classification.tag_kind is TagKind.NONE:
            return False
        if classification.tag_kind is TagKind.REPEAT:
            # ``for`` and ``collection``/``as`` are independent alternatives
            for attr_name in (FOR_ATTRIBUTE, AS_ATTRIBUTE):
                attribute = classification.get(attr_name)
                if attribute is not None and binds(self.validator.grammar(attribute), name):
                    return True
            return False
        attribute = classification.get(AS_ATTRIBUTE)
        return attribute is not None and binds(self.validator.grammar(attribute), name)


__all__ = ["ScopeWalkResolver", "is_typeof_operand", "in_decorator"]

# twistlint/usage.py
"""JSX tag names that keep a variable alive."""

from __future__ import annotations

from typing import Optional

from twistlint.nodes import (
    JSXIdentifier,
    JSXMemberExpression,
    JSXNamespacedName,
    JSXOpeningElement,
    Node,
)


def tag_root_name(opening: JSXOpeningElement) -> Optional[str]:
    """
    Name that a JSX opening tag uses as a variable.

        <App>           → "App"
        <App:Member>    → "App"   (namespace part)
        <App.Foo.Bar>   → "App"   (outermost object)
    """
    name: Optional[Node] = opening.name
    if isinstance(name, JSXNamespacedName):
        return name.namespace.name
    if isinstance(name, JSXIdentifier):
        return name.name
    if isinstance(name, JSXMemberExpression):
        while isinstance(name, JSXMemberExpression):
            name = name.object
        if isinstance(name, JSXIdentifier):
            return name.name
    return None


__all__ = ["tag_root_name"]

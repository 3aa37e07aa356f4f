# twistlint/registry.py
"""
Decorator registry.

Maps a decorator name to what the linter needs to know about it:

    is_global           the name is available without an import when it
                        is used as a decorator (Twist auto-imports it)
    implies_base_class  a class carrying the decorator gets a base class
                        injected, so its constructor must call ``super()``

The registry is built once per run from a decorator table (``name →
{"inherits"?, "global"?, "module"?, "export"?}``) and is read-only
afterwards.  The presence of ``inherits`` is what makes a decorator imply
a base class; its value (the injected base class name) is kept only for
display.  ``global`` defaults to true.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from twistlint.errors import RegistryError

logger = logging.getLogger(__name__)

DEFAULT_TABLE_PATH = Path(__file__).resolve().parent / "data" / "decorators.json"

_ENTRY_KEYS = frozenset({"inherits", "global", "module", "export"})


@dataclass(frozen=True)
class DecoratorSpec:
    name: str
    is_global: bool = True
    implies_base_class: bool = False
    inherits: Optional[str] = None
    module: Optional[str] = None
    export: Optional[str] = None


class DecoratorRegistry:
    """Immutable decorator name → :class:`DecoratorSpec` table."""

    def __init__(self, specs: Mapping[str, DecoratorSpec]) -> None:
        self._specs: Mapping[str, DecoratorSpec] = MappingProxyType(dict(specs))

    @classmethod
    def from_config(cls, table: Any) -> "DecoratorRegistry":
        """Build a registry from a decorator table.

        Raises :class:`RegistryError` if any part of *table* is malformed;
        no partial registry is ever returned.
        """
        if table is None:
            return cls({})
        if not isinstance(table, Mapping):
            raise RegistryError(
                f"decorator table must be a mapping, not {type(table).__name__}")
        specs = {}
        for name, entry in table.items():
            specs[name] = _build_spec(name, entry)
        return cls(specs)

    @classmethod
    def from_file(cls, path: Path) -> "DecoratorRegistry":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise RegistryError(f"cannot read decorator table {path}: {exc}") from exc
        try:
            table = json.loads(text)
        except ValueError as exc:
            raise RegistryError(f"decorator table {path} is not valid JSON: {exc}") from exc
        return cls.from_config(table)

    def merged(self, other: "DecoratorRegistry") -> "DecoratorRegistry":
        """A new registry with *other*'s entries layered over this one."""
        combined = dict(self._specs)
        combined.update(other._specs)
        return DecoratorRegistry(combined)

    # ── queries ──────────────────────────────────────────────────

    def load(self) -> Mapping[str, DecoratorSpec]:
        return self._specs

    def lookup(self, name: str) -> Optional[DecoratorSpec]:
        return self._specs.get(name)

    def is_global(self, name: str) -> bool:
        spec = self._specs.get(name)
        return spec is not None and spec.is_global

    def implies_base_class(self, name: str) -> bool:
        spec = self._specs.get(name)
        return spec is not None and spec.implies_base_class

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"DecoratorRegistry({len(self._specs)} decorators)"


def _build_spec(name: Any, entry: Any) -> DecoratorSpec:
    if not isinstance(name, str) or not name.isidentifier():
        raise RegistryError(f"invalid decorator name {name!r}")
    if entry is None or entry is True:
        entry = {}
    if not isinstance(entry, Mapping):
        raise RegistryError(f"decorator {name!r}: entry must be an object")
    unknown = set(entry) - _ENTRY_KEYS
    if unknown:
        raise RegistryError(
            f"decorator {name!r}: unknown keys {', '.join(sorted(unknown))}")
    for key in ("inherits", "module", "export"):
        value = entry.get(key)
        if value is not None and not isinstance(value, str):
            raise RegistryError(f"decorator {name!r}: {key!r} must be a string")
    is_global = entry.get("global", True)
    if not isinstance(is_global, bool):
        raise RegistryError(f"decorator {name!r}: 'global' must be true or false")
    return DecoratorSpec(
        name=name,
        is_global=is_global,
        implies_base_class="inherits" in entry,
        inherits=entry.get("inherits"),
        module=entry.get("module"),
        export=entry.get("export"),
    )


_default_lock = threading.Lock()
_default_registry: Optional[DecoratorRegistry] = None


def default_registry() -> DecoratorRegistry:
    """The bundled Twist decorator table, loaded on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = DecoratorRegistry.from_file(DEFAULT_TABLE_PATH)
            logger.debug("loaded %d default decorators from %s",
                         len(_default_registry), DEFAULT_TABLE_PATH)
        return _default_registry


__all__ = ["DecoratorSpec", "DecoratorRegistry", "default_registry", "DEFAULT_TABLE_PATH"]

# twistlint/directives.py
"""
Configuration comments embedded in source files.

Recognised forms::

    /* global a, b:false, c:writable */     extra globals ("globals" also accepted)
    /* eslint-env browser, node */          enable environments
    // twistlint-disable-line [ids...]      suppress on this line
    // twistlint-disable-next-line [ids...] suppress on the following line
    /* twistlint-disable [ids...] */        suppress for the whole file

Identifiers in a suppression are rule names or error ids; with none, every
diagnostic on the covered line is suppressed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set, Tuple

from twistlint.parser import LineIndex

# Strings and templates are matched only so that comment markers inside
# them are skipped.
_TOKEN_RE = re.compile(
    r"""
      "(?:[^"\\\n]|\\.)*"
    | '(?:[^'\\\n]|\\.)*'
    | `(?:[^`\\]|\\[\s\S])*`
    | //(?P<line>[^\n]*)
    | /\*(?P<block>[\s\S]*?)\*/
    """,
    re.VERBOSE,
)

_GLOBAL_RE = re.compile(r"^\s*globals?\s+([\s\S]*)$")
_ENV_RE = re.compile(r"^\s*eslint-env\s+([\s\S]*)$")
_DISABLE_RE = re.compile(r"^\s*twistlint-disable(-line|-next-line)?(?:\s+([\s\S]*))?$")

WILDCARD = "*"


@dataclass
class Comment:
    kind: str       # "Line" or "Block"
    value: str
    line: int
    end_line: int


@dataclass
class Directives:
    """Everything the configuration comments of one file declare."""

    globals: Dict[str, bool] = field(default_factory=dict)
    env: List[str] = field(default_factory=list)
    # line → suppressed ids (WILDCARD for all)
    line_suppressions: Dict[int, Set[str]] = field(default_factory=dict)
    file_suppressions: Set[str] = field(default_factory=set)

    def suppress_line(self, line: int, ids: Set[str]) -> None:
        self.line_suppressions.setdefault(line, set()).update(ids)


def iter_comments(source: str) -> Iterator[Comment]:
    index = LineIndex(source)
    for match in _TOKEN_RE.finditer(source):
        if match.group("line") is not None:
            kind, value = "Line", match.group("line")
        elif match.group("block") is not None:
            kind, value = "Block", match.group("block")
        else:
            continue
        line, _ = index.position(match.start())
        end_line, _ = index.position(match.end())
        yield Comment(kind, value, line, end_line)


def _split_names(text: str) -> List[str]:
    return [item for item in re.split(r"[\s,]+", text.strip()) if item]


def _parse_global(item: str) -> Tuple[str, bool]:
    name, _, flag = item.partition(":")
    writable = flag.strip().lower() in ("true", "writable", "writeable")
    return name.strip(), writable


def parse_directives(source: str) -> Directives:
    """Collect the configuration comments of *source*."""
    directives = Directives()
    for comment in iter_comments(source):
        value = comment.value
        if comment.kind == "Block":
            match = _GLOBAL_RE.match(value)
            if match:
                for item in _split_names(_strip_separators(match.group(1))):
                    name, writable = _parse_global(item)
                    if name:
                        directives.globals[name] = writable
                continue
            match = _ENV_RE.match(value)
            if match:
                directives.env.extend(_split_names(match.group(1)))
                continue
        match = _DISABLE_RE.match(value)
        if not match:
            continue
        scope, ids_text = match.groups()
        ids = set(_split_names(ids_text or "")) or {WILDCARD}
        if scope == "-line":
            directives.suppress_line(comment.line, ids)
        elif scope == "-next-line":
            directives.suppress_line(comment.end_line + 1, ids)
        elif comment.kind == "Block":
            directives.file_suppressions.update(ids)
    return directives


def _strip_separators(text: str) -> str:
    # "a: false" → "a:false" so the name/flag pair survives splitting
    return re.sub(r"\s*:\s*", ":", text)


__all__ = ["Comment", "Directives", "WILDCARD", "iter_comments", "parse_directives"]

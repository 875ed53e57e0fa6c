"""
Handler selector parsing.

A handler map key names the node kind a handler wants, optionally narrowed
by attribute guards and optionally bound to the exit step of the traversal:

    CallExpression
    VariableDeclarator[init.type='ThisExpression']
    MethodDefinition[kind="constructor"][static=false]
    ClassBody:exit
    *
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple

from .errors import SelectorError
from .tree import Node

WILDCARD = "*"
EXIT_SUFFIX = ":exit"

_KIND_RE = re.compile(r"\s*(\*|[A-Za-z_][A-Za-z0-9_]*)")
_GUARD_RE = re.compile(
    r"\[\s*([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)\s*"
    r"(?:(!=|=)\s*('(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"|[^\]\s]+)\s*)?\]"
)
_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?$")

_MISSING = object()


@dataclass(frozen=True)
class Guard:
    """One ``[path op value]`` attribute test."""
    path: Tuple[str, ...]
    op: Optional[str] = None
    value: Any = None

    def test(self, node: Node) -> bool:
        actual = _resolve(node, self.path)
        if self.op is None:
            return actual is not _MISSING and actual is not None
        matched = actual is not _MISSING and _equals(actual, self.value)
        return matched if self.op == "=" else not matched


@dataclass(frozen=True)
class Selector:
    """A parsed handler map key."""
    raw: str
    kind: str
    guards: Tuple[Guard, ...] = ()
    is_exit: bool = False

    @property
    def is_wildcard(self) -> bool:
        return self.kind == WILDCARD

    def matches(self, node: Node) -> bool:
        if not self.is_wildcard and node.kind != self.kind:
            return False
        return all(guard.test(node) for guard in self.guards)


@lru_cache(maxsize=512)
def parse_selector(raw: str) -> Selector:
    """Parse a selector string, raising SelectorError when malformed."""
    if not isinstance(raw, str) or not raw.strip():
        raise SelectorError(str(raw), "empty selector")

    text = raw.strip()
    is_exit = text.endswith(EXIT_SUFFIX)
    if is_exit:
        text = text[: -len(EXIT_SUFFIX)]

    match = _KIND_RE.match(text)
    if not match:
        raise SelectorError(raw, "expected a node kind or '*'")
    kind = match.group(1)
    pos = match.end()

    guards = []
    while pos < len(text):
        guard_match = _GUARD_RE.match(text, pos)
        if not guard_match:
            raise SelectorError(raw, f"unexpected text {text[pos:]!r}")
        path, op, literal = guard_match.groups()
        guards.append(Guard(tuple(path.split(".")), op, _parse_literal(literal) if op else None))
        pos = guard_match.end()

    return Selector(raw=raw, kind=kind, guards=tuple(guards), is_exit=is_exit)


def _parse_literal(literal: str) -> Any:
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "'\"":
        return re.sub(r"\\(.)", r"\1", literal[1:-1])
    if literal == "true":
        return True
    if literal == "false":
        return False
    if literal == "null":
        return None
    if _NUMBER_RE.match(literal):
        return float(literal) if "." in literal else int(literal)
    return literal


def _resolve(node: Node, path: Tuple[str, ...]) -> Any:
    current: Any = node
    for part in path:
        if isinstance(current, Node):
            current = current.kind if part == "type" else current.get(part, _MISSING)
        elif isinstance(current, dict):
            current = current.get(part, _MISSING)
        else:
            return _MISSING
        if current is _MISSING:
            return _MISSING
    return current


def _equals(actual: Any, expected: Any) -> bool:
    if isinstance(expected, str):
        return isinstance(actual, str) and actual == expected
    if isinstance(expected, bool) or isinstance(actual, bool):
        return actual is expected
    return actual == expected

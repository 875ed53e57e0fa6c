"""Helpers shared by rules."""

import re
from typing import Optional

from engine.context import RuleContext
from engine.tree import Node, NodeKind

_TYPESCRIPT_FILE_RE = re.compile(r"\.tsx?$", re.IGNORECASE)


def is_typescript(file_path: str) -> bool:
    """Check if a file identity names a TypeScript source (.ts / .tsx)."""
    return bool(_TYPESCRIPT_FILE_RE.search(file_path or ""))


def get_name_from_property_name(key: Optional[Node], context: Optional[RuleContext] = None) -> str:
    """Name of a class member key: identifier name, literal value or key source text."""
    if key is None:
        return ""
    if key.kind == NodeKind.Identifier:
        return key.get("name", "")
    if key.kind == NodeKind.Literal:
        return str(key.get("value"))
    if context is not None:
        text = context.get_text(key)
        if text is not None:
            return text
    return ""

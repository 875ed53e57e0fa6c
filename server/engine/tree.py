"""
Syntax tree model consumed by the engine.

The tree is produced by an external parser. ``SyntaxTree.from_estree`` loads
the ESTree JSON shape emitted by typescript-estree (``type``/``range``/``loc``
keys, a ``comments`` array on the program) into immutable ``Node`` objects
with parent back-references.
"""

import bisect
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple
from dataclasses import dataclass

from .types import SourceRange, range_of


class NodeKind(str, Enum):
    """Well-known ESTree node kinds. Trees may carry kinds not listed here."""
    Program = "Program"
    Identifier = "Identifier"
    Literal = "Literal"
    TemplateLiteral = "TemplateLiteral"
    ThisExpression = "ThisExpression"
    CallExpression = "CallExpression"
    NewExpression = "NewExpression"
    MemberExpression = "MemberExpression"
    AssignmentExpression = "AssignmentExpression"
    ExpressionStatement = "ExpressionStatement"
    BlockStatement = "BlockStatement"
    ReturnStatement = "ReturnStatement"
    VariableDeclaration = "VariableDeclaration"
    VariableDeclarator = "VariableDeclarator"
    ObjectPattern = "ObjectPattern"
    ArrayPattern = "ArrayPattern"
    Property = "Property"
    FunctionDeclaration = "FunctionDeclaration"
    FunctionExpression = "FunctionExpression"
    ArrowFunctionExpression = "ArrowFunctionExpression"
    ClassDeclaration = "ClassDeclaration"
    ClassExpression = "ClassExpression"
    ClassBody = "ClassBody"
    MethodDefinition = "MethodDefinition"
    ClassProperty = "ClassProperty"
    PropertyDefinition = "PropertyDefinition"
    ImportDeclaration = "ImportDeclaration"
    ImportSpecifier = "ImportSpecifier"
    ImportDefaultSpecifier = "ImportDefaultSpecifier"
    ImportNamespaceSpecifier = "ImportNamespaceSpecifier"
    ExportNamedDeclaration = "ExportNamedDeclaration"
    TSImportEqualsDeclaration = "TSImportEqualsDeclaration"
    TSExternalModuleReference = "TSExternalModuleReference"


# ESTree keys that describe the node itself rather than its fields
_RESERVED_KEYS = frozenset({"type", "range", "loc", "start", "end", "parent", "comments", "tokens"})


class Node:
    """An immutable syntax tree node.

    Kind-specific fields are readable as attributes (``node.init``,
    ``node.id.name``) or with ``node.get(name)`` for optional ones.

    ``node.kind`` is the ESTree ``type``. Nodes that carry an ESTree field
    named ``kind`` (MethodDefinition, VariableDeclaration, Property) expose it
    only as ``node.get("kind")``, e.g. ``"method"`` or ``"const"``.
    """

    __slots__ = ("kind", "range", "fields", "parent", "index_in_parent", "_children")

    def __init__(self, kind: str, range: SourceRange, fields: Optional[Mapping[str, Any]] = None):
        self.kind = kind
        self.range = range
        self.fields = MappingProxyType(dict(fields or {}))
        self.parent: Optional["Node"] = None
        self.index_in_parent: Optional[int] = None
        self._children: Optional[Tuple["Node", ...]] = None

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            fields = object.__getattribute__(self, "fields")
        except AttributeError:
            raise AttributeError(name) from None
        if name in fields:
            return fields[name]
        raise AttributeError(f"{self.kind} node has no field {name!r}")

    def __repr__(self) -> str:
        return f"Node({self.kind}, {self.range.start}-{self.range.end})"

    @property
    def type(self) -> str:
        """ESTree spelling of ``kind``."""
        return self.kind

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @property
    def children(self) -> Tuple["Node", ...]:
        """Child nodes in field order."""
        if self._children is None:
            children: List[Node] = []
            for value in self.fields.values():
                if isinstance(value, Node):
                    children.append(value)
                elif isinstance(value, (list, tuple)):
                    children.extend(item for item in value if isinstance(item, Node))
            self._children = tuple(children)
        return self._children

    @property
    def previous_sibling(self) -> Optional["Node"]:
        if self.parent is None or not self.index_in_parent:
            return None
        return self.parent.children[self.index_in_parent - 1]

    @property
    def next_sibling(self) -> Optional["Node"]:
        if self.parent is None or self.index_in_parent is None:
            return None
        siblings = self.parent.children
        if self.index_in_parent + 1 < len(siblings):
            return siblings[self.index_in_parent + 1]
        return None


@dataclass(frozen=True)
class Comment:
    """A line or block comment. Comments are not tree children."""
    kind: Literal["Line", "Block"]
    value: str
    range: SourceRange

    @property
    def type(self) -> str:
        return self.kind


class SyntaxTree:
    """An immutable syntax tree for one source file."""

    def __init__(self, root: Node, comments: Optional[List[Comment]] = None,
                 text: Optional[str] = None, file_path: str = "<input>"):
        self.root = root
        self.comments: Tuple[Comment, ...] = tuple(sorted(comments or (), key=lambda c: c.range.start))
        self.text = text
        self.file_path = file_path
        self._comment_starts = [c.range.start for c in self.comments]
        self.node_count = self._link()

    def _link(self) -> int:
        """Set parent back-references; returns the number of nodes."""
        count = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            count += 1
            for index, child in enumerate(node.children):
                child.parent = node
                child.index_in_parent = index
                stack.append(child)
        return count

    def walk(self, start: Optional[Node] = None) -> Iterator[Node]:
        """Iterate nodes in depth-first pre-order."""
        stack = [start or self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    # === Comment lookup ===

    def comments_before(self, target: Any) -> List[Comment]:
        """Comments immediately preceding ``target``, in source order.

        Only whitespace may separate the comments from each other and from the
        target. Without source text the gaps cannot be checked, so every
        comment between the previous sibling (or the parent start) and the
        target is returned.
        """
        target_range = range_of(target)
        low = self._lower_bound(target)
        found: List[Comment] = []
        cursor = target_range.start
        index = bisect.bisect_left(self._comment_starts, target_range.start) - 1
        while index >= 0:
            comment = self.comments[index]
            if comment.range.end > cursor or comment.range.start < low:
                break
            if not self._is_blank(comment.range.end, cursor):
                break
            found.append(comment)
            cursor = comment.range.start
            index -= 1
        found.reverse()
        return found

    def comments_after(self, target: Any) -> List[Comment]:
        """Comments immediately following ``target``, in source order."""
        target_range = range_of(target)
        high = self._upper_bound(target)
        found: List[Comment] = []
        cursor = target_range.end
        index = bisect.bisect_left(self._comment_starts, target_range.end)
        while index < len(self.comments):
            comment = self.comments[index]
            if high is not None and comment.range.end > high:
                break
            if not self._is_blank(cursor, comment.range.start):
                break
            found.append(comment)
            cursor = comment.range.end
            index += 1
        return found

    def _lower_bound(self, target: Any) -> int:
        """End of the closest code known to precede ``target``."""
        current = target
        while isinstance(current, Node):
            previous = current.previous_sibling
            if previous is not None:
                return previous.range.end
            parent = current.parent
            if parent is None:
                break
            # The parent opens with a token of its own
            if parent.range.start < current.range.start:
                return parent.range.start
            current = parent
        return 0

    def _upper_bound(self, target: Any) -> Optional[int]:
        """Start of the closest code known to follow ``target``."""
        current = target
        while isinstance(current, Node):
            following = current.next_sibling
            if following is not None:
                return following.range.start
            parent = current.parent
            if parent is None:
                break
            if parent.range.end > current.range.end:
                return parent.range.end
            current = parent
        return None

    def _is_blank(self, start: int, end: int) -> bool:
        if self.text is None:
            return True
        return not self.text[start:end].strip()

    # === Source text ===

    def get_text(self, target: Any) -> Optional[str]:
        if self.text is None:
            return None
        r = range_of(target)
        return self.text[r.start:r.end]

    def position_of(self, offset: int) -> Optional[Tuple[int, int]]:
        """Convert an offset to (line, col): 1-based line, 0-based column."""
        if self.text is None:
            return None
        offset = min(max(offset, 0), len(self.text))
        line = self.text.count("\n", 0, offset) + 1
        last_newline = self.text.rfind("\n", 0, offset)
        col = offset if last_newline == -1 else offset - last_newline - 1
        return line, col

    # === Loading ===

    @classmethod
    def from_estree(cls, data: Dict[str, Any], file_path: str = "<input>",
                    text: Optional[str] = None) -> "SyntaxTree":
        """Build a tree from an ESTree program object."""
        root = _convert_node(data)
        comments = [_convert_comment(c) for c in data.get("comments", ())]
        return cls(root, comments=comments, text=text, file_path=file_path)


def _convert_range(data: Dict[str, Any]) -> SourceRange:
    if "range" in data:
        start, end = data["range"]
    elif "start" in data and "end" in data and isinstance(data["start"], int):
        start, end = data["start"], data["end"]
    else:
        raise ValueError(f"ESTree {data.get('type', 'object')} has no range")

    lines = None
    loc = data.get("loc")
    if isinstance(loc, dict) and "start" in loc and "end" in loc:
        lines = (loc["start"]["line"], loc["start"]["column"],
                 loc["end"]["line"], loc["end"]["column"])
    return SourceRange(start, end, lines)


def _convert_value(value: Any) -> Any:
    if isinstance(value, dict) and "type" in value:
        return _convert_node(value)
    if isinstance(value, list):
        return tuple(_convert_value(item) for item in value)
    return value


def _convert_node(data: Dict[str, Any]) -> Node:
    fields = {
        key: _convert_value(value)
        for key, value in data.items()
        if key not in _RESERVED_KEYS
    }
    return Node(data["type"], _convert_range(data), fields)


def _convert_comment(data: Dict[str, Any]) -> Comment:
    return Comment(data["type"], data.get("value", ""), _convert_range(data))

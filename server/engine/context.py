"""
Rule context: the capability object handed to a rule's ``create`` factory.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import UnknownMessageId
from .tree import Comment, Node, SyntaxTree
from .types import Diagnostic, Edit, RuleDescriptor, RuleMeta, Severity, SourceRange, range_of

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def format_message(template: str, data: Optional[Dict[str, Any]]) -> str:
    """Substitute {{key}} placeholders; unknown keys are left as written."""
    if not data:
        return template

    def substitute(match):
        key = match.group(1)
        if key in data:
            return str(data[key])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(substitute, template)


class DiagnosticSink:
    """Ordered, append-only collection of diagnostics for one file."""

    def __init__(self):
        self._items: List[Diagnostic] = []

    def append(self, diagnostic: Diagnostic) -> None:
        self._items.append(diagnostic)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._items)


@dataclass
class RuleContext:
    """Context passed to a rule's factory for one file.

    The tree and options are read-only views; ``report`` is the only way a
    rule produces output. ``state`` is the rule's private per-file record.
    """
    rule: RuleDescriptor
    tree: SyntaxTree
    options: List[Any]
    severity: Severity
    sink: DiagnosticSink = field(repr=False)
    state: Any = None

    @property
    def meta(self) -> RuleMeta:
        return self.rule.meta

    @property
    def id(self) -> str:
        return self.rule.meta.id

    @property
    def file_path(self) -> str:
        return self.tree.file_path

    def report(self, target: Union[Node, Comment, SourceRange], message_id: str,
               data: Optional[Dict[str, Any]] = None,
               fix: Optional[Union[Edit, Iterable[Edit]]] = None) -> None:
        """
        Record a diagnostic.

        Args:
            target: Node, comment or range the diagnostic attaches to
            message_id: Key into the rule's ``meta.messages``
            data: Values for the template placeholders
            fix: Edit or edits over disjoint ranges of this file

        Raises:
            UnknownMessageId: message_id is not declared by the rule
        """
        template = self.meta.messages.get(message_id)
        if template is None:
            raise UnknownMessageId(self.id, message_id)

        self.sink.append(Diagnostic(
            rule_id=self.id,
            message_id=message_id,
            message=format_message(template, data),
            severity=self.severity,
            file_path=self.file_path,
            range=range_of(target),
            node_kind=getattr(target, "kind", None),
            data=dict(data) if data else None,
            fix=_normalize_fix(fix),
        ))

    # === Tree queries ===

    def comments_before(self, target: Union[Node, Comment]) -> List[Comment]:
        return self.tree.comments_before(target)

    def comments_after(self, target: Union[Node, Comment]) -> List[Comment]:
        return self.tree.comments_after(target)

    def get_text(self, target: Union[Node, Comment, SourceRange]) -> Optional[str]:
        """Source text of a node, or None when the tree carries no text."""
        return self.tree.get_text(target)

    def ancestors(self, node: Node) -> Iterator[Node]:
        """Parents of ``node`` from the closest outwards."""
        current = node.parent
        while current is not None:
            yield current
            current = current.parent


def _normalize_fix(fix: Optional[Union[Edit, Iterable[Edit]]]) -> Optional[Tuple[Edit, ...]]:
    if fix is None:
        return None
    edits = (fix,) if isinstance(fix, Edit) else tuple(fix)
    for edit in edits:
        if not isinstance(edit, Edit):
            raise TypeError(f"Fix edits must be Edit instances, got {type(edit).__name__}")
    return edits or None

"""
Core types for the rule evaluation engine.

This module provides the shared dataclasses used by the linter, the rule
context and the rules themselves: source ranges, fix edits, diagnostics,
rule metadata and rule descriptors.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union


# Type aliases for clarity
Severity = Literal["info", "warn", "error"]
RuleType = Literal["problem", "suggestion", "layout"]
FileRange = Tuple[int, int, int, int]  # (start_line, start_col, end_line, end_col) 1-based lines, 0-based cols
HandlerMap = Dict[str, Callable[[Any], None]]

SEVERITIES: Tuple[str, ...] = ("info", "warn", "error")


@dataclass(frozen=True)
class SourceRange:
    """Half-open offset range [start, end) into the source text."""
    start: int
    end: int
    lines: Optional[FileRange] = None

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid source range ({self.start}, {self.end})")

    def overlaps(self, other: "SourceRange") -> bool:
        return self.start < other.end and other.start < self.end


def range_of(target: Any) -> SourceRange:
    """Get the source range of a node, comment or range."""
    if isinstance(target, SourceRange):
        return target
    node_range = getattr(target, "range", None)
    if isinstance(node_range, SourceRange):
        return node_range
    raise TypeError(f"Cannot take a source range of {type(target).__name__}")


@dataclass(frozen=True)
class Edit:
    """A single text replacement proposed by a fix."""
    start: int
    end: int
    replacement: str

    @property
    def range(self) -> SourceRange:
        return SourceRange(self.start, self.end)

    @classmethod
    def replace(cls, target: Any, text: str) -> "Edit":
        r = range_of(target)
        return cls(r.start, r.end, text)

    @classmethod
    def insert_before(cls, target: Any, text: str) -> "Edit":
        r = range_of(target)
        return cls(r.start, r.start, text)

    @classmethod
    def insert_after(cls, target: Any, text: str) -> "Edit":
        r = range_of(target)
        return cls(r.end, r.end, text)

    @classmethod
    def remove(cls, target: Any) -> "Edit":
        return cls.replace(target, "")


def has_overlapping_edits(edits: Optional[Tuple[Edit, ...]]) -> bool:
    """Check whether any two edits in a fix cover overlapping text."""
    if not edits:
        return False
    ordered = sorted(edits, key=lambda e: (e.start, e.end))
    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            return True
    return False


@dataclass(frozen=True)
class Diagnostic:
    """One reported finding: location, message, severity and optional fix."""
    rule_id: str
    message_id: str
    message: str
    severity: Severity
    file_path: str
    range: SourceRange
    node_kind: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    fix: Optional[Tuple[Edit, ...]] = None
    engine_error: bool = False

    @property
    def fix_range(self) -> Optional[SourceRange]:
        """Smallest range covering every edit of the fix."""
        if not self.fix:
            return None
        return SourceRange(
            min(edit.start for edit in self.fix),
            max(edit.end for edit in self.fix),
        )

    def has_overlapping_edits(self) -> bool:
        return has_overlapping_edits(self.fix)

    def fix_conflicts_with(self, other: "Diagnostic") -> bool:
        """Check whether applying both fixes would touch the same text."""
        mine, theirs = self.fix_range, other.fix_range
        if mine is None or theirs is None:
            return False
        if mine.overlaps(theirs):
            return True
        # Two insertions at the same offset have no defined order
        return mine.start == mine.end == theirs.start == theirs.end


@dataclass(frozen=True)
class RuleMeta:
    """Declarative metadata of a rule.

    Attributes:
        id: Unique rule name (e.g., "no-this-alias")
        category: Rule category for grouping
        description: Human-readable description
        type: "problem", "suggestion" or "layout"
        default_severity: Severity used when the activation does not override it
        fixable: Whether the rule may attach fixes to its diagnostics
        recommended: False, True or the recommended severity
        messages: Message id -> template with {{placeholder}} slots
        options_schema: JSON schema of the options. A list describes
            positional option groups; a dict describes the whole (variadic)
            options array.
        default_options: Option groups merged under user-supplied options
    """
    id: str
    category: str
    description: str = ""
    type: RuleType = "problem"
    default_severity: Severity = "warn"
    fixable: bool = False
    recommended: Union[bool, str] = False
    messages: Dict[str, str] = None
    options_schema: Union[List[Dict[str, Any]], Dict[str, Any]] = None
    default_options: List[Any] = None

    def __post_init__(self):
        if self.messages is None:
            object.__setattr__(self, 'messages', {})
        if self.options_schema is None:
            object.__setattr__(self, 'options_schema', [])
        if self.default_options is None:
            object.__setattr__(self, 'default_options', [])


@dataclass(frozen=True)
class RuleDescriptor:
    """The unit a rule author supplies to the engine.

    ``create`` receives a RuleContext and returns a HandlerMap. It runs once
    per file; ``new_state`` (optional) builds the rule's private per-file
    state record, exposed to handlers as ``context.state``.
    """
    meta: RuleMeta
    create: Callable[["RuleContext"], HandlerMap]
    new_state: Optional[Callable[[], Any]] = None

    @property
    def id(self) -> str:
        return self.meta.id


@dataclass
class Activation:
    """A rule switched on for one file with its supplied options."""
    rule: RuleDescriptor
    options: List[Any] = field(default_factory=list)
    severity: Optional[Severity] = None

    @property
    def effective_severity(self) -> Severity:
        return self.severity or self.rule.meta.default_severity

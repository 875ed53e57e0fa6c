"""
Single-pass rule evaluation.

``lint`` builds one context and handler map per activated rule, indexes the
handlers by node kind, walks the tree once and returns the diagnostics in
report order. A failing rule is isolated: its options error, factory crash or
handler crash becomes a diagnostic (or a skipped activation) and every other
rule keeps running.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .context import DiagnosticSink, RuleContext
from .errors import RULE_CRASHED, UNKNOWN_MESSAGE_ID, OptionsShapeError, SelectorError, UnknownMessageId
from .options import resolve_options
from .selectors import Selector, parse_selector
from .tree import Node, SyntaxTree
from .types import Activation, Diagnostic, RuleDescriptor

logger = logging.getLogger(__name__)


@dataclass
class LintResult:
    """Outcome of evaluating one file."""
    file_path: str
    diagnostics: List[Diagnostic]
    options_errors: List[OptionsShapeError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == "error")


@dataclass(frozen=True)
class HandlerFailure:
    """Result of a handler invocation that raised."""
    rule_id: str
    error: Exception
    node: Optional[Node] = None


@dataclass(frozen=True)
class _Entry:
    order: int
    seq: int
    rule_id: str
    selector: Selector
    handler: Callable[[Node], None]


class HandlerIndex:
    """Node kind -> handlers, in activation order. Built once per file."""

    def __init__(self):
        self._by_kind: Dict[str, List[_Entry]] = defaultdict(list)
        self._wildcard: List[_Entry] = []
        self._merged: Dict[str, Tuple[_Entry, ...]] = {}

    def add(self, entry: _Entry) -> None:
        if entry.selector.is_wildcard:
            self._wildcard.append(entry)
        else:
            self._by_kind[entry.selector.kind].append(entry)
        self._merged.clear()

    def lookup(self, kind: str) -> Tuple[_Entry, ...]:
        merged = self._merged.get(kind)
        if merged is None:
            entries = self._by_kind.get(kind, []) + self._wildcard
            merged = tuple(sorted(entries, key=lambda e: (e.order, e.seq)))
            self._merged[kind] = merged
        return merged

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_kind.values()) + len(self._wildcard)


def lint(tree: SyntaxTree, activations: Sequence[Activation]) -> LintResult:
    """
    Evaluate activated rules over one tree.

    Args:
        tree: The file's syntax tree
        activations: Rules with their supplied options, in activation order

    Returns:
        LintResult with diagnostics in report order and the options errors
        of the activations that were skipped.
    """
    sink = DiagnosticSink()
    enter_index, exit_index = HandlerIndex(), HandlerIndex()
    options_errors: List[OptionsShapeError] = []

    for order, activation in enumerate(activations):
        rule = activation.rule
        try:
            options = resolve_options(
                rule.meta.default_options, activation.options, rule.meta.options_schema, rule.id
            )
        except OptionsShapeError as e:
            logger.warning(f"Skipping rule '{rule.id}' for {tree.file_path}: {e}")
            options_errors.append(e)
            continue
        except Exception as e:
            # Malformed rule schema
            sink.append(_failure_diagnostic(HandlerFailure(rule.id, e), tree))
            continue

        entries, failure = _activate(rule, order, tree, options, activation, sink)
        if failure is not None:
            sink.append(_failure_diagnostic(failure, tree))
            continue
        for entry in entries:
            (exit_index if entry.selector.is_exit else enter_index).add(entry)

    logger.debug(
        f"Indexed {len(enter_index)} enter / {len(exit_index)} exit handlers "
        f"for {len(activations)} rules on {tree.file_path}"
    )

    _traverse(tree, enter_index, exit_index, sink)

    logger.debug(f"{tree.file_path}: {tree.node_count} nodes, {len(sink)} diagnostics")
    return LintResult(tree.file_path, list(sink.diagnostics), options_errors)


def evaluate(tree: SyntaxTree, activations: Sequence[Activation]) -> List[Diagnostic]:
    """Evaluate activated rules over one tree and return the diagnostics."""
    return lint(tree, activations).diagnostics


def _activate(rule: RuleDescriptor, order: int, tree: SyntaxTree, options, activation: Activation,
              sink: DiagnosticSink) -> Tuple[List[_Entry], Optional[HandlerFailure]]:
    """Run the rule's factory and parse its selectors."""
    try:
        state = rule.new_state() if rule.new_state is not None else None
        context = RuleContext(rule, tree, options, activation.effective_severity, sink, state)
        handlers = rule.create(context) or {}
        entries = []
        for seq, (key, handler) in enumerate(handlers.items()):
            if not callable(handler):
                raise SelectorError(key, f"handler is not callable ({type(handler).__name__})")
            entries.append(_Entry(order, seq, rule.id, parse_selector(key), handler))
    except Exception as e:
        return [], HandlerFailure(rule.id, e)
    return entries, None


def _traverse(tree: SyntaxTree, enter_index: HandlerIndex, exit_index: HandlerIndex,
              sink: DiagnosticSink) -> None:
    """Depth-first walk: enter handlers in pre-order, exit handlers in post-order."""
    track_exit = len(exit_index) > 0
    stack: List[Tuple[Node, bool]] = [(tree.root, False)]
    while stack:
        node, exiting = stack.pop()
        if exiting:
            _dispatch(exit_index.lookup(node.kind), node, tree, sink)
            continue

        _dispatch(enter_index.lookup(node.kind), node, tree, sink)
        if track_exit:
            stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))


def _dispatch(entries: Tuple[_Entry, ...], node: Node, tree: SyntaxTree, sink: DiagnosticSink) -> None:
    for entry in entries:
        if entry.selector.guards and not entry.selector.matches(node):
            continue
        failure = _invoke(entry, node)
        if failure is not None:
            sink.append(_failure_diagnostic(failure, tree))


def _invoke(entry: _Entry, node: Node) -> Optional[HandlerFailure]:
    try:
        entry.handler(node)
    except Exception as e:
        return HandlerFailure(entry.rule_id, e, node)
    return None


def _failure_diagnostic(failure: HandlerFailure, tree: SyntaxTree) -> Diagnostic:
    """Convert a rule failure into a diagnostic attributed to that rule."""
    error = failure.error
    node = failure.node
    where = f"{node.kind} in {tree.file_path}" if node is not None else tree.file_path

    if isinstance(error, UnknownMessageId):
        message_id = UNKNOWN_MESSAGE_ID
        message = f"{error} while visiting {where}"
    else:
        message_id = RULE_CRASHED
        message = f"Rule '{failure.rule_id}' crashed while visiting {where}: {type(error).__name__}: {error}"

    logger.warning(message)
    logger.debug(f"Traceback for rule '{failure.rule_id}'", exc_info=error)

    return Diagnostic(
        rule_id=failure.rule_id,
        message_id=message_id,
        message=message,
        severity="error",
        file_path=tree.file_path,
        range=node.range if node is not None else tree.root.range,
        node_kind=node.kind if node is not None else None,
        data={"error": type(error).__name__, "detail": str(error)},
        engine_error=True,
    )

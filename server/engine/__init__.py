"""
Rule evaluation engine.

This package provides the shared core every lint rule plugs into: rule
descriptors, options resolution, single-pass traversal and diagnostics.
"""

from .types import (
    Activation, Diagnostic, Edit, FileRange, HandlerMap, RuleDescriptor, RuleMeta,
    Severity, SourceRange, has_overlapping_edits
)

from .tree import Comment, Node, NodeKind, SyntaxTree

from .errors import (
    ConfigError, EngineError, OptionsShapeError, SelectorError, UnknownMessageId,
    UnknownRuleError, RULE_CRASHED, UNKNOWN_MESSAGE_ID
)

from .options import deep_merge, resolve_options

from .context import DiagnosticSink, RuleContext

from .linter import LintResult, evaluate, lint

from .registry import (
    register_rule, get_rule, get_all_rules, get_rule_ids, discover_rules, clear, get_registry
)

from .config import (
    EngineConfig, load_config, save_config, find_config_file, build_activations
)

__all__ = [
    # Types
    "Activation", "Diagnostic", "Edit", "FileRange", "HandlerMap", "RuleDescriptor", "RuleMeta",
    "Severity", "SourceRange", "has_overlapping_edits",

    # Tree
    "Comment", "Node", "NodeKind", "SyntaxTree",

    # Errors
    "ConfigError", "EngineError", "OptionsShapeError", "SelectorError", "UnknownMessageId",
    "UnknownRuleError", "RULE_CRASHED", "UNKNOWN_MESSAGE_ID",

    # Evaluation
    "deep_merge", "resolve_options", "DiagnosticSink", "RuleContext", "LintResult", "evaluate", "lint",

    # Registry
    "register_rule", "get_rule", "get_all_rules", "get_rule_ids", "discover_rules", "clear", "get_registry",

    # Config
    "EngineConfig", "load_config", "save_config", "find_config_file", "build_activations"
]

"""
JSON schema for diagnostic output.

This module converts diagnostics to plain dictionaries for downstream
reporters and fixers, and validates such output with jsonschema.
"""

from typing import Any, Dict, List, Optional

import jsonschema

from .tree import SyntaxTree
from .types import Diagnostic

# Current protocol version
PROTOCOL_VERSION = "1"
ENGINE_VERSION = "0.1.0"

_LINE_RANGE_SCHEMA = {
    "type": "object",
    "properties": {
        "startLine": {"type": "integer", "minimum": 1},
        "startCol": {"type": "integer", "minimum": 0},
        "endLine": {"type": "integer", "minimum": 1},
        "endCol": {"type": "integer", "minimum": 0}
    },
    "required": ["startLine", "startCol", "endLine", "endCol"],
    "additionalProperties": False,
    "description": "Line/column range (1-based lines, 0-based columns)"
}

# JSON Schema for a single Diagnostic
DIAGNOSTIC_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "rule_id": {"type": "string"},
        "message_id": {"type": "string"},
        "message": {"type": "string"},
        "severity": {"type": "string", "enum": ["info", "warn", "error"]},
        "file_path": {"type": "string"},
        "start": {"type": "integer", "minimum": 0},
        "end": {"type": "integer", "minimum": 0},
        "range": _LINE_RANGE_SCHEMA,
        "node_kind": {"type": ["string", "null"]},
        "data": {"type": ["object", "null"]},
        "engine_error": {"type": "boolean"},
        "fix": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "properties": {
                    "start": {"type": "integer", "minimum": 0},
                    "end": {"type": "integer", "minimum": 0},
                    "replacement": {"type": "string"}
                },
                "required": ["start", "end", "replacement"],
                "additionalProperties": False
            },
            "description": "Edits over disjoint ranges of the file"
        }
    },
    "required": ["rule_id", "message_id", "message", "severity", "file_path", "start", "end"],
    "additionalProperties": False
}

# JSON Schema for the full runner output
RUNNER_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "protocol": {"type": "string"},
        "engine_version": {"type": "string"},
        "files_scanned": {"type": "integer", "minimum": 0},
        "rules_run": {"type": "integer", "minimum": 0},
        "diagnostics": {"type": "array", "items": DIAGNOSTIC_JSON_SCHEMA},
        "skipped": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "file_path": {"type": "string"},
                    "rule_id": {"type": "string"},
                    "reason": {"type": "string"}
                },
                "required": ["file_path", "rule_id", "reason"],
                "additionalProperties": False
            }
        }
    },
    "required": ["protocol", "engine_version", "files_scanned", "rules_run", "diagnostics"],
    "additionalProperties": False
}


def diagnostic_to_dict(diagnostic: Diagnostic, tree: Optional[SyntaxTree] = None) -> Dict[str, Any]:
    """
    Convert a diagnostic to a JSON-ready dictionary.

    Line/column information comes from the range itself when the producer
    supplied it, otherwise from the tree's source text when available.
    """
    result: Dict[str, Any] = {
        "rule_id": diagnostic.rule_id,
        "message_id": diagnostic.message_id,
        "message": diagnostic.message,
        "severity": diagnostic.severity,
        "file_path": diagnostic.file_path,
        "start": diagnostic.range.start,
        "end": diagnostic.range.end,
        "node_kind": diagnostic.node_kind,
        "data": diagnostic.data,
        "engine_error": diagnostic.engine_error,
        "fix": [
            {"start": e.start, "end": e.end, "replacement": e.replacement}
            for e in diagnostic.fix
        ] if diagnostic.fix else None,
    }

    line_range = _line_range(diagnostic, tree)
    if line_range is not None:
        result["range"] = line_range
    return result


def _line_range(diagnostic: Diagnostic, tree: Optional[SyntaxTree]) -> Optional[Dict[str, int]]:
    if diagnostic.range.lines is not None:
        start_line, start_col, end_line, end_col = diagnostic.range.lines
    elif tree is not None and tree.text is not None:
        start_line, start_col = tree.position_of(diagnostic.range.start)
        end_line, end_col = tree.position_of(diagnostic.range.end)
    else:
        return None
    return {"startLine": start_line, "startCol": start_col, "endLine": end_line, "endCol": end_col}


def validate_diagnostics(diagnostics: List[Dict[str, Any]]) -> List[str]:
    """
    Validate a list of diagnostic dictionaries against the JSON schema.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    for i, diagnostic in enumerate(diagnostics):
        try:
            jsonschema.validate(diagnostic, DIAGNOSTIC_JSON_SCHEMA)
        except jsonschema.ValidationError as e:
            errors.append(f"Diagnostic {i}: {e.message}")
    return errors


def validate_runner_output(output: Dict[str, Any]) -> List[str]:
    """
    Validate runner output against the schema.

    Returns:
        List of validation errors (empty if valid)
    """
    try:
        jsonschema.validate(output, RUNNER_OUTPUT_SCHEMA)
    except jsonschema.ValidationError as e:
        return [f"Output validation: {e.message}"]
    return []

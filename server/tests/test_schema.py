"""Tests for diagnostic JSON output and its schema."""

from engine.schema import (
    ENGINE_VERSION, PROTOCOL_VERSION, diagnostic_to_dict, validate_diagnostics, validate_runner_output
)
from engine.types import Diagnostic, Edit, SourceRange

from helpers import REQUIRE_TEXT, make_tree, require_program


def _diagnostic(**overrides):
    values = dict(
        rule_id="no-var-requires",
        message_id="noVarReqs",
        message="Require statement not part of import statement.",
        severity="error",
        file_path="a.ts",
        range=SourceRange(10, 22),
        node_kind="CallExpression",
    )
    values.update(overrides)
    return Diagnostic(**values)


class TestDiagnosticToDict:
    """Conversion to plain dictionaries."""

    def test_basic_fields(self):
        result = diagnostic_to_dict(_diagnostic())
        assert result["rule_id"] == "no-var-requires"
        assert result["start"] == 10
        assert result["end"] == 22
        assert result["fix"] is None
        assert result["engine_error"] is False
        assert "range" not in result

    def test_line_range_from_text(self):
        tree = make_tree(require_program(), text=REQUIRE_TEXT)
        result = diagnostic_to_dict(_diagnostic(), tree)
        assert result["range"] == {"startLine": 1, "startCol": 10, "endLine": 1, "endCol": 22}

    def test_line_range_from_loc(self):
        diagnostic = _diagnostic(range=SourceRange(10, 22, (3, 4, 3, 16)))
        assert diagnostic_to_dict(diagnostic)["range"] == {"startLine": 3, "startCol": 4, "endLine": 3, "endCol": 16}

    def test_fix_edits(self):
        diagnostic = _diagnostic(fix=(Edit(10, 17, "load"),))
        assert diagnostic_to_dict(diagnostic)["fix"] == [{"start": 10, "end": 17, "replacement": "load"}]


class TestValidation:
    """Schema validation of output documents."""

    def test_valid_diagnostics(self):
        tree = make_tree(require_program(), text=REQUIRE_TEXT)
        diagnostics = [
            diagnostic_to_dict(_diagnostic(), tree),
            diagnostic_to_dict(_diagnostic(data={"name": "foo"}, fix=(Edit(0, 1, ""),))),
        ]
        assert validate_diagnostics(diagnostics) == []

    def test_invalid_severity(self):
        bad = diagnostic_to_dict(_diagnostic())
        bad["severity"] = "fatal"
        [error] = validate_diagnostics([bad])
        assert error.startswith("Diagnostic 0:")

    def test_unknown_key(self):
        bad = diagnostic_to_dict(_diagnostic())
        bad["extra"] = True
        assert validate_diagnostics([bad])

    def test_runner_output(self):
        output = {
            "protocol": PROTOCOL_VERSION,
            "engine_version": ENGINE_VERSION,
            "files_scanned": 1,
            "rules_run": 4,
            "diagnostics": [diagnostic_to_dict(_diagnostic())],
            "skipped": [],
        }
        assert validate_runner_output(output) == []

        del output["files_scanned"]
        assert validate_runner_output(output)

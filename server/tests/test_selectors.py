"""Tests for handler selector parsing and matching."""

import pytest

from engine.errors import SelectorError
from engine.selectors import Guard, parse_selector

from helpers import destructure_program, make_tree, require_program, self_alias_program


def _declarator(data):
    return make_tree(data).root.body[0].declarations[0]


class TestParseSelector:
    """Selector grammar."""

    def test_plain_kind(self):
        selector = parse_selector("CallExpression")
        assert selector.kind == "CallExpression"
        assert selector.guards == ()
        assert not selector.is_exit
        assert not selector.is_wildcard

    def test_exit_suffix(self):
        selector = parse_selector("ClassBody:exit")
        assert selector.kind == "ClassBody"
        assert selector.is_exit

    def test_wildcard(self):
        assert parse_selector("*").is_wildcard
        assert parse_selector("*:exit").is_exit

    def test_guard_with_string(self):
        selector = parse_selector("VariableDeclarator[init.type='ThisExpression']")
        assert selector.guards == (Guard(("init", "type"), "=", "ThisExpression"),)

    def test_guard_literals(self):
        selector = parse_selector('MethodDefinition[kind="constructor"][static=false][computed!=true][value]')
        assert [g.value for g in selector.guards] == ["constructor", False, True, None]
        assert [g.op for g in selector.guards] == ["=", "=", "!=", None]

    def test_guard_numbers_and_barewords(self):
        selector = parse_selector("Literal[value=42][raw=answer]")
        assert selector.guards[0].value == 42
        assert selector.guards[1].value == "answer"

    def test_surrounding_whitespace(self):
        assert parse_selector("  Program  ").kind == "Program"

    @pytest.mark.parametrize("raw", ["", "   ", "[name='x']", "Call Expression", "Program[", "Program[name=]", "Program:enter"])
    def test_malformed(self, raw):
        with pytest.raises(SelectorError):
            parse_selector(raw)


class TestMatching:
    """Guards evaluated against nodes."""

    def test_kind_must_match(self):
        declarator = _declarator(self_alias_program())
        assert parse_selector("VariableDeclarator").matches(declarator)
        assert not parse_selector("CallExpression").matches(declarator)
        assert parse_selector("*").matches(declarator)

    def test_nested_type_guard(self):
        selector = parse_selector("VariableDeclarator[init.type='ThisExpression']")
        assert selector.matches(_declarator(self_alias_program()))
        assert selector.matches(_declarator(destructure_program()))
        assert not selector.matches(_declarator(require_program()))

    def test_field_value_guard(self):
        call = _declarator(require_program()).init
        assert parse_selector("CallExpression[callee.name='require']").matches(call)
        assert not parse_selector("CallExpression[callee.name='define']").matches(call)
        assert parse_selector("CallExpression[callee.name!='define']").matches(call)

    def test_presence_guard(self):
        declarator = _declarator(self_alias_program())
        assert parse_selector("VariableDeclarator[init]").matches(declarator)
        assert not parse_selector("VariableDeclarator[definite]").matches(declarator)

    def test_missing_path_never_equals(self):
        declarator = _declarator(self_alias_program())
        assert not parse_selector("VariableDeclarator[id.missing.deeper='x']").matches(declarator)
        assert parse_selector("VariableDeclarator[id.missing!='x']").matches(declarator)

    def test_boolean_guard(self):
        prop = _declarator(destructure_program()).id.properties[0]
        assert parse_selector("Property[shorthand=true]").matches(prop)
        assert not parse_selector("Property[computed=true]").matches(prop)
        # strings never equal booleans
        assert not parse_selector("Property[shorthand='true']").matches(prop)

"""Tests for the syntax tree model."""

import pytest

from engine.tree import Comment, Node, NodeKind, SyntaxTree
from engine.types import SourceRange

from helpers import (
    CLASS_TEXT, REQUIRE_TEXT, class_program, comment, ident, make_tree, node, program, require_program
)


class TestFromEstree:
    """Loading ESTree dictionaries."""

    def setup_method(self):
        self.tree = make_tree(require_program(), text=REQUIRE_TEXT)

    def test_root_and_kinds(self):
        root = self.tree.root
        assert root.kind == NodeKind.Program
        assert root.type == "Program"
        assert root.range == SourceRange(0, 23)

    def test_fields_are_attributes(self):
        declarator = self.tree.root.body[0].declarations[0]
        assert declarator.kind == "VariableDeclarator"
        assert declarator.id.name == "x"
        assert declarator.init.callee.name == "require"
        assert declarator.init.arguments[0].value == "y"

    def test_missing_field(self):
        declarator = self.tree.root.body[0].declarations[0]
        assert declarator.get("accessibility") is None
        with pytest.raises(AttributeError):
            declarator.accessibility

    def test_parent_links(self):
        call = self.tree.root.body[0].declarations[0].init
        assert call.parent.kind == "VariableDeclarator"
        assert call.parent.parent.parent is self.tree.root
        assert self.tree.root.parent is None

    def test_children_in_field_order(self):
        call = self.tree.root.body[0].declarations[0].init
        assert [c.kind for c in call.children] == ["Identifier", "Literal"]
        assert call.children[1].previous_sibling is call.children[0]
        assert call.children[0].next_sibling is call.children[1]
        assert call.children[1].next_sibling is None
        assert call.children[0].previous_sibling is None

    def test_node_count_and_walk_preorder(self):
        kinds = [n.kind for n in self.tree.walk()]
        assert kinds == [
            "Program", "VariableDeclaration", "VariableDeclarator", "Identifier",
            "CallExpression", "Identifier", "Literal",
        ]
        assert self.tree.node_count == 7

    def test_loc_becomes_line_range(self):
        data = node("Program", 0, 1, body=[])
        data["loc"] = {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 1}}
        tree = SyntaxTree.from_estree(data)
        assert tree.root.range.lines == (1, 0, 1, 1)

    def test_acorn_style_offsets(self):
        tree = SyntaxTree.from_estree({"type": "Program", "start": 0, "end": 5, "body": []})
        assert tree.root.range == SourceRange(0, 5)

    def test_missing_range_raises(self):
        with pytest.raises(ValueError):
            SyntaxTree.from_estree({"type": "Program", "body": []})

    def test_plain_objects_stay_values(self):
        regex = node("Literal", 0, 5, value=None, regex={"pattern": "a", "flags": "g"})
        tree = SyntaxTree.from_estree(program([regex], 0, 5))
        literal = tree.root.body[0]
        assert literal.regex == {"pattern": "a", "flags": "g"}
        assert literal.children == ()

    def test_estree_kind_field(self):
        declaration = self.tree.root.body[0]
        assert declaration.kind == "VariableDeclaration"
        assert declaration.get("kind") == "const"

        method = make_tree(class_program()).root.body[0].body.body[0]
        assert method.kind == "MethodDefinition"
        assert method.get("kind") == "method"

    def test_fields_are_read_only(self):
        with pytest.raises(TypeError):
            self.tree.root.fields["body"] = ()


class TestSourceText:
    """Text slices and offset conversion."""

    def test_get_text(self):
        tree = make_tree(class_program(), text=CLASS_TEXT)
        method = tree.root.body[0].body.body[0]
        assert tree.get_text(method) == "foo() {}"

    def test_get_text_without_source(self):
        tree = make_tree(class_program())
        assert tree.get_text(tree.root) is None
        assert tree.position_of(3) is None

    def test_position_of(self):
        tree = make_tree(program([], 0, 7), text="ab\ncdef")
        assert tree.position_of(0) == (1, 0)
        assert tree.position_of(4) == (2, 1)
        assert tree.position_of(100) == (2, 4)


class TestComments:
    """Comment lookup around nodes."""

    def _tree(self, text, comments, body_start, body_end, with_text=True):
        statement = node("ExpressionStatement", body_start, body_end,
                         expression=ident("x", body_start))
        data = program([statement], body_start, body_end, comments=comments)
        return make_tree(data, text=text if with_text else None)

    def test_comments_before_program(self):
        text = "// a\n/* b */\nx;"
        tree = self._tree(text, [comment("Line", " a", 0, 4), comment("Block", " b ", 5, 12)], 13, 15)
        found = tree.comments_before(tree.root)
        assert [c.value for c in found] == [" a", " b "]
        assert all(isinstance(c, Comment) for c in found)

    def test_code_between_stops_lookup(self):
        text = "// a\ny;\n// b\nx;"
        statement_y = node("ExpressionStatement", 5, 7, expression=ident("y", 5))
        statement_x = node("ExpressionStatement", 13, 15, expression=ident("x", 13))
        data = program([statement_y, statement_x], 0, 15,
                       comments=[comment("Line", " a", 0, 4), comment("Line", " b", 8, 12)])
        tree = make_tree(data, text=text)
        x = tree.root.body[1]
        assert [c.value for c in tree.comments_before(x)] == [" b"]

    def test_comments_after(self):
        text = "x; // trailing\n"
        tree = self._tree(text, [comment("Line", " trailing", 3, 14)], 0, 2)
        statement = tree.root.body[0]
        assert [c.value for c in tree.comments_after(statement)] == [" trailing"]

    def test_previous_sibling_bounds_lookup_without_text(self):
        statement_y = node("ExpressionStatement", 0, 2, expression=ident("y", 0))
        statement_x = node("ExpressionStatement", 10, 12, expression=ident("x", 10))
        data = program([statement_y, statement_x], 0, 12,
                       comments=[comment("Line", " inside y", 1, 2), comment("Block", " b ", 3, 9)])
        tree = make_tree(data)
        assert [c.value for c in tree.comments_before(tree.root.body[1])] == [" b "]

    def test_no_comments(self):
        tree = make_tree(class_program(), text=CLASS_TEXT)
        assert tree.comments_before(tree.root) == []
        assert tree.comments_after(tree.root) == []


class TestNode:
    """Direct construction."""

    def test_manual_construction(self):
        child = Node("Identifier", SourceRange(0, 1), {"name": "a"})
        parent = Node("ExpressionStatement", SourceRange(0, 2), {"expression": child})
        tree = SyntaxTree(Node("Program", SourceRange(0, 2), {"body": [parent]}))
        assert child.parent is parent
        assert parent.parent is tree.root
        assert tree.node_count == 3
        assert repr(child) == "Node(Identifier, 0-1)"

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            SourceRange(5, 2)

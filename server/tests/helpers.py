"""Builders for ESTree dictionaries and throwaway rules used across the tests."""

from typing import Any, Callable, Dict, List, Optional

from engine.tree import SyntaxTree
from engine.types import Activation, RuleDescriptor, RuleMeta


def node(node_type: str, start: int, end: int, **fields: Any) -> Dict[str, Any]:
    """An ESTree node dictionary. ``fields`` may include ESTree's own ``kind``."""
    return {"type": node_type, "range": [start, end], **fields}


def ident(name: str, start: int) -> Dict[str, Any]:
    return node("Identifier", start, start + len(name), name=name)


def comment(kind: str, value: str, start: int, end: int) -> Dict[str, Any]:
    return {"type": kind, "value": value, "range": [start, end]}


def program(body: List[Dict[str, Any]], start: int, end: int,
            comments: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    data = node("Program", start, end, body=body, sourceType="module")
    if comments:
        data["comments"] = comments
    return data


def make_tree(data: Dict[str, Any], file_path: str = "file.ts", text: Optional[str] = None) -> SyntaxTree:
    return SyntaxTree.from_estree(data, file_path=file_path, text=text)


def make_rule(rule_id: str, create: Callable, messages: Optional[Dict[str, str]] = None,
              new_state: Optional[Callable] = None, **meta: Any) -> RuleDescriptor:
    """A rule descriptor with a single default message unless given others."""
    if messages is None:
        messages = {"found": "Found {{kind}}."}
    return RuleDescriptor(
        meta=RuleMeta(id=rule_id, category="test", messages=messages, **meta),
        create=create,
        new_state=new_state,
    )


def activate(*rules: RuleDescriptor) -> List[Activation]:
    return [Activation(rule=rule) for rule in rules]


# === Sample programs ===

# let self = this;
SELF_ALIAS_TEXT = "let self = this;"


def self_alias_program(name: str = "self") -> Dict[str, Any]:
    end = 4 + len(name)
    text_end = end + 8  # " = this;"
    return program([
        node("VariableDeclaration", 0, text_end, kind="let", declarations=[
            node("VariableDeclarator", 4, text_end - 1,
                 id=ident(name, 4),
                 init=node("ThisExpression", end + 3, end + 7)),
        ]),
    ], 0, text_end)


# const { a } = this;
DESTRUCTURE_TEXT = "const { a } = this;"


def destructure_program() -> Dict[str, Any]:
    return program([
        node("VariableDeclaration", 0, 19, kind="const", declarations=[
            node("VariableDeclarator", 6, 18,
                 id=node("ObjectPattern", 6, 11, properties=[
                     node("Property", 8, 9, key=ident("a", 8), value=ident("a", 8),
                          kind="init", shorthand=True, computed=False, method=False),
                 ]),
                 init=node("ThisExpression", 14, 18)),
        ]),
    ], 0, 19)


# const x = require('y');
REQUIRE_TEXT = "const x = require('y');"


def require_program() -> Dict[str, Any]:
    return program([
        node("VariableDeclaration", 0, 23, kind="const", declarations=[
            node("VariableDeclarator", 6, 22,
                 id=ident("x", 6),
                 init=node("CallExpression", 10, 22,
                           callee=ident("require", 10),
                           arguments=[node("Literal", 18, 21, value="y", raw="'y'")],
                           optional=False)),
        ]),
    ], 0, 23)


# class A { foo() {} }
CLASS_TEXT = "class A { foo() {} }"


def class_program(accessibility: Optional[str] = None) -> Dict[str, Any]:
    method = node("MethodDefinition", 10, 18,
                  key=ident("foo", 10),
                  value=node("FunctionExpression", 13, 18, params=[],
                             body=node("BlockStatement", 16, 18, body=[])),
                  kind="method", static=False, computed=False)
    if accessibility:
        method["accessibility"] = accessibility
    return program([
        node("ClassDeclaration", 0, 20, id=ident("A", 6),
             body=node("ClassBody", 8, 20, body=[method])),
    ], 0, 20)

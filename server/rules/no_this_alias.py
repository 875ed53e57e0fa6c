"""Rule: no-this-alias

Detects `this` being assigned to a local variable.

Examples:
- const self = this;               # BAD: thisAssignment
- const { props } = this;          # BAD unless allowDestructuring
- const self = this;               # GOOD with allowedNames: ["self"]
- const handler = () => this.x;    # GOOD: arrow functions keep `this`

Options:
- allowDestructuring (bool, default false): allow `const { a } = this`
- allowedNames (list of str, default []): identifier aliases to accept.
  Names only apply to plain identifier aliases, never to destructuring.
"""

from engine.context import RuleContext
from engine.tree import NodeKind
from engine.types import HandlerMap, RuleDescriptor, RuleMeta

META = RuleMeta(
    id="no-this-alias",
    category="Best Practices",
    description="Disallow aliasing `this`",
    type="suggestion",
    default_severity="warn",
    messages={
        "thisAssignment": "Unexpected aliasing of 'this' to local variable.",
        "thisDestructure": "Unexpected aliasing of members of 'this' to local variables.",
    },
    options_schema=[
        {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "allowDestructuring": {"type": "boolean"},
                "allowedNames": {
                    "type": "array",
                    "items": {"type": "string"},
                },
            },
        }
    ],
    default_options=[
        {
            "allowDestructuring": False,
            "allowedNames": [],
        }
    ],
)


def create(context: RuleContext) -> HandlerMap:
    options = context.options[0]
    allow_destructuring = options["allowDestructuring"]
    allowed_names = set(options["allowedNames"])

    def check_declarator(node):
        target = node.id
        if target.kind == NodeKind.Identifier:
            if target.name not in allowed_names:
                context.report(target, "thisAssignment")
        elif not allow_destructuring:
            context.report(target, "thisDestructure")

    return {"VariableDeclarator[init.type='ThisExpression']": check_declarator}


RULE = RuleDescriptor(meta=META, create=create)
RULES = [RULE]

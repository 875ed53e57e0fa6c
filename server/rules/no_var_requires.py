"""Rule: no-var-requires

Detects `require()` calls whose result is bound to a variable.

Examples:
- const x = require("y");          # BAD: untyped CommonJS import
- import x = require("y");         # GOOD: TypeScript import-equals
- import x from "y";               # GOOD
"""

from engine.context import RuleContext
from engine.tree import NodeKind
from engine.types import HandlerMap, RuleDescriptor, RuleMeta

META = RuleMeta(
    id="no-var-requires",
    category="TypeScript",
    description="Disallows the use of require statements except in import statements",
    type="problem",
    default_severity="error",
    recommended="error",
    messages={
        "noVarReqs": "Require statement not part of import statement.",
    },
)


def create(context: RuleContext) -> HandlerMap:
    def check_call(node):
        parent = node.parent
        if parent is not None and parent.kind == NodeKind.VariableDeclarator:
            context.report(node, "noVarReqs")

    return {"CallExpression[callee.type='Identifier'][callee.name='require']": check_call}


RULE = RuleDescriptor(meta=META, create=create)
RULES = [RULE]

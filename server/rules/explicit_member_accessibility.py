"""Rule: explicit-member-accessibility

Requires an explicit `public` / `protected` / `private` modifier on class
methods and properties in TypeScript files. JavaScript files are skipped.
"""

from engine.context import RuleContext
from engine.types import HandlerMap, RuleDescriptor, RuleMeta

from .util import get_name_from_property_name, is_typescript

META = RuleMeta(
    id="explicit-member-accessibility",
    category="Best Practices",
    description="Require explicit accessibility modifiers on class properties and methods",
    type="problem",
    default_severity="error",
    recommended="error",
    messages={
        "missingAccessibility": "Missing accessibility modifier on {{type}} {{name}}.",
    },
)


def create(context: RuleContext) -> HandlerMap:
    if not is_typescript(context.file_path):
        return {}

    def check_member(member_type: str):
        def check(node):
            if node.get("accessibility"):
                return
            context.report(node, "missingAccessibility", {
                "type": member_type,
                "name": get_name_from_property_name(node.get("key"), context),
            })
        return check

    check_property = check_member("class property")
    return {
        "ClassProperty": check_property,
        "PropertyDefinition": check_property,
        "MethodDefinition": check_member("method definition"),
    }


RULE = RuleDescriptor(meta=META, create=create)
RULES = [RULE]

"""
Lint rules package.

This package contains the rules that inspect syntax trees for issues.
Rules are automatically discovered and registered when the registry scans
this package.

To add a new rule:
1. Create a Python file in this directory (e.g., no_foo.py)
2. Build a RuleDescriptor from a RuleMeta and a create(context) factory
3. List it in a module-level RULES list
4. The rule will be auto-discovered by engine.registry.discover_rules(["rules"])

Example rule structure:

```python
from engine.context import RuleContext
from engine.types import HandlerMap, RuleDescriptor, RuleMeta

META = RuleMeta(
    id="no-foo",
    category="Best Practices",
    description="Disallow calls to foo()",
    messages={"noFoo": "Unexpected call to {{name}}."},
)


def create(context: RuleContext) -> HandlerMap:
    def check_call(node):
        context.report(node, "noFoo", {"name": node.callee.name})

    return {"CallExpression[callee.name='foo']": check_call}


RULE = RuleDescriptor(meta=META, create=create)
RULES = [RULE]
```
"""

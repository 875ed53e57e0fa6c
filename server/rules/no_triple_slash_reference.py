"""Rule: no-triple-slash-reference

Detects `/// <reference path="..." />` comments at the top of a file.

Triple slash references predate ES modules; an `import` states the same
dependency in a form every tool understands.

Examples:
- /// <reference path="foo.d.ts" />   # BAD
- import { Foo } from "./foo";         # GOOD
"""

import re

from engine.context import RuleContext
from engine.types import HandlerMap, RuleDescriptor, RuleMeta

# Comment values exclude the leading "//", so "///" leaves one slash
REFERENCE_RE = re.compile(r"^/\s*<reference\s*path=")

META = RuleMeta(
    id="no-triple-slash-reference",
    category="TypeScript",
    description='Disallow `/// <reference path="" />` comments',
    type="suggestion",
    default_severity="error",
    recommended="error",
    messages={
        "tripleSlashReference": "Do not use a triple slash reference.",
    },
)


def create(context: RuleContext) -> HandlerMap:
    def check_program(program):
        for comment in context.comments_before(program):
            if comment.kind != "Line":
                continue
            if REFERENCE_RE.match(comment.value):
                context.report(comment, "tripleSlashReference")

    return {"Program": check_program}


RULE = RuleDescriptor(meta=META, create=create)
RULES = [RULE]

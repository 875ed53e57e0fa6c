"""
Error taxonomy for the rule evaluation engine.

Per-rule failures (bad options, unknown message ids, handler crashes) are
isolated by the linter and converted to diagnostics; only failures outside a
rule boundary reach the caller.
"""

from typing import Optional


# Message ids of the diagnostics the linter emits on behalf of a failing rule
RULE_CRASHED = "RuleCrashed"
UNKNOWN_MESSAGE_ID = "UnknownMessageId"


class EngineError(Exception):
    """Base class for all engine errors."""


class OptionsShapeError(EngineError):
    """Supplied options do not fit the rule's declared options schema."""

    def __init__(self, rule_id: str, reason: str, path: Optional[str] = None):
        self.rule_id = rule_id
        self.reason = reason
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(f"Invalid options for rule '{rule_id}'{where}: {reason}")


class UnknownMessageId(EngineError):
    """A rule reported a message id missing from its own metadata."""

    def __init__(self, rule_id: str, message_id: str):
        self.rule_id = rule_id
        self.message_id = message_id
        super().__init__(f"Rule '{rule_id}' reported unknown message id '{message_id}'")


class SelectorError(EngineError):
    """A handler map key could not be parsed as a selector."""

    def __init__(self, selector: str, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"Invalid selector {selector!r}: {reason}")


class ConfigError(EngineError):
    """Configuration file or rule entry is malformed."""


class UnknownRuleError(ConfigError):
    """Configuration refers to a rule id that is not registered."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Unknown rule '{rule_id}'")

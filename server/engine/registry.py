"""
Registry for rule descriptors.

This module provides a central registry to register and discover rules.
Rule modules expose a ``RULES`` list; ``discover_rules`` imports every
module of a package and registers what it finds.
"""

import importlib
import logging
import pkgutil
from typing import Dict, List, Optional

import jsonschema

from .options import validate_options_schema
from .types import RuleDescriptor

logger = logging.getLogger(__name__)


class Registry:
    """Central registry for rules."""

    def __init__(self):
        self._rules: List[RuleDescriptor] = []
        self._rule_index: Dict[str, RuleDescriptor] = {}  # id -> rule

    def register_rule(self, rule: RuleDescriptor) -> bool:
        """Register a rule. Returns False for duplicates and invalid schemas."""
        if rule.id in self._rule_index:
            logger.debug(f"Rule '{rule.id}' already registered")
            return False

        try:
            validate_options_schema(rule.meta.options_schema)
        except jsonschema.SchemaError as e:
            logger.warning(f"Not registering rule '{rule.id}': invalid options schema: {e.message}")
            return False

        self._rules.append(rule)
        self._rule_index[rule.id] = rule
        return True

    def get_rule(self, rule_id: str) -> Optional[RuleDescriptor]:
        """Get rule by id."""
        return self._rule_index.get(rule_id)

    def get_all_rules(self) -> List[RuleDescriptor]:
        """Get all registered rules in registration order."""
        return self._rules.copy()

    def get_rule_ids(self) -> List[str]:
        """Get all registered rule IDs."""
        return list(self._rule_index.keys())

    def get_rules_by_category(self, category: str) -> List[RuleDescriptor]:
        return [rule for rule in self._rules if rule.meta.category == category]

    def discover_rules(self, entry_packages: List[str]) -> int:
        """
        Auto-discover and register rules from packages.

        Args:
            entry_packages: List of package names to discover from

        Returns:
            Number of rules discovered and registered
        """
        initial_count = len(self._rules)

        for package_name in entry_packages:
            try:
                package = importlib.import_module(package_name)
            except ImportError as e:
                logger.warning(f"Could not import package {package_name}: {e}")
                continue

            self._extract_rules_from_module(package)
            if not hasattr(package, "__path__"):
                continue

            for _, modname, _ in pkgutil.walk_packages(package.__path__, package.__name__ + "."):
                try:
                    module = importlib.import_module(modname)
                except Exception as e:
                    logger.warning(f"Failed to import {modname}: {e}")
                    continue
                self._extract_rules_from_module(module)

        discovered = len(self._rules) - initial_count
        logger.debug(f"Discovered {discovered} rules from {entry_packages}")
        return discovered

    def _extract_rules_from_module(self, module) -> None:
        """Register every descriptor listed in a module's RULES."""
        rules = getattr(module, "RULES", None)
        if not isinstance(rules, (list, tuple)):
            return
        for rule in rules:
            if isinstance(rule, RuleDescriptor):
                self.register_rule(rule)
            else:
                logger.warning(f"Ignoring non-descriptor {rule!r} in {module.__name__}.RULES")

    def clear(self) -> None:
        """Clear all registered rules (mainly for testing)."""
        self._rules.clear()
        self._rule_index.clear()


# Global registry instance
_global_registry = Registry()


# Convenience functions that operate on the global registry
def register_rule(rule: RuleDescriptor) -> bool:
    """Register a rule in the global registry."""
    return _global_registry.register_rule(rule)


def get_rule(rule_id: str) -> Optional[RuleDescriptor]:
    """Get rule by id from the global registry."""
    return _global_registry.get_rule(rule_id)


def get_all_rules() -> List[RuleDescriptor]:
    """Get all registered rules from the global registry."""
    return _global_registry.get_all_rules()


def get_rule_ids() -> List[str]:
    """Get all registered rule IDs."""
    return _global_registry.get_rule_ids()


def discover_rules(entry_packages: List[str]) -> int:
    """Auto-discover and register rules from packages."""
    return _global_registry.discover_rules(entry_packages)


def clear() -> None:
    """Clear the global registry (mainly for testing)."""
    _global_registry.clear()


def get_registry() -> Registry:
    """Get the global registry instance (for advanced usage)."""
    return _global_registry

"""
Configuration management for the rule engine.

A YAML file switches rules on with a severity and, optionally, option
groups, in the familiar ESLint entry shapes:

    rules:
      no-var-requires: error
      no-this-alias: [warn, {allowedNames: [self]}]
      explicit-member-accessibility: off
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import ConfigError, UnknownRuleError
from .registry import Registry, get_registry
from .types import SEVERITIES, Activation, Severity

CONFIG_NAMES = [".tsrules.yml", ".tsrules.yaml", "tsrules.yml", "tsrules.yaml"]
OFF = "off"

# ESLint numeric severities
_NUMERIC_SEVERITIES = {0: OFF, 1: "warn", 2: "error"}


@dataclass
class EngineConfig:
    """Configuration for the rule engine."""

    # Rule id -> severity or [severity, *option_groups], in activation order
    rules: Dict[str, Any] = None

    # Packages scanned for RULES lists
    discover: List[str] = None

    def __post_init__(self):
        if self.rules is None:
            object.__setattr__(self, 'rules', {})
        if self.discover is None:
            object.__setattr__(self, 'discover', ["rules"])


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        EngineConfig instance

    Raises:
        ConfigError: The file is not valid YAML or has an unexpected shape.
    """
    defaults: Dict[str, Any] = {
        "rules": {},
        "discover": ["rules"],
    }

    if not config_path:
        return EngineConfig(**defaults)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")

    unknown = sorted(set(file_config) - set(defaults))
    if unknown:
        raise ConfigError(f"{config_path}: unknown keys {', '.join(unknown)}")

    merged = dict(defaults)
    merged.update(file_config)
    if not isinstance(merged["rules"], dict):
        raise ConfigError(f"{config_path}: 'rules' must be a mapping")
    if isinstance(merged["discover"], str):
        merged["discover"] = [merged["discover"]]

    return EngineConfig(**merged)


def save_config(config: EngineConfig, config_path: str) -> None:
    """
    Save configuration to file.

    Args:
        config: EngineConfig to save
        config_path: Path where to save the config
    """
    config_dict = {
        "rules": config.rules,
        "discover": config.discover,
    }

    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2, sort_keys=False)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for files in this order:
    1. .tsrules.yml
    2. .tsrules.yaml
    3. tsrules.yml
    4. tsrules.yaml

    Args:
        start_path: Directory (or file) to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None


def parse_rule_entry(rule_id: str, entry: Any) -> Optional[Tuple[Severity, List[Any]]]:
    """
    Split a rule entry into (severity, option groups).

    Returns:
        None when the rule is switched off.
    """
    if isinstance(entry, (list, tuple)):
        if not entry:
            raise ConfigError(f"Rule '{rule_id}': empty entry")
        level, options = entry[0], list(entry[1:])
    else:
        level, options = entry, []

    # bool is an int subclass; True/False are not severities
    if isinstance(level, int) and not isinstance(level, bool):
        if level not in _NUMERIC_SEVERITIES:
            raise ConfigError(f"Rule '{rule_id}': severity must be 0, 1 or 2, got {level}")
        level = _NUMERIC_SEVERITIES[level]

    # YAML reads a bare `off` as False
    if level is False or level == OFF:
        return None
    if level not in SEVERITIES:
        choices = ", ".join(SEVERITIES + (OFF,))
        raise ConfigError(f"Rule '{rule_id}': unknown severity {level!r}. Expected one of: {choices}")
    return level, options


def build_activations(config: EngineConfig, registry: Optional[Registry] = None) -> List[Activation]:
    """
    Turn configured rule entries into an ordered activation list.

    Raises:
        UnknownRuleError: An entry names a rule that is not registered.
        ConfigError: An entry is malformed.
    """
    registry = registry or get_registry()
    activations: List[Activation] = []
    for rule_id, entry in config.rules.items():
        parsed = parse_rule_entry(rule_id, entry)
        rule = registry.get_rule(rule_id)
        if rule is None:
            raise UnknownRuleError(rule_id)
        if parsed is None:
            continue
        severity, options = parsed
        activations.append(Activation(rule=rule, options=options, severity=severity))
    return activations

"""
Options resolution for rule activations.

A rule declares default option groups; the configuration supplies overrides.
The effective options are the defaults with the overrides deep-merged on top
(scalars and arrays replace, objects merge key by key), pruned and validated
against the rule's JSON schema.
"""

import copy
from typing import Any, Dict, List, Optional, Union

import jsonschema

from .errors import OptionsShapeError

Schema = Union[List[Dict[str, Any]], Dict[str, Any]]


def deep_merge(base: Any, override: Any) -> Any:
    """Merge ``override`` over ``base`` without touching either input."""
    if isinstance(base, dict) and isinstance(override, dict):
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged
    return copy.deepcopy(override)


def resolve_options(defaults: Optional[List[Any]], supplied: Optional[List[Any]],
                    schema: Optional[Schema] = None, rule_id: str = "<anonymous>") -> List[Any]:
    """
    Compute the effective option groups of a rule activation.

    Args:
        defaults: Default option groups declared by the rule
        supplied: Option groups from the configuration, positional
        schema: The rule's options schema. A list holds one schema per
            positional group; a dict describes the whole options array and
            allows any number of groups.
        rule_id: Used in error messages

    Returns:
        A fresh list of option groups; inputs are never shared or mutated.

    Raises:
        OptionsShapeError: Too many groups, or a value violates the schema.
    """
    defaults = list(defaults or [])
    if supplied is None:
        supplied = []
    if not isinstance(supplied, (list, tuple)):
        raise OptionsShapeError(rule_id, f"options must be a list of groups, got {type(supplied).__name__}")

    if not supplied:
        merged = copy.deepcopy(defaults)
    else:
        declared = len(defaults)
        if isinstance(schema, list):
            declared = max(declared, len(schema))
        if len(supplied) > declared and not isinstance(schema, dict):
            raise OptionsShapeError(
                rule_id, f"expected at most {declared} option group(s), got {len(supplied)}"
            )

        merged = copy.deepcopy(defaults)
        for index, group in enumerate(supplied):
            if index < len(merged):
                merged[index] = deep_merge(merged[index], group)
            else:
                merged.append(copy.deepcopy(group))

    if schema:
        merged = _prune_groups(merged, schema)
        _validate_groups(merged, schema, rule_id)
    return merged


def validate_options_schema(schema: Optional[Schema]) -> None:
    """Check a rule's own options schema; raises jsonschema.SchemaError."""
    if schema is None:
        return
    if isinstance(schema, dict):
        jsonschema.Draft7Validator.check_schema(schema)
        return
    if not isinstance(schema, list):
        raise jsonschema.SchemaError(f"options schema must be a list or an object, got {type(schema).__name__}")
    for group_schema in schema:
        jsonschema.Draft7Validator.check_schema(group_schema)


def _prune_groups(groups: List[Any], schema: Schema) -> List[Any]:
    if isinstance(schema, dict):
        return _prune(groups, schema)
    return [
        _prune(group, schema[index]) if index < len(schema) else group
        for index, group in enumerate(groups)
    ]


def _prune(value: Any, schema: Any) -> Any:
    """Drop keys an object schema forbids with ``additionalProperties: false``."""
    if not isinstance(schema, dict):
        return value

    if isinstance(value, dict):
        properties = schema.get("properties", {})
        if schema.get("additionalProperties") is False:
            value = {key: item for key, item in value.items() if key in properties}
        return {key: _prune(item, properties.get(key)) for key, item in value.items()}

    if isinstance(value, list):
        items = schema.get("items")
        if isinstance(items, dict):
            return [_prune(item, items) for item in value]
        if isinstance(items, list):
            return [_prune(item, items[i]) if i < len(items) else item for i, item in enumerate(value)]
    return value


def _validate_groups(groups: List[Any], schema: Schema, rule_id: str) -> None:
    if isinstance(schema, dict):
        _validate(groups, schema, rule_id, prefix="")
        return
    for index, group in enumerate(groups):
        if index < len(schema):
            _validate(group, schema[index], rule_id, prefix=f"[{index}]")


def _validate(instance: Any, schema: Dict[str, Any], rule_id: str, prefix: str) -> None:
    try:
        jsonschema.validate(instance, schema)
    except jsonschema.ValidationError as e:
        path = prefix + "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in e.absolute_path)
        raise OptionsShapeError(rule_id, e.message, path or None) from e

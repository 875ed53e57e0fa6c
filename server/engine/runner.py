"""
CLI runner for the rule engine.

Reads syntax trees produced by an external parser (ESTree JSON, either a bare
Program object or an envelope ``{"file_path", "text", "ast"}``), evaluates the
configured rules and prints the diagnostics as JSON.
"""

import argparse
import fnmatch
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import EngineConfig, build_activations, find_config_file, load_config
from .errors import ConfigError
from .linter import LintResult, lint
from .registry import Registry, get_registry
from .schema import ENGINE_VERSION, PROTOCOL_VERSION, diagnostic_to_dict, validate_runner_output
from .tree import SyntaxTree
from .types import Activation

logger = logging.getLogger(__name__)


def load_tree(path: str) -> SyntaxTree:
    """Load a syntax tree from an ESTree JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")

    if "ast" in data:
        if not isinstance(data["ast"], dict):
            raise ValueError(f"{path}: 'ast' must be a JSON object")
        file_path = data.get("file_path") or data.get("filePath") or _source_path(path)
        return SyntaxTree.from_estree(data["ast"], file_path=file_path, text=data.get("text"))
    return SyntaxTree.from_estree(data, file_path=_source_path(path))


def _source_path(json_path: str) -> str:
    # foo.ts.json describes foo.ts
    return json_path[:-len(".json")] if json_path.endswith(".json") else json_path


def select_activations(config: EngineConfig, registry: Registry,
                       patterns: Optional[List[str]] = None) -> List[Activation]:
    """Configured activations, or every registered rule when none are configured."""
    if config.rules:
        activations = build_activations(config, registry)
    else:
        activations = [Activation(rule=rule) for rule in registry.get_all_rules()]

    if patterns:
        activations = [
            a for a in activations
            if any(fnmatch.fnmatch(a.rule.id, pattern) for pattern in patterns)
        ]
    return activations


def analyze_paths(paths: Sequence[str], activations: Sequence[Activation]) -> List[Tuple[SyntaxTree, LintResult]]:
    """Evaluate the activations over each tree file, one file at a time."""
    results = []
    for path in paths:
        tree = load_tree(path)
        results.append((tree, lint(tree, activations)))
    return results


def format_output(results: List[Tuple[SyntaxTree, LintResult]], rules_count: int) -> Dict[str, Any]:
    """Build the protocol output document."""
    diagnostics = []
    skipped = []
    for tree, result in results:
        diagnostics.extend(diagnostic_to_dict(d, tree) for d in result.diagnostics)
        skipped.extend(
            {"file_path": result.file_path, "rule_id": e.rule_id, "reason": str(e)}
            for e in result.options_errors
        )

    return {
        "protocol": PROTOCOL_VERSION,
        "engine_version": ENGINE_VERSION,
        "files_scanned": len(results),
        "rules_run": rules_count,
        "diagnostics": diagnostics,
        "skipped": skipped,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Evaluate lint rules over ESTree syntax trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m engine.runner build/ast/app.ts.json
  python -m engine.runner trees/*.json --config .tsrules.yml --rules "no-*" --validate
        """
    )

    parser.add_argument(
        "paths",
        nargs="+",
        help="ESTree JSON files to analyze"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file (default: nearest .tsrules.yml)"
    )

    parser.add_argument(
        "--discover",
        help="Comma-separated packages to discover rules from (default: from config)"
    )

    parser.add_argument(
        "--rules",
        help="Comma-separated rule ids or patterns to run (default: all configured)"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate JSON output against schema"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config_path = args.config or find_config_file(args.paths[0])
        config = load_config(config_path)
        logger.debug(f"Using config: {config_path or 'defaults'}")

        registry = get_registry()
        packages = [p.strip() for p in args.discover.split(",")] if args.discover else config.discover
        discovered = registry.discover_rules(packages)
        logger.debug(f"Discovered {discovered} rules from {packages}")

        patterns = [p.strip() for p in args.rules.split(",")] if args.rules else None
        activations = select_activations(config, registry, patterns)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger.debug(f"Running {len(activations)} rules: {[a.rule.id for a in activations]}")

    try:
        results = analyze_paths(args.paths, activations)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: could not load syntax tree: {e}", file=sys.stderr)
        return 2

    output = format_output(results, len(activations))

    if args.validate:
        errors = validate_runner_output(output)
        if errors:
            print("JSON validation errors:", file=sys.stderr)
            for error in errors:
                print(f"  {error}", file=sys.stderr)
            return 2

    print(json.dumps(output, indent=2))
    return 1 if any(result.error_count for _, result in results) else 0


if __name__ == "__main__":
    sys.exit(main())

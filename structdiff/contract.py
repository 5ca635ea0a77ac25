"""Compile JSON comparison contracts into comparison rules.

A contract declares where baseline and candidate outputs may legitimately
differ. It performs no code execution: every rule type maps to a fixed rule.

Contract format:

{
  "schema_version": "1.0",
  "rules": [
    {"id": "r1", "type": "ignore", "path": "meta.run_id"},
    {"id": "r2", "type": "approx", "path": "metrics.*", "preset": "profit"},
    {"id": "r3", "type": "approx", "path": "ratios.*", "abs_tol": 0.01},
    {"id": "r4", "type": "unordered", "path": "tags"}
  ]
}

Paths are dotted key paths over record fields and mapping keys. Sequence
positions are transparent ("items.price" matches every element's price) and
"*" matches exactly one key. An unordered rule applies to the addressed
sequence itself, never to sequences nested inside it.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from .comparator_config import ComparatorConfig
from .errors import ContractError
from .options import RuleSet, filter_path, ignore, transformer
from .path import MapIndex, Path, StructField


def _split_path(path: str) -> List[str]:
    return [p for p in (path or "").split(".") if p]


def dotted_path(path: Path) -> List[str]:
    """Key segments of a comparison path: field names and mapping keys."""
    out: List[str] = []
    for step in path:
        if isinstance(step, StructField):
            out.append(step.name)
        elif isinstance(step, MapIndex):
            out.append(str(step.key))
    return out


def path_matcher(pattern: Optional[str]) -> Callable[[Path], bool]:
    """Path predicate for a dotted pattern; None matches every node."""
    if pattern is None:
        return lambda path: True
    wanted = _split_path(pattern)

    def _matches(path: Path) -> bool:
        segments = dotted_path(path)
        if len(segments) != len(wanted):
            return False
        return all(w == "*" or w == s for w, s in zip(wanted, segments))

    return _matches


def keyed_node(matcher: Callable[[Path], bool]) -> Callable[[Path], bool]:
    """Restrict a path predicate to nodes reached by a field name or mapping key."""

    def _matches(path: Path) -> bool:
        return isinstance(path.last, (StructField, MapIndex)) and matcher(path)

    return _matches


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def _sorted_items(values: list) -> list:
    return sorted(values, key=_canonical)


def _tolerance_config(rule: Dict[str, Any], rule_id: str) -> ComparatorConfig:
    if "preset" in rule:
        try:
            return ComparatorConfig.preset(str(rule["preset"]))
        except ValueError as e:
            raise ContractError(f"rule {rule_id}: {e}") from e
    if "abs_tol" in rule:
        # plain absolute tolerance, no percentage scaling
        return ComparatorConfig(numeric_tolerance=float(rule["abs_tol"]), tolerance_mode="absolute",
                                percentage_scale="percent_0_100")
    if "rel_tol" in rule:
        return ComparatorConfig(numeric_tolerance=float(rule["rel_tol"]))
    raise ContractError(f"rule {rule_id}: approx requires preset, abs_tol or rel_tol")


def compile_contract(contract: Dict[str, Any]) -> RuleSet:
    """Turn a JSON contract into a RuleSet for equal()/diff()/report().

    Raises ContractError for malformed contracts and unknown rule types.
    """
    if not isinstance(contract, dict):
        raise ContractError("contract must be an object")
    rules = contract.get("rules") or []
    if not isinstance(rules, list):
        raise ContractError("contract rules must be a list")

    compiled = []
    for idx, rule in enumerate(rules):
        if not isinstance(rule, dict):
            raise ContractError(f"rule_{idx}: invalid rule (not an object)")

        rule_id = str(rule.get("id") or f"rule_{idx}")
        rule_type = str(rule.get("type") or "").strip().lower()
        path = rule.get("path")
        matcher = path_matcher(None if path is None else str(path))

        if rule_type == "ignore":
            if path is None:
                raise ContractError(f"rule {rule_id}: ignore requires a path")
            compiled.append(filter_path(matcher, ignore()))

        elif rule_type == "approx":
            compiled.append(filter_path(matcher, _tolerance_config(rule, rule_id).to_rule()))

        elif rule_type == "unordered":
            compiled.append(filter_path(keyed_node(matcher), transformer("Sort", _sorted_items)))

        else:
            raise ContractError(f"rule {rule_id}: unknown contract rule type {rule_type!r}")

    return RuleSet(*compiled)

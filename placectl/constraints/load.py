from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..errors import PolicyError, RuleDocumentError
from ..models import PEER_ROLES, LabelConstraint, Rule
from .schema import DEFAULT_POLICY, Policy

logger = logging.getLogger(__name__)


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_rules(text: str, *, source: str = "<string>") -> list[Rule]:
    """Parse a rules document: a JSON array of rule objects."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RuleDocumentError(f"{source}: invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise RuleDocumentError(f"{source}: expected a JSON array of rules, got {type(data).__name__}")

    rules = [Rule.from_dict(raw, position=i) for i, raw in enumerate(data)]
    for rule in rules:
        if rule.role and rule.role not in PEER_ROLES:
            logger.warning("rule %s has unrecognised role %r, carrying it through", rule.id, rule.role)
    logger.debug("parsed %d rule(s) from %s", len(rules), source)
    return rules


def load_rules(path: Path) -> list[Rule]:
    """Load a rules document from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RuleDocumentError(f"cannot read {path}: {e}") from e
    return parse_rules(text, source=str(path))


def _str(table: dict[str, Any], key: str, default: str, where: str) -> str:
    value = table.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise PolicyError(f"{where}.{key} must be a non-empty string")
    return value.strip()


def _positive_int(table: dict[str, Any], key: str, default: int, where: str) -> int:
    value = table.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise PolicyError(f"{where}.{key} must be a positive integer")
    return value


def _constraint(table: dict[str, Any], key: str, default: LabelConstraint, where: str) -> LabelConstraint:
    raw = table.get(key)
    if raw is None:
        return default
    if not isinstance(raw, dict):
        raise PolicyError(f"{where}.{key} must be a table with key, op and values")
    try:
        constraint = LabelConstraint.from_dict(raw, where=f"{where}.{key}")
    except RuleDocumentError as e:
        raise PolicyError(str(e)) from e
    if not constraint.key or not constraint.op:
        raise PolicyError(f"{where}.{key} needs both key and op")
    return constraint


def load_policy(path: Path) -> Policy:
    """
    Load a policy from TOML.

    Every table and key is optional; missing values keep the built-in defaults.
    """
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise PolicyError(f"cannot read policy {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise PolicyError(f"invalid policy {path}: {e}") from e

    d = DEFAULT_POLICY
    source = _coerce_dict(data.get("source"))
    target = _coerce_dict(data.get("target"))
    scope = _coerce_dict(data.get("scope"))

    patterns = scope.get("patterns", list(d.scope_patterns))
    if (
        not isinstance(patterns, list)
        or not patterns
        or not all(isinstance(p, str) and "{keyspace}" in p for p in patterns)
    ):
        raise PolicyError("scope.patterns must be a non-empty list of strings containing '{keyspace}'")

    policy = Policy(
        source_group=_str(source, "group", d.source_group, "source"),
        exclusion_key=_str(source, "exclusion_key", d.exclusion_key, "source"),
        exclusion_value=_str(source, "exclusion_value", d.exclusion_value, "source"),
        target_group=_str(target, "group", d.target_group, "target"),
        target_index=_positive_int(target, "index", d.target_index, "target"),
        target_count=_positive_int(target, "count", d.target_count, "target"),
        write_constraint=_constraint(target, "write_constraint", d.write_constraint, "target"),
        engine_constraint=_constraint(target, "engine_constraint", d.engine_constraint, "target"),
        scope_patterns=tuple(patterns),
    )
    if policy.source_group == policy.target_group:
        raise PolicyError("source.group and target.group must differ")
    logger.debug("loaded policy from %s: %s", path, policy)
    return policy

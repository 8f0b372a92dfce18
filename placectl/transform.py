"""
Derive keyspace-scoped write-node placement rules from engine-tier rules.

Source rules keep write-role stores out of the engine tier. For one keyspace,
the rewrite produces rules in the target group that pin a replica to the
write-role stores instead, keeping the id, range and role of the source rule.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Iterable

from .constraints.engine import check_rule, validate_rules
from .constraints.schema import DEFAULT_POLICY, Policy
from .errors import RuleViolationError
from .models import Rule, WireForm

logger = logging.getLogger(__name__)


def in_scope(rule_id: str, keyspace: str, policy: Policy = DEFAULT_POLICY) -> bool:
    """True when the rule id contains one of the keyspace markers.

    Containment is not anchored: "tenant-keyspace-ks1-x" matches ks1 too.
    """
    return any(marker in rule_id for marker in policy.scope_markers(keyspace))


def derive_rule(rule: Rule, policy: Policy = DEFAULT_POLICY) -> Rule:
    """Build the write-node rule for one source rule; the source is left as is."""
    return replace(
        rule,
        group_id=policy.target_group,
        index=policy.target_index,
        count=policy.target_count,
        label_constraints=[policy.write_constraint, policy.engine_constraint],
        location_labels=list(rule.location_labels),
    )


def _validate_for_rollback(rules: list[Rule], policy: Policy) -> None:
    """Like validate_rules(), but also accept rules already in the target group."""
    for position, rule in enumerate(rules):
        if rule.group_id == policy.target_group:
            continue
        violations = check_rule(rule, policy, position=position)
        if violations:
            raise RuleViolationError(violations[0])


def _scoped(rules: Iterable[Rule], keyspace: str, policy: Policy, *, rollback: bool = False) -> list[Rule]:
    rules = list(rules)
    # All-or-nothing: one bad rule anywhere aborts before anything is derived.
    if rollback:
        _validate_for_rollback(rules, policy)
    else:
        validate_rules(rules, policy)

    scoped = [r for r in rules if in_scope(r.id, keyspace, policy)]
    logger.info(
        "%d of %d rule(s) in keyspace %s (markers: %s)",
        len(scoped),
        len(rules),
        keyspace,
        ", ".join(policy.scope_markers(keyspace)),
    )
    return scoped


def transform_rules(rules: Iterable[Rule], keyspace: str, policy: Policy = DEFAULT_POLICY) -> list[Rule]:
    """Validate every rule, then derive write-node rules for one keyspace, in input order."""
    return [derive_rule(r, policy) for r in _scoped(rules, keyspace, policy)]


def rollback_rules(rules: Iterable[Rule], keyspace: str, policy: Policy = DEFAULT_POLICY) -> list[Rule]:
    """References to the rules transform_rules() creates, for removing them again.

    Reads either the source document or the document transform_rules() wrote.
    """
    scoped = _scoped(rules, keyspace, policy, rollback=True)
    return [Rule(group_id=policy.target_group, id=r.id) for r in scoped]


# HTML-sensitive characters are escaped the way cluster tooling writes them.
_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "\u2028": "\\u2028", "\u2029": "\\u2029"}


def dump_rules(rules: Iterable[Rule], form: WireForm = WireForm.PLACEMENT) -> str:
    text = json.dumps([r.to_dict(form) for r in rules], indent=2, ensure_ascii=False)
    for char, escaped in _ESCAPES.items():
        text = text.replace(char, escaped)
    return text

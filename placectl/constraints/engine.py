from __future__ import annotations

import logging
from typing import Iterable

from ..errors import RuleViolationError
from ..models import Rule
from .predicates import PREDICATES, Violation
from .schema import DEFAULT_POLICY, Policy

logger = logging.getLogger(__name__)


def check_rule(rule: Rule, policy: Policy = DEFAULT_POLICY, *, position: int | None = None) -> list[Violation]:
    """Run every predicate on one rule, stopping at the first that fails."""
    for name, fn in PREDICATES.items():
        violations = fn(rule, policy)
        if violations:
            logger.debug("rule %s failed %s", rule.id, name)
            for v in violations:
                v.position = position
            return violations
    return []


def check_rules(rules: Iterable[Rule], policy: Policy = DEFAULT_POLICY) -> list[Violation]:
    """
    Evaluate every rule and collect all violations, in input order.

    Use validate_rules() for the all-or-nothing pass.
    """
    results: list[Violation] = []
    checked = 0
    for position, rule in enumerate(rules):
        results.extend(check_rule(rule, policy, position=position))
        checked += 1
    logger.info("checked %d rule(s), %d violation(s)", checked, len(results))
    return results


def validate_rules(rules: Iterable[Rule], policy: Policy = DEFAULT_POLICY) -> None:
    """Raise RuleViolationError on the first rule that breaks an invariant."""
    checked = 0
    for position, rule in enumerate(rules):
        violations = check_rule(rule, policy, position=position)
        if violations:
            raise RuleViolationError(violations[0])
        checked += 1
    logger.info("all %d rule(s) exclude %s=%s", checked, policy.exclusion_key, policy.exclusion_value)

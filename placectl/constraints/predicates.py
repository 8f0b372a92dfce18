from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from ..models import EXISTS, IN, NOT_EXISTS, NOT_IN, LabelConstraint, Rule
from .schema import Policy


@dataclass
class Violation:
    """A single rule that breaks an invariant."""

    check: str
    rule: Rule
    message: str
    position: int | None = None

    def __str__(self) -> str:
        loc = self.rule.id or "<no id>"
        if self.position is not None:
            loc = f"#{self.position} {loc}"
        return f"[{self.check}] {loc} - {self.message}: {self.rule.describe()}"


PredicateFn = Callable[[Rule, Policy], list[Violation]]


def find_constraint(constraints: Iterable[LabelConstraint], key: str) -> LabelConstraint | None:
    """Return the first constraint on `key`, or None when there is none."""
    for constraint in constraints:
        if constraint.key == key:
            return constraint
    return None


def match_label(constraint: LabelConstraint, labels: Mapping[str, str]) -> bool:
    """Evaluate one constraint against a store's labels.

    `in` is false when the label is missing; `notIn` is true when it is.
    """
    present = constraint.key in labels
    if constraint.op == IN:
        return present and labels[constraint.key] in constraint.values
    if constraint.op == NOT_IN:
        return not present or labels[constraint.key] not in constraint.values
    if constraint.op == EXISTS:
        return present
    if constraint.op == NOT_EXISTS:
        return not present
    return False


def match_labels(constraints: Iterable[LabelConstraint], labels: Mapping[str, str]) -> bool:
    return all(match_label(c, labels) for c in constraints)


def predicate_group_is(rule: Rule, policy: Policy) -> list[Violation]:
    if rule.group_id == policy.source_group:
        return []
    msg = f"rule is not in group {policy.source_group!r} (got {rule.group_id!r})"
    return [Violation(check="group-mismatch", rule=rule, message=msg)]


def predicate_excludes_engine_role(rule: Rule, policy: Policy) -> list[Violation]:
    constraint = find_constraint(rule.label_constraints, policy.exclusion_key)
    if constraint is None:
        msg = f"rule lacks required exclusion constraint {policy.exclusion_key} notIn [{policy.exclusion_value}]"
        return [Violation(check="missing-exclusion", rule=rule, message=msg)]

    if constraint.op != NOT_IN or constraint.values != (policy.exclusion_value,):
        msg = (
            f"malformed exclusion constraint {constraint.key} {constraint.op} {list(constraint.values)}, "
            f"expected {policy.exclusion_key} notIn [{policy.exclusion_value}]"
        )
        return [Violation(check="malformed-exclusion", rule=rule, message=msg)]
    return []


# Evaluated in order; a failing predicate stops evaluation of the rest for that rule.
PREDICATES: dict[str, PredicateFn] = {
    "group_is": predicate_group_is,
    "excludes_engine_role": predicate_excludes_engine_role,
}

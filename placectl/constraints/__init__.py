"""Placement rule checks (invariants as data, predicates as code)."""

from .engine import check_rules, validate_rules
from .load import load_policy, load_rules, parse_rules
from .schema import DEFAULT_POLICY, Policy

__all__ = [
    "DEFAULT_POLICY",
    "Policy",
    "check_rules",
    "load_policy",
    "load_rules",
    "parse_rules",
    "validate_rules",
]

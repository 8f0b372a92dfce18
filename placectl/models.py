"""Data models for placement rules."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping

from .errors import RuleDocumentError

# Wire values of label constraint operators
LabelConstraintOp = Literal["in", "notIn", "exists", "notExists"]

IN: LabelConstraintOp = "in"
NOT_IN: LabelConstraintOp = "notIn"
EXISTS: LabelConstraintOp = "exists"
NOT_EXISTS: LabelConstraintOp = "notExists"

# Expected peer roles; unknown values are carried through untouched
PeerRole = Literal["voter", "leader", "follower", "learner"]

PEER_ROLES: tuple[PeerRole, ...] = ("voter", "leader", "follower", "learner")


class WireForm(Enum):
    """Which fields a rule carries when written to a document."""

    FULL = "full"  # validation pipeline: everything persisted
    PLACEMENT = "placement"  # transform pipeline: no override / is_witness
    REFERENCE = "reference"  # rollback pipeline: identity and placement only, no range or role


def _field(data: Mapping[str, Any], key: str, kind: type | tuple[type, ...], default: Any, where: str) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass; JSON true is never a number
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise RuleDocumentError(f"{where}: field {key!r} has invalid value {value!r}")
    return value


def _string_list(data: Mapping[str, Any], key: str, where: str) -> list[str]:
    values = _field(data, key, list, [], where)
    if not all(isinstance(v, str) for v in values):
        raise RuleDocumentError(f"{where}: field {key!r} must be a list of strings")
    return list(values)


@dataclass(frozen=True)
class LabelConstraint:
    """A predicate over a store's labels."""

    key: str = ""
    op: str = ""
    values: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any, where: str = "label constraint") -> "LabelConstraint":
        if not isinstance(data, dict):
            raise RuleDocumentError(f"{where}: expected an object, got {data!r}")
        return cls(
            key=_field(data, "key", str, "", where),
            op=_field(data, "op", str, "", where),
            values=tuple(_string_list(data, "values", where)),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.key:
            out["key"] = self.key
        if self.op:
            out["op"] = self.op
        if self.values:
            out["values"] = list(self.values)
        return out


@dataclass(frozen=True)
class RuleGroup:
    """Descriptor of a policy family that rules point at through group_id."""

    id: str
    index: int = 0
    override: bool = False


@dataclass
class Rule:
    """One placement directive."""

    group_id: str  # source that added the rule
    id: str  # unique within a group
    index: int = 0  # apply order in a group; ties broken by id
    override: bool = False  # disables same-group rules with lower index
    start_key: str = ""  # hex, carried verbatim
    end_key: str = ""  # hex, carried verbatim
    role: str = ""
    is_witness: bool = False
    count: int = 0
    label_constraints: list[LabelConstraint] = field(default_factory=list)
    location_labels: list[str] = field(default_factory=list)
    isolation_level: str = ""
    # Set at runtime only, never read from or written to a document
    version: int | None = field(default=None, compare=False, repr=False)
    create_timestamp: int | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Any, position: int | None = None) -> "Rule":
        """Build a rule from its document form. Unknown keys are ignored."""
        where = "rule" if position is None else f"rule #{position}"
        if not isinstance(data, dict):
            raise RuleDocumentError(f"{where}: expected an object, got {data!r}")

        constraints_raw = _field(data, "label_constraints", list, [], where)
        constraints = [
            LabelConstraint.from_dict(c, where=f"{where} label_constraints[{i}]")
            for i, c in enumerate(constraints_raw)
        ]

        return cls(
            group_id=_field(data, "group_id", str, "", where),
            id=_field(data, "id", str, "", where),
            index=_field(data, "index", int, 0, where),
            override=_field(data, "override", bool, False, where),
            start_key=_field(data, "start_key", str, "", where),
            end_key=_field(data, "end_key", str, "", where),
            role=_field(data, "role", str, "", where),
            is_witness=_field(data, "is_witness", bool, False, where),
            count=_field(data, "count", int, 0, where),
            label_constraints=constraints,
            location_labels=_string_list(data, "location_labels", where),
            isolation_level=_field(data, "isolation_level", str, "", where),
        )

    def to_dict(self, form: WireForm = WireForm.FULL) -> dict[str, Any]:
        """Convert to the document form; key order is stable."""
        out: dict[str, Any] = {"group_id": self.group_id, "id": self.id}
        if self.index:
            out["index"] = self.index
        if form is WireForm.FULL and self.override:
            out["override"] = self.override
        if form is not WireForm.REFERENCE:
            out["start_key"] = self.start_key
            out["end_key"] = self.end_key
            out["role"] = self.role
        if form is WireForm.FULL:
            out["is_witness"] = self.is_witness
        out["count"] = self.count
        if self.label_constraints:
            out["label_constraints"] = [c.to_dict() for c in self.label_constraints]
        if self.location_labels:
            out["location_labels"] = list(self.location_labels)
        if self.isolation_level:
            out["isolation_level"] = self.isolation_level
        return out

    def describe(self) -> str:
        """Compact JSON echo used to point operators at an offending rule."""
        return json.dumps(self.to_dict(), separators=(",", ":"))


def rule_sort_key(rule: Rule) -> tuple[int, str]:
    """Apply order within a group: lower index first, then lower id.

    Documents the scheduler's ordering; no pipeline here reorders rules.
    """
    return (rule.index, rule.id)


def lookup_group(rule: Rule, groups: Mapping[str, RuleGroup]) -> RuleGroup | None:
    """Resolve the group descriptor a rule belongs to, if registered.

    Not called by any pipeline; group membership is checked by group_id.
    """
    return groups.get(rule.group_id)

"""Tests for rule (de)serialization."""

from __future__ import annotations

import pytest

from conftest import rule_dict
from placectl.errors import RuleDocumentError
from placectl.models import LabelConstraint, Rule, RuleGroup, WireForm, lookup_group, rule_sort_key


def test_from_dict_reads_wire_names() -> None:
    rule = Rule.from_dict(rule_dict("keyspace-ks1-r1", location_labels=["zone", "host"], isolation_level="zone"))

    assert rule.group_id == "tiflash"
    assert rule.id == "keyspace-ks1-r1"
    assert rule.index == 120
    assert rule.start_key == "7480000000000000ff2a5f720000000000fa"
    assert rule.role == "learner"
    assert rule.count == 3
    assert rule.label_constraints[1] == LabelConstraint(key="engine_role", op="notIn", values=("write",))
    assert rule.location_labels == ["zone", "host"]
    assert rule.isolation_level == "zone"


def test_runtime_fields_never_come_from_document() -> None:
    rule = Rule.from_dict(rule_dict("r1", version=7, create_timestamp=1700000000))
    assert rule.version is None
    assert rule.create_timestamp is None
    assert "version" not in rule.to_dict()
    assert "create_timestamp" not in rule.to_dict()


def test_runtime_fields_do_not_affect_equality() -> None:
    a = Rule(group_id="tiflash", id="r1", version=1)
    b = Rule(group_id="tiflash", id="r1", version=2)
    assert a == b


def test_unknown_keys_are_ignored() -> None:
    rule = Rule.from_dict(rule_dict("r1", something_new={"x": 1}))
    assert rule.id == "r1"


def test_null_values_keep_defaults() -> None:
    rule = Rule.from_dict({"group_id": "tiflash", "id": "r1", "label_constraints": None, "count": None})
    assert rule.label_constraints == []
    assert rule.count == 0


@pytest.mark.parametrize(
    "key,value",
    [
        ("count", "3"),
        ("count", True),
        ("index", 1.5),
        ("group_id", 5),
        ("label_constraints", {"key": "engine"}),
        ("location_labels", ["zone", 1]),
    ],
)
def test_wrong_types_are_document_errors(key: str, value: object) -> None:
    with pytest.raises(RuleDocumentError, match=key):
        Rule.from_dict(rule_dict("r1", **{key: value}), position=4)


def test_document_error_names_position() -> None:
    with pytest.raises(RuleDocumentError, match="rule #2"):
        Rule.from_dict("not-an-object", position=2)


def test_full_form_key_order_and_omissions() -> None:
    rule = Rule(group_id="tiflash", id="r1", count=1)
    assert list(rule.to_dict(WireForm.FULL)) == [
        "group_id",
        "id",
        "start_key",
        "end_key",
        "role",
        "is_witness",
        "count",
    ]

    rule.override = True
    rule.index = 3
    assert list(rule.to_dict(WireForm.FULL))[:4] == ["group_id", "id", "index", "override"]


def test_placement_form_drops_override_and_witness() -> None:
    rule = Rule.from_dict(rule_dict("r1", override=True, is_witness=True))
    out = rule.to_dict(WireForm.PLACEMENT)

    assert "override" not in out
    assert "is_witness" not in out
    assert out["start_key"] == rule.start_key
    assert out["role"] == "learner"


def test_reference_form_keeps_identity_only() -> None:
    out = Rule(group_id="enable_s3_wn_region", id="keyspace-ks1-r1").to_dict(WireForm.REFERENCE)
    assert out == {"group_id": "enable_s3_wn_region", "id": "keyspace-ks1-r1", "count": 0}


def test_label_constraint_omits_empty_fields() -> None:
    assert LabelConstraint(key="engine", op="exists").to_dict() == {"key": "engine", "op": "exists"}


def test_rule_sort_key_orders_by_index_then_id() -> None:
    rules = [
        Rule(group_id="g", id="b", index=2),
        Rule(group_id="g", id="c", index=1),
        Rule(group_id="g", id="a", index=2),
    ]
    assert [r.id for r in sorted(rules, key=rule_sort_key)] == ["c", "a", "b"]


def test_lookup_group_resolves_by_group_id() -> None:
    groups = {"tiflash": RuleGroup(id="tiflash", index=0)}
    assert lookup_group(Rule(group_id="tiflash", id="r1"), groups) == RuleGroup(id="tiflash")
    assert lookup_group(Rule(group_id="pd", id="r1"), groups) is None

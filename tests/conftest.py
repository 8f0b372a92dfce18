"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest


def rule_dict(rule_id: str, **overrides: Any) -> dict[str, Any]:
    """A well-formed engine-tier rule as exported by the cluster."""
    data: dict[str, Any] = {
        "group_id": "tiflash",
        "id": rule_id,
        "index": 120,
        "start_key": "7480000000000000ff2a5f720000000000fa",
        "end_key": "7480000000000000ff2b00000000000000f8",
        "role": "learner",
        "is_witness": False,
        "count": 3,
        "label_constraints": [
            {"key": "engine", "op": "in", "values": ["tiflash"]},
            {"key": "engine_role", "op": "notIn", "values": ["write"]},
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
def write_rules(tmp_path: Path) -> Callable[[list[dict[str, Any]]], Path]:
    """Write a rules document and return its path."""

    def _write(rules: list[dict[str, Any]], name: str = "cur_rules.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(rules), encoding="utf-8")
        return path

    return _write

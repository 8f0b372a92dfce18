"""Check command implementation."""

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..constraints import check_rules, load_rules, validate_rules
from ..constraints.predicates import Violation
from ..constraints.schema import Policy
from ..errors import PlacectlError

SUCCESS_LINE = "check done, all rules has engine_role constraints"


def run_check(
    rules_path: Path,
    policy: Policy,
    aggregate: bool = False,
    output_json: bool = False,
) -> int:
    """Check that every rule belongs to the source group and excludes write-role stores.

    Args:
        rules_path: Path to the rules document (JSON array)
        policy: Group and constraint literals to check against
        aggregate: Report every violation instead of stopping at the first
        output_json: Print every violation as JSON on stdout (implies aggregate)

    Returns:
        Exit code (0 = all rules pass, 1 = document error or violation)
    """
    console = Console(stderr=True)
    aggregate = aggregate or output_json

    try:
        rules = load_rules(rules_path)
        if not aggregate:
            validate_rules(rules, policy)
            violations: list[Violation] = []
        else:
            violations = check_rules(rules, policy)
    except PlacectlError as e:
        console.print(f"✗ {e}", style="bold red", markup=False, highlight=False, soft_wrap=True)
        return 1

    if output_json:
        _output_json(violations, len(rules))
    elif violations:
        _print_violations(console, violations, len(rules))

    if violations:
        return 1

    if not output_json:
        print(SUCCESS_LINE)
    return 0


def _violation_to_dict(v: Violation) -> dict:
    return {
        "check": v.check,
        "position": v.position,
        "id": v.rule.id,
        "group_id": v.rule.group_id,
        "message": v.message,
        "rule": v.rule.to_dict(),
    }


def _output_json(violations: list[Violation], total: int) -> None:
    output = {
        "violations": [_violation_to_dict(v) for v in violations],
        "summary": {
            "rules": total,
            "failing": len({v.position for v in violations}),
        },
    }
    print(json.dumps(output, indent=2))


def _print_violations(console: Console, violations: list[Violation], total: int) -> None:
    table = Table(title="Rule violations", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Rule ID")
    table.add_column("Check", style="bold")

    for v in violations:
        table.add_row(str(v.position), Text(v.rule.id), v.check)

    console.print(table)
    for v in violations:
        console.print(f"  {v}", style="dim", markup=False, highlight=False, soft_wrap=True)
    console.print(f"\n✗ {len(violations)} of {total} rule(s) failed", style="bold red")

"""Enable / disable command implementations."""

from pathlib import Path

from rich.console import Console

from ..constraints import load_rules
from ..constraints.schema import Policy
from ..errors import PlacectlError
from ..models import WireForm
from ..transform import dump_rules, rollback_rules, transform_rules


def run_enable(rules_path: Path, keyspace: str, policy: Policy) -> int:
    """Print the write-node rules for `keyspace` derived from the document at `rules_path`.

    Nothing is printed to stdout unless every rule in the document passes the check.
    """
    console = Console(stderr=True)

    try:
        new_rules = transform_rules(load_rules(rules_path), keyspace, policy)
    except PlacectlError as e:
        console.print(f"✗ {e}", style="bold red", markup=False, highlight=False, soft_wrap=True)
        return 1

    if not new_rules:
        console.print(f"No rules matched keyspace {keyspace!r}", style="yellow", markup=False, soft_wrap=True)
    print(dump_rules(new_rules, WireForm.PLACEMENT))
    return 0


def run_disable(rules_path: Path, keyspace: str, policy: Policy) -> int:
    """Print references to the rules `enable` derives for `keyspace`, for deleting them."""
    console = Console(stderr=True)

    try:
        refs = rollback_rules(load_rules(rules_path), keyspace, policy)
    except PlacectlError as e:
        console.print(f"✗ {e}", style="bold red", markup=False, highlight=False, soft_wrap=True)
        return 1

    if not refs:
        console.print(f"No rules matched keyspace {keyspace!r}", style="yellow", markup=False, soft_wrap=True)
    print(dump_rules(refs, WireForm.REFERENCE))
    return 0

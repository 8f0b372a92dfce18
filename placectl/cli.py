"""CLI entrypoint for placectl."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .constraints.schema import DEFAULT_POLICY, Policy
from .errors import PolicyError

RULES_PATH = click.Path(exists=False, file_okay=True, dir_okay=False, path_type=Path)


def _configure_logging(verbose: bool) -> None:
    """Route placectl's loggers to stderr through rich."""
    logger = logging.getLogger("placectl")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _validate_keyspace(ctx: click.Context, param: click.Parameter, value: str) -> str:
    if not value.strip():
        raise click.BadParameter("keyspace must not be empty")
    return value


@click.group()
@click.version_option(__version__, prog_name="placectl")
@click.option("--verbose", "-V", is_flag=True, help="Log progress and decisions to stderr")
@click.option(
    "--policy",
    "policy_path",
    type=click.Path(exists=False, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    envvar="PLACECTL_POLICY",
    help="TOML file overriding group names, constraint literals and keyspace patterns",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, policy_path: Path | None) -> None:
    """placectl - check and rewrite placement rules for write-node migration.

    Rules are read from a JSON document as exported from the cluster's
    placement-rule API; derived documents are printed to stdout for an
    operator to apply.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)

    policy: Policy = DEFAULT_POLICY
    if policy_path is not None:
        from .constraints.load import load_policy

        try:
            policy = load_policy(policy_path)
        except PolicyError as e:
            raise click.ClickException(str(e)) from e

    ctx.obj["policy"] = policy


@cli.command()
@click.argument("rules_json", type=RULES_PATH)
@click.option(
    "--all",
    "aggregate",
    is_flag=True,
    help="Report every failing rule instead of stopping at the first",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output violations as JSON (implies --all)",
)
@click.pass_context
def check(ctx: click.Context, rules_json: Path, aggregate: bool, output_json: bool) -> None:
    """Check that every rule excludes write-role stores.

    Every rule must belong to the engine-tier group and carry exactly
    `engine_role notIn [write]`. Stops at the first failing rule unless
    --all is given.

    Examples:

        placectl check cur_rules.json

        placectl check cur_rules.json --all
    """
    from .commands.check import run_check

    exit_code = run_check(rules_json, ctx.obj["policy"], aggregate, output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("rules_json", type=RULES_PATH)
@click.argument("keyspace", callback=_validate_keyspace)
@click.pass_context
def enable(ctx: click.Context, rules_json: Path, keyspace: str) -> None:
    """Derive write-node placement rules for one keyspace.

    Rules whose id contains `keyspace-KEYSPACE-` or `keyspace-id-KEYSPACE-`
    are rewritten into the write-node group; all others are dropped. The whole
    document is checked first and nothing is printed if any rule fails.

    Example:

        placectl enable cur_rules.json ks1 > new_rules.json
    """
    from .commands.rewrite import run_enable

    exit_code = run_enable(rules_json, keyspace, ctx.obj["policy"])
    sys.exit(exit_code)


@cli.command()
@click.argument("rules_json", type=RULES_PATH)
@click.argument("keyspace", callback=_validate_keyspace)
@click.pass_context
def disable(ctx: click.Context, rules_json: Path, keyspace: str) -> None:
    """Print references to the rules `enable` derives, for deleting them.

    Example:

        placectl disable cur_rules.json ks1 > delete_rules.json
    """
    from .commands.rewrite import run_disable

    exit_code = run_disable(rules_json, keyspace, ctx.obj["policy"])
    sys.exit(exit_code)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

"""CLI command: hostacl check <address> — decide a single request."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape

from hostacl.config import HostAclConfig
from hostacl.decision import decide
from hostacl.loader import RuleSyntaxError, load_rules
from hostacl.models import RuleSet

console = Console(stderr=True)


@click.command()
@click.argument("address")
@click.option(
    "--user",
    "-u",
    default=None,
    help="Username to check (default: $HOSTACL_USER).",
)
@click.option(
    "--server-addr",
    default=None,
    help="Server address for localnetA/B/C (default: $HOSTACL_SERVER_ADDR).",
)
@click.pass_context
def check(
    ctx: click.Context,
    address: str,
    user: str | None,
    server_addr: str | None,
) -> None:
    """Decide whether ADDRESS is allowed by the rule file."""
    config = HostAclConfig.load()
    rule_set = load_rule_set(ctx.obj.get("rules_path"), config)

    username = user if user is not None else config.username
    server_address = server_addr or config.server_address

    decision = decide(rule_set, address, username, server_address)

    color = "green" if decision.allowed else "red"
    verdict = "ALLOWED" if decision.allowed else "DENIED"
    console.print(
        f"[{color}]{verdict}[/{color}] {escape(address)} "
        f"as [cyan]{escape(username or '-')}[/cyan] ({decision.outcome.value})"
    )
    console.print(f"  [dim]{escape(decision.reason)}[/dim]")

    if not decision.allowed:
        sys.exit(1)


def load_rule_set(rules_path: str | None, config: HostAclConfig) -> RuleSet:
    """Load the rule file from --rules or the environment, exiting with 2 on failure."""
    path = rules_path or config.rules_file
    if not path:
        console.print(
            "[red]No rule file given.[/red] Use --rules or set HOSTACL_RULES_FILE."
        )
        sys.exit(2)
    try:
        return load_rules(path)
    except (OSError, RuleSyntaxError) as exc:
        console.print(
            f"[red]Cannot load rule file {escape(str(path))}:[/red] {escape(str(exc))}"
        )
        sys.exit(2)

"""CLI command: hostacl lint — report rules whose address pattern is invalid."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hostacl.cli.check import load_rule_set
from hostacl.config import HostAclConfig
from hostacl.engine import RuleEngine
from hostacl.patterns import build_shortcuts

console = Console(stderr=True)


@click.command()
@click.argument("file", required=False, type=click.Path(exists=True))
@click.option(
    "--server-addr",
    default=None,
    help="Server address for localnetA/B/C shortcuts.",
)
@click.pass_context
def lint(ctx: click.Context, file: str | None, server_addr: str | None) -> None:
    """Validate every rule in FILE (default: --rules)."""
    config = HostAclConfig.load()
    rule_set = load_rule_set(file or ctx.obj.get("rules_path"), config)
    engine = RuleEngine(
        rule_set.rules, build_shortcuts(server_addr or config.server_address)
    )

    console.print(
        f"[bold]hostacl[/bold] rule set [cyan]{escape(rule_set.name)}[/cyan] "
        f"(order [cyan]{rule_set.order.value}[/cyan])\n"
    )

    table = Table(title="Rules", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Kind", style="bold")
    table.add_column("User", style="cyan")
    table.add_column("Address")
    table.add_column("Pattern")

    invalid = 0
    for i, (rule, pattern, error) in enumerate(engine.patterns(), start=1):
        if pattern is None:
            invalid += 1
            status = f"[red]invalid: {escape(error)}[/red]"
        else:
            status = f"[green]{pattern.kind}[/green]"
        table.add_row(
            str(i), rule.kind.value, escape(rule.user), escape(rule.address), status
        )

    console.print(table)
    console.print(f"\n{len(rule_set.rules)} rule(s), {invalid} invalid")

    if invalid:
        sys.exit(1)

"""CLI command: hostacl match <pattern> <address> — test a single pattern."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape

from hostacl.address import InvalidAddress, parse
from hostacl.patterns import build_shortcuts, matches, parse_pattern, resolve_shortcut

console = Console(stderr=True)


@click.command()
@click.argument("pattern")
@click.argument("address")
@click.option(
    "--server-addr",
    default=None,
    help="Server address for localnetA/B/C shortcuts.",
)
def match(pattern: str, address: str, server_addr: str | None) -> None:
    """Check whether ADDRESS falls inside PATTERN (exact, [lo-hi] range or CIDR)."""
    text = resolve_shortcut(pattern, build_shortcuts(server_addr))
    try:
        compiled = parse_pattern(text)
        parsed = parse(address)
    except InvalidAddress as exc:
        console.print(f"[red]Invalid input:[/red] {escape(str(exc))}")
        sys.exit(2)

    if matches(compiled, parsed):
        console.print(
            f"[green]MATCH[/green] {escape(address)} in {escape(text)} ({compiled.kind})"
        )
        return

    console.print(
        f"[yellow]NO MATCH[/yellow] {escape(address)} not in {escape(text)} "
        f"({compiled.kind})"
    )
    sys.exit(1)

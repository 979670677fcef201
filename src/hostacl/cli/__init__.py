"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from hostacl import __version__


@click.group()
@click.version_option(version=__version__, prog_name="hostacl")
@click.option(
    "--rules",
    "-r",
    type=click.Path(exists=True),
    help="Path to a YAML rule file (default: $HOSTACL_RULES_FILE).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, rules: str | None, verbose: bool) -> None:
    """hostacl — host-based allow/deny access control."""
    ctx.ensure_object(dict)
    ctx.obj["rules_path"] = rules
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from hostacl.cli.check import check  # noqa: F811
    from hostacl.cli.lint import lint  # noqa: F811
    from hostacl.cli.match import match  # noqa: F811

    main.add_command(check)
    main.add_command(match)
    main.add_command(lint)


_register_commands()

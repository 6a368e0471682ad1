"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from boardgate import __version__


@click.group()
@click.version_option(version=__version__, prog_name="boardgate")
@click.option(
    "--policy",
    "-p",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML limits policy file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, policy: str | None, verbose: bool) -> None:
    """BoardGate — rate admission and admin gating for a shared whiteboard."""
    ctx.ensure_object(dict)
    ctx.obj["policy_path"] = policy
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from boardgate.cli.limits import limits  # noqa: F811
    from boardgate.cli.server import serve  # noqa: F811

    main.add_command(serve)
    main.add_command(limits)


_register_commands()

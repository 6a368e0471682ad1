"""CLI command: boardgate limits — show the effective limits."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from boardgate.config import BoardGateConfig
from boardgate.policy.models import BoardPolicy

console = Console()


@click.command()
@click.pass_context
def limits(ctx: click.Context) -> None:
    """Validate the policy and print the limits it enforces."""
    config = BoardGateConfig.load()
    policy_path = ctx.obj.get("policy_path")
    if policy_path:
        config.policy_path = Path(policy_path)

    try:
        policy = config.resolve_policy()
    except ValueError as e:
        console.print(f"[red]Invalid policy:[/red] {e}")
        raise SystemExit(2)

    console.print(f"[bold]Policy[/bold] [cyan]{policy.name}[/cyan]")
    if policy.description:
        console.print(f"  [dim]{policy.description}[/dim]")
    console.print(_limits_table(policy))


def _limits_table(policy: BoardPolicy) -> Table:
    adm = policy.admission
    auth = policy.auth

    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Limit", style="dim")
    table.add_column("Value")

    window = f"{adm.short_window:g}s"
    table.add_row("Warn above", f"{adm.warn_rate} events / {window}")
    table.add_row("Throttle above", f"{adm.throttle_rate} events / {window}")
    table.add_row("Pause above", f"{adm.pause_rate} events / {window}")
    table.add_row("Hard limit above", f"{adm.hard_rate} events / {window}")
    table.add_row(
        "Long window cap", f"{adm.long_window_cap} events / {adm.long_window:g}s"
    )
    table.add_row("Violation memory", f"{adm.violation_memory:g}s")
    table.add_row("Max violations", str(adm.max_violations))
    table.add_row("Pauses", f"{adm.short_pause:g}s / {adm.long_pause:g}s")
    table.add_row(
        "Auth backoff", ", ".join(f"{s:g}s" for s in auth.backoff_schedule)
    )
    table.add_row(
        "Auth block",
        f"{auth.max_failures} failures in {auth.tracking_window:g}s "
        f"→ {auth.block_duration:g}s",
    )
    table.add_row(
        "Admin code", "set" if auth.admin_code is not None else "[yellow]unset[/yellow]"
    )
    table.add_row("Reset cooldown", f"{policy.reset.cooldown:g}s")
    return table

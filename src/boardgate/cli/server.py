"""CLI command: boardgate serve — start the whiteboard server."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from boardgate.config import BoardGateConfig

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8470).",
)
@click.option("--host", default=None, help="Interface to bind (default: 127.0.0.1).")
@click.option("--no-audit", is_flag=True, help="Do not persist enforcement events.")
@click.pass_context
def serve(ctx: click.Context, port: int | None, host: str | None, no_audit: bool) -> None:
    """Start the BoardGate server."""
    import uvicorn

    config = BoardGateConfig.load()
    if port is not None:
        config.web_port = port
    if host is not None:
        config.web_host = host
    if no_audit:
        config.audit_enabled = False
    policy_path = ctx.obj.get("policy_path")
    if policy_path:
        config.policy_path = Path(policy_path)
    config.verbose = bool(ctx.obj.get("verbose"))

    try:
        policy = config.resolve_policy()
    except ValueError as e:
        console.print(f"[red]Invalid policy:[/red] {e}")
        raise SystemExit(2)

    console.print(
        f"[bold]BoardGate[/bold] starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}[/cyan]"
    )
    console.print(f"  Policy: [cyan]{policy.name}[/cyan]")
    if policy.auth.admin_code is None:
        console.print(
            "  [yellow]No admin code set[/yellow] "
            "[dim](export BOARDGATE_ADMIN_CODE to enable admin login)[/dim]"
        )
    audit = config.audit_db_path if config.audit_enabled else "disabled"
    console.print(f"  [dim]Audit log: {audit}[/dim]\n")

    import asyncio

    from boardgate.web.app import create_app

    async def _run() -> None:
        app = await create_app(config)
        server_config = uvicorn.Config(
            app,
            host=config.web_host,
            port=config.web_port,
            log_level="debug" if config.verbose else "info",
        )
        srv = uvicorn.Server(server_config)
        await srv.serve()

    asyncio.run(_run())

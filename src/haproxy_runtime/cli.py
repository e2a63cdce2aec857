"""
Command Line Interface for the HAProxy runtime client.

Thin operator wrapper around RuntimeClient: raw commands, counter and
server state tables, state changes and drain-to-maintenance.

Built with Typer for automatic tab completion.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Awaitable, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .client import RuntimeClient
from .core.config import Settings, get_settings
from .core.logging import setup_logging
from .exceptions import RuntimeApiError
from .models.state import AdminState, ServerState

T = TypeVar("T")

console = Console()

app = typer.Typer(
    name="haproxy-runtime",
    help="HAProxy runtime API client",
    add_completion=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    if value:
        console.print(f"haproxy-runtime-client version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    socket: Annotated[Optional[str], typer.Option("--socket", "-s", help="Runtime API address (unix://<path> or tcp://<host>:<port>)")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to configuration file")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")] = None,
    version: Annotated[bool, typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit.")] = False,
):
    """
    HAProxy runtime API client.

    Talks to the runtime administration socket to inspect counters and
    server state and to move servers between ready, drain and maintenance.
    """
    try:
        settings = Settings.load_from_yaml(config) if config else get_settings()
        if socket:
            # get_settings() is cached, so override on a copy
            runtime = settings.runtime.model_copy(update={"socket": socket})
            settings = settings.model_copy(update={"runtime": runtime})
        setup_logging(log_level or settings.log.level, settings.log.format, settings.log.file)
        ctx.obj = RuntimeClient.from_settings(settings)
    except (RuntimeApiError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    ctx.meta["settings"] = settings


def _run(awaitable: Awaitable[T]) -> T:
    """Run a client call, turning runtime API errors into exit code 1."""
    try:
        return asyncio.run(awaitable)
    except RuntimeApiError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _admin_flags(state: AdminState) -> str:
    if not state:
        return "-"
    return "|".join(flag.name.lower() for flag in AdminState if flag in state)


@app.command("exec")
def execute(
    ctx: typer.Context,
    command: Annotated[list[str], typer.Argument(help="Runtime API command, e.g. show info")],
):
    """Execute a raw runtime API command and print the response."""
    client: RuntimeClient = ctx.obj
    response = _run(client.execute(" ".join(command)))
    typer.echo(response.decode("utf-8", "replace"), nl=False)


@app.command()
def stat(
    ctx: typer.Context,
    backend: Annotated[Optional[str], typer.Option("--backend", "-b", help="Only show this proxy")] = None,
):
    """Show session counters (show stat)."""
    client: RuntimeClient = ctx.obj
    records = _run(client.show_stat())
    if backend:
        records = [r for r in records if r.pxname == backend]

    table = Table(title="Counters")
    table.add_column("Proxy", style="cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Cur", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Check", style="dim")

    for r in records:
        status_style = "green" if r.status.startswith(("UP", "OPEN")) else "yellow"
        table.add_row(
            r.pxname,
            r.svname,
            f"[{status_style}]{r.status}[/{status_style}]",
            str(r.scur),
            str(r.smax),
            str(r.stot),
            r.check_status,
        )

    console.print(table)


@app.command("servers-state")
def servers_state(
    ctx: typer.Context,
    backend: Annotated[Optional[str], typer.Argument(help="Only show this backend")] = None,
):
    """Show server states (show servers state)."""
    client: RuntimeClient = ctx.obj
    states = _run(client.show_servers_state(backend))

    table = Table(title="Server State")
    table.add_column("Backend", style="cyan")
    table.add_column("Server", style="cyan")
    table.add_column("Address")
    table.add_column("Operational")
    table.add_column("Admin")
    table.add_column("Check", style="dim")

    for s in states:
        table.add_row(
            s.be_name,
            s.srv_name,
            f"{s.srv_addr}:{s.srv_port}",
            s.srv_op_state.name.lower(),
            _admin_flags(s.srv_admin_state),
            s.srv_check_result.name.lower(),
        )

    console.print(table)


@app.command("set-state")
def set_state(
    ctx: typer.Context,
    backend: Annotated[str, typer.Argument(help="Backend name")],
    server: Annotated[str, typer.Argument(help="Server name")],
    state: Annotated[ServerState, typer.Argument(help="Target state")],
):
    """Set the administrative state of a server."""
    client: RuntimeClient = ctx.obj
    _run(client.set_server_state(backend, server, state))
    console.print(f"[green]{backend}/{server} set to {state.value}[/green]")


@app.command()
def maintenance(
    ctx: typer.Context,
    backend: Annotated[str, typer.Argument(help="Backend name")],
    server: Annotated[str, typer.Argument(help="Server name")],
    timeout: Annotated[Optional[float], typer.Option("--timeout", "-t", help="Seconds to wait for the drain before forcing maintenance")] = None,
):
    """Drain a server, then put it into maintenance."""
    client: RuntimeClient = ctx.obj
    settings: Settings = ctx.meta["settings"]
    if timeout is None:
        timeout = settings.maintenance.timeout

    result = _run(client.server_maintenance(backend, server, timeout=timeout))

    if result.forced:
        console.print(
            f"[yellow]{backend}/{server} forced into maintenance with "
            f"{result.last_sessions if result.last_sessions is not None else 'unknown'} "
            f"session(s) left[/yellow]"
        )
    else:
        console.print(f"[green]{backend}/{server} drained and in maintenance[/green]")


# Entry point for the CLI
def cli():
    """Main entry point."""
    app()


if __name__ == "__main__":
    cli()

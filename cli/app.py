from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_history, render_live, render_status


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for reading the sensor feed dashboard from a terminal.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show whether the dashboard is connected to the feed."""
    state = _get_state(ctx)
    render_status(state.client.get_status())


@app.command("live")
def live_command(ctx: typer.Context) -> None:
    """Show the latest reading and the recent chart window."""
    state = _get_state(ctx)
    render_live(state.client.get_live())


@app.command("history")
def history_command(
    ctx: typer.Context,
    page: Optional[int] = typer.Option(
        None,
        "--page",
        "-p",
        help="1-based page of the bucketed history; out-of-range values are clamped.",
    ),
) -> None:
    """Show one page of per-minute history, newest first."""
    state = _get_state(ctx)
    render_history(state.client.get_history(page))

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_decision, render_forecast


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the SmartGarden service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="SmartGarden API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("log")
def log_command(
    ctx: typer.Context,
    sensor_id: int = typer.Argument(..., min=0, help="Numeric sensor identifier."),
    moisture_content: int = typer.Argument(..., help="Moisture content between 0 and 100."),
) -> None:
    """Record a moisture reading for a sensor."""
    state = _get_state(ctx)
    confirmation = state.client.log_reading(sensor_id, moisture_content)
    typer.secho(confirmation, fg=typer.colors.GREEN)


@app.command("can-i-water")
def can_i_water_command(
    ctx: typer.Context,
    sensor_id: int = typer.Argument(..., min=0, help="Numeric sensor identifier."),
) -> None:
    """Ask whether a sensor's zone should be watered now."""
    state = _get_state(ctx)
    render_decision(sensor_id, state.client.can_i_water(sensor_id))


@app.command("forecast")
def forecast_command(ctx: typer.Context) -> None:
    """Show the most recent forecast batch."""
    state = _get_state(ctx)
    render_forecast(state.client.get_forecast())

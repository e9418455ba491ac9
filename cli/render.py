from __future__ import annotations

from typing import Any, Dict, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_decision(sensor_id: int, water: bool) -> None:
    if water:
        typer.secho(f"sensor #{sensor_id}: yes, water now", fg=typer.colors.GREEN)
    else:
        typer.secho(f"sensor #{sensor_id}: no watering needed", fg=typer.colors.BLUE)


def _format_row(event: Dict[str, Any]) -> str:
    return (
        f"  {event.get('forecast_time')}  {event.get('weather')} "
        f"({event.get('description')})  temp={event.get('temp')} "
        f"humidity={event.get('humidity')}"
    )


def render_forecast(events: List[Dict[str, Any]]) -> None:
    echo_heading("Current Forecast")
    if not events:
        typer.echo("No forecast data available.")
        return

    first = events[0]
    typer.echo(f"location: {first.get('city')}, {first.get('country')}")
    typer.echo(f"batch_time: {first.get('batch_time')}")
    typer.echo()
    for event in events:
        typer.echo(_format_row(event))

from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

from services.chart import format_fixed, format_sequence


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Feed Status")
    connected = bool(payload.get("connected"))
    typer.secho(
        "DB Connected" if connected else "DB Not Connected",
        fg=typer.colors.GREEN if connected else typer.colors.RED,
    )
    echo_key_values(
        [
            ("points", payload.get("point_count")),
            ("buckets", payload.get("bucket_count")),
        ]
    )
    error = payload.get("error")
    if error:
        typer.secho(f"Error: {error}", fg=typer.colors.RED)


def render_live(payload: Dict[str, Any]) -> None:
    render_status(payload.get("status") or {})

    typer.echo()
    echo_heading("Current Reading")
    current = payload.get("current")
    if current:
        echo_key_values(
            [
                ("temperature", format_fixed(current.get("temperature"), " °C", 1)),
                ("humidity", format_fixed(current.get("humidity"), "%", 1)),
                ("stt", format_sequence(current.get("sequence"))),
                ("last_update", current.get("time_text")),
            ]
        )
    else:
        typer.echo("No data yet.")

    chart = payload.get("chart") or []
    typer.echo()
    echo_heading(f"Recent Points ({len(chart)}/{payload.get('chart_limit')})")
    for row in chart:
        typer.echo(f"  {row.get('display_time')}  {format_fixed(row.get('temperature'), ' °C')}")


def render_history(payload: Dict[str, Any]) -> None:
    echo_heading(
        f"History (page {payload.get('current_page')}/{payload.get('total_pages')}, "
        f"{payload.get('bucket_minutes')}m buckets)"
    )
    rows = payload.get("rows") or []
    if not rows:
        typer.echo("No data to build history from yet.")
    for row in rows:
        point = row.get("point") or {}
        typer.echo(
            "  ".join(
                [
                    str(row.get("time_range")),
                    format_fixed(point.get("temperature"), " °C"),
                    format_fixed(point.get("humidity"), "%"),
                    format_sequence(point.get("sequence")),
                    str(point.get("time_text")),
                ]
            )
        )
    typer.echo()
    typer.echo(f"Total buckets: {payload.get('total_buckets')}")

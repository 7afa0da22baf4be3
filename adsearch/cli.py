"""Command line interface for searching anomaly detectors."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import typer

from adsearch import build_tool, get_status_client
from adsearch.config import load_config
from adsearch.errors import AdSearchError

app = typer.Typer(help="CLI for searching anomaly detectors")

detectors_app = typer.Typer(help="Commands for querying detectors")

app.add_typer(detectors_app, name="detectors")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help="Path to a YAML config file"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """adsearch CLI entry point."""
    logging.basicConfig(level=log_level.upper())
    ctx.obj = load_config(config)


@detectors_app.command("search")
def detectors_search(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, help="Exact detector name"),
    name_pattern: Optional[str] = typer.Option(None, help="Wildcard name pattern"),
    indices: Optional[str] = typer.Option(None, help="Source index"),
    high_cardinality: Optional[bool] = typer.Option(
        None, "--high-cardinality/--single-entity", help="Detector type"
    ),
    last_update_time: Optional[int] = typer.Option(
        None, help="Updated at or after this epoch millis"
    ),
    sort_string: Optional[str] = typer.Option(None, help="Sort field"),
    sort_order: Optional[str] = typer.Option(None, help="asc or desc"),
    size: Optional[int] = typer.Option(None, help="Page size"),
    start_index: Optional[int] = typer.Option(None, help="Page offset"),
    running: Optional[bool] = typer.Option(None, "--running/--not-running"),
    disabled: Optional[bool] = typer.Option(None, "--disabled/--not-disabled"),
    failed: Optional[bool] = typer.Option(None, "--failed/--not-failed"),
    timeout: Optional[float] = typer.Option(
        None, help="Seconds to wait for state lookups"
    ),
) -> None:
    """
    Search detectors and optionally keep only those in the given states.

    Example:
        adsearch detectors search --name-pattern "cpu*" --running
        adsearch detectors search --indices logs --not-disabled --timeout 5
    """
    raw: Dict[str, Any] = {
        "detectorName": name,
        "detectorNamePattern": name_pattern,
        "indices": indices,
        "highCardinality": high_cardinality,
        "lastUpdateTime": last_update_time,
        "sortString": sort_string,
        "sortOrder": sort_order,
        "size": size,
        "startIndex": start_index,
        "running": running,
        "disabled": disabled,
        "failed": failed,
    }
    parameters = {k: v for k, v in raw.items() if v is not None}
    tool = build_tool(ctx.obj)

    async def _run() -> str:
        async with tool:
            return await tool.run(parameters, deadline=timeout)

    try:
        output = asyncio.run(_run())
    except AdSearchError as e:
        typer.secho(f"Failed to search anomaly detectors: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(output)


@detectors_app.command("status")
def detectors_status(ctx: typer.Context, detector_id: str) -> None:
    """Show the live state of a single detector."""
    client = get_status_client(config=ctx.obj)

    async def _fetch():
        try:
            return await client.fetch_status(detector_id)
        finally:
            await client.disconnect()

    try:
        result = asyncio.run(_fetch())
    except Exception as e:
        typer.secho(f"Failed to get anomaly detector profile: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(f"{result.detector_id}\t{result.state.value}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()

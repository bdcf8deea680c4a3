"""CLI for running the sync pipelines inline."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from flight_finder_core.errors import FlightFinderError
from flight_finder_core.weekends import parse_week_offsets

from .runner import run_discovery, run_refresh

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


@click.group()
def cli() -> None:
    """Weekend flight finder sync CLI."""


@cli.command("refresh")
@click.option("--batch-size", type=click.IntRange(1, 100), default=None)
@click.option(
    "--weeks",
    default=None,
    help="Week offsets: a range (3-4), a list (0,2) or one offset.",
)
@click.option("--offset", "offset_destinations", type=click.IntRange(0), default=0)
def refresh(
    batch_size: int | None, weeks: str | None, offset_destinations: int
) -> None:
    """Refresh one batch of stale destinations in the price cache."""
    try:
        offsets = parse_week_offsets(weeks) if weeks else None
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--weeks") from exc
    try:
        result = asyncio.run(
            run_refresh(batch_size, offsets, offset_destinations=offset_destinations)
        )
    except FlightFinderError as exc:
        logger.error("Refresh failed: %s", exc)
        sys.exit(1)
    click.echo(result.model_dump_json(by_alias=True, indent=2))


@cli.command("discover")
def discover() -> None:
    """Discover destinations served from the origin airport."""
    try:
        result = asyncio.run(run_discovery())
    except FlightFinderError as exc:
        logger.error("Discovery failed: %s", exc)
        sys.exit(1)
    click.echo(result.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    cli()

"""
Main CLI entry point for tripcache.

Provides commands for looking up cities and locations and for managing
the response cache.
"""

import asyncio
import json
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import click

from tripcache import __version__
from tripcache.cli.output import (
    print_answer,
    print_cache_stats,
    print_city_profile,
    print_error,
    print_info,
    print_locations,
    print_scheduled_sweep,
    print_success,
)
from tripcache.config import Settings, get_settings
from tripcache.core.exceptions import TripCacheError
from tripcache.log import configure_logging


def run_async(coro):
    """Run an async coroutine to completion."""
    return asyncio.run(coro)


@click.group()
@click.version_option(version=__version__, prog_name="tripcache")
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Cache database file (overrides CACHE_DB_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (overrides LOG_LEVEL).",
)
@click.pass_context
def cli(ctx: click.Context, db_path: Optional[Path], log_level: Optional[str]) -> None:
    """tripcache - travel discovery with a response cache.

    Looks up cities through Gemini, Google Places, Unsplash and Amadeus,
    caching every provider response in a local SQLite database.
    """
    settings = get_settings()
    overrides = {}
    if db_path is not None:
        overrides["cache_db_path"] = db_path
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level, settings.log_json)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, help="Print the profile as JSON.")
@click.option("--no-cache", is_flag=True, help="Bypass the response cache.")
@click.pass_context
def city(ctx: click.Context, query: str, as_json: bool, no_cache: bool) -> None:
    """Show attractions, food, stays and photos for a city.

    \b
    Examples:
        tripcache city paris
        tripcache city "Porto, Portugal" --json
    """
    from tripcache.api import discover

    settings: Settings = ctx.obj["settings"]

    try:
        profile = run_async(discover(query, settings=settings, use_cache=not no_cache))
    except TripCacheError as e:
        print_error(f"Lookup failed: {e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error during lookup: {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(profile.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_city_profile(profile)


@cli.command()
@click.argument("keyword")
@click.option("--sub-type", default="CITY,AIRPORT", show_default=True, help="Amadeus location sub-types.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw response as JSON.")
@click.option("--no-cache", is_flag=True, help="Bypass the response cache.")
@click.pass_context
def locations(ctx: click.Context, keyword: str, sub_type: str, as_json: bool, no_cache: bool) -> None:
    """Search cities and airports by keyword.

    \b
    Examples:
        tripcache locations lon
        tripcache locations paris --sub-type CITY
    """
    from tripcache.api import search_locations

    settings: Settings = ctx.obj["settings"]

    try:
        response = run_async(
            search_locations(keyword, sub_type, settings=settings, use_cache=not no_cache)
        )
    except TripCacheError as e:
        print_error(f"Search failed: {e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error during search: {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(response, indent=2, ensure_ascii=False))
    else:
        print_locations(keyword, response)


@cli.command()
@click.argument("message")
@click.option("--city", "city_name", help="City the question is about.")
@click.pass_context
def ask(ctx: click.Context, message: str, city_name: Optional[str]) -> None:
    """Ask the travel assistant a question.

    \b
    Examples:
        tripcache ask "Where should I eat tonight?" --city Lisbon
        tripcache ask "Best time of year to visit Japan?"
    """
    from tripcache.api import ask as ask_assistant

    settings: Settings = ctx.obj["settings"]

    try:
        answer = run_async(ask_assistant(message, city_name=city_name, settings=settings))
    except TripCacheError as e:
        print_error(f"Assistant failed: {e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error from assistant: {e}")
        sys.exit(1)

    print_answer(answer)


@cli.command()
@click.option("--stats", is_flag=True, help="Show cache statistics.")
@click.option("--flush", is_flag=True, help="Delete every cached entry.")
@click.option("--sweep", is_flag=True, help="Remove expired entries now.")
@click.option("--auto-sweep", is_flag=True, help="Remove expired entries if a sweep is due.")
@click.option(
    "--interval-days",
    type=click.FloatRange(min=0),
    help="Minimum days between automatic sweeps (default: CACHE_SWEEP_INTERVAL_SECONDS).",
)
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON.")
@click.pass_context
def cache(
    ctx: click.Context,
    stats: bool,
    flush: bool,
    sweep: bool,
    auto_sweep: bool,
    interval_days: Optional[float],
    as_json: bool,
) -> None:
    """Manage the response cache.

    Provider responses are cached for CACHE_TTL_SECONDS (7 days by default).
    Expired entries are ignored on read and removed lazily; a sweep removes
    them in bulk.

    \b
    Examples:
        tripcache cache --stats          # Show cache statistics
        tripcache cache --flush          # Clear all cached data
        tripcache cache --sweep          # Remove expired entries
        tripcache cache --auto-sweep     # Sweep only if the last one is old enough
    """
    from tripcache.api import open_maintenance

    settings: Settings = ctx.obj["settings"]

    try:
        maintenance = open_maintenance(settings)
    except TripCacheError as e:
        print_error(f"Cannot open cache: {e}")
        sys.exit(1)

    if flush:
        result = maintenance.flush_all()
        if not result:
            print_error(f"Flush failed: {result.error}")
            sys.exit(1)
        print_success(f"Cache cleared. Removed {result.value} entries.")
    elif sweep:
        result = maintenance.sweep_expired()
        if not result:
            print_error(f"Sweep failed: {result.error}")
            sys.exit(1)
        print_success(f"Sweep complete. Removed {result.value} expired entries.")
    elif auto_sweep:
        interval = timedelta(days=interval_days) if interval_days is not None else None
        outcome = maintenance.run_scheduled_sweep(interval)
        if not outcome.ok:
            print_error(f"Sweep failed: {outcome.result.error}")
            sys.exit(1)
        print_scheduled_sweep(outcome)
    elif stats:
        try:
            cache_stats = maintenance.stats()
        except TripCacheError as e:
            print_error(f"Could not read cache statistics: {e}")
            sys.exit(1)

        if as_json:
            click.echo(json.dumps(cache_stats.to_dict(), indent=2))
        else:
            print_cache_stats(cache_stats)
            print_info("To refresh all data, use: tripcache cache --flush")
    else:
        click.echo(ctx.get_help())


if __name__ == "__main__":
    cli()

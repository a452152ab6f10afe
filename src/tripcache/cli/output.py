"""
Rich terminal output helpers for CLI.

Provides functions for printing city profiles, location results and
cache statistics using the Rich library.
"""

from typing import Any

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from tripcache.core.models import CacheStats, CityProfile, PointOfInterest, ScheduledSweep

# Console instance for all output
console = Console()


def _format_days(seconds: float) -> str:
    return f"{seconds / 86400:.2f} days"


def print_city_profile(profile: CityProfile) -> None:
    """Print a city profile.

    Args:
        profile: CityProfile to display.
    """
    title = f"[bold]{profile.city_name}[/]"
    if profile.country:
        title += f" [dim]{profile.country}[/]"

    console.print()
    console.print(Panel(profile.description or "No description available.", title=title))

    if profile.coordinates:
        console.print(
            f"  [cyan]Coordinates:[/] {profile.coordinates.latitude:.4f}, "
            f"{profile.coordinates.longitude:.4f}"
        )
    if profile.photo:
        credit = f" [dim]({profile.photo.attribution})[/]" if profile.photo.attribution else ""
        console.print(f"  [cyan]Photo:[/] {profile.photo.url}{credit}")

    for heading, places in (
        ("Attractions", profile.attractions),
        ("Kitchens", profile.kitchens),
        ("Stays", profile.stays),
    ):
        if places:
            _print_places(heading, places)

    if profile.points_of_interest:
        table = Table(title="Nearby Points of Interest", box=box.ROUNDED, header_style="bold cyan")
        table.add_column("Name", style="cyan")
        table.add_column("Category")
        table.add_column("Rank", justify="right")
        for poi in profile.points_of_interest[:10]:
            table.add_row(
                str(poi.get("name", "")),
                str(poi.get("category", "")),
                str(poi.get("rank", "")),
            )
        console.print()
        console.print(table)

    for provider, message in profile.errors.items():
        print_warning(f"{provider}: {message}")

    console.print()


def _print_places(heading: str, places: list[PointOfInterest]) -> None:
    table = Table(title=heading, box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Website", style="dim")

    for place in places:
        description = place.description
        if len(description) > 80:
            description = description[:80] + "..."
        table.add_row(place.name, description, place.website or "-")

    console.print()
    console.print(table)


def print_locations(keyword: str, response: Any) -> None:
    """Print Amadeus location search results."""
    locations = (response or {}).get("data") or []
    if not locations:
        print_info(f"No locations found for '{keyword}'.")
        return

    table = Table(title=f"Locations matching '{keyword}'", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Country", style="dim")

    for location in locations:
        address = location.get("address") or {}
        table.add_row(
            location.get("iataCode", "-"),
            location.get("detailedName") or location.get("name", ""),
            location.get("subType", ""),
            address.get("countryName") or address.get("countryCode", ""),
        )

    console.print()
    console.print(table)


def print_cache_stats(stats: CacheStats) -> None:
    """Print cache statistics."""
    console.print("\n[bold cyan]Cache Statistics[/]")
    console.print(f"  Database: {stats.db_path}")
    console.print(f"  Size: {stats.db_size_bytes / 1024:.1f} KB")
    console.print(f"  Total entries: {stats.total}")
    console.print(f"  [green]Active entries:[/] {stats.active}")
    console.print(f"  [yellow]Expired entries:[/] {stats.expired}")

    if stats.by_endpoint:
        table = Table(box=box.SIMPLE, header_style="bold")
        table.add_column("Endpoint", style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Active", justify="right")
        for endpoint, count in stats.by_endpoint.items():
            table.add_row(endpoint, str(count), str(stats.active_by_endpoint.get(endpoint, 0)))
        console.print(table)

    if stats.last_sweep:
        sweep = stats.last_sweep
        console.print(
            f"  Last sweep: {sweep.timestamp.strftime('%Y-%m-%d %H:%M UTC')} "
            f"({sweep.deleted_count} removed in {sweep.duration_ms:.0f} ms)"
        )
    else:
        console.print("  Last sweep: [dim]never[/]")


def print_scheduled_sweep(outcome: ScheduledSweep) -> None:
    """Print the outcome of an interval-gated sweep."""
    since = (
        f"{_format_days(outcome.since_last.total_seconds())} since last sweep"
        if outcome.since_last is not None
        else "no previous sweep"
    )
    if outcome.ran and outcome.result is not None and outcome.result.ok:
        print_success(f"Sweep performed ({since}). Removed {outcome.result.value} entries.")
    elif not outcome.ran:
        print_info(
            f"Sweep not needed yet ({since}). "
            f"Next due in {_format_days(outcome.next_due_in.total_seconds())}."
        )


def print_answer(answer: str) -> None:
    """Print an assistant answer rendered as Markdown."""
    console.print()
    console.print(Panel(Markdown(answer), title="[bold]Travel assistant[/]", border_style="cyan"))
    console.print()


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {message}")

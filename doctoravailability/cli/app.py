"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters import build_event_source
from ..config import AppConfig, EventSourceConfig, get_default_config_path
from ..domain.exceptions import AvailabilityError
from ..domain.models import AvailabilitiesResponse, calendar_day
from ..domain.results import NotFound, ValidationError
from ..services.availability_finder import AvailabilityFinderService

app = typer.Typer(
    name="doctoravailability",
    help="Find a doctor's free appointment slots",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], events_file: Optional[Path]) -> AppConfig:
    """
    Load the YAML config; without one, an events file alone is enough.
    """
    config_path = config_file or get_default_config_path()

    if config_file is None and events_file is not None and not config_path.exists():
        return AppConfig(event_source=EventSourceConfig(kind="json", events_file=events_file))

    return AppConfig.load_from_yaml(config_path)


def _parse_start_date(start: Optional[str], tz: str):
    if not start:
        return pendulum.now(tz).start_of("day")

    try:
        return pendulum.from_format(start, "YYYY-MM-DD", tz=tz).start_of("day")
    except ValueError as e:
        console.print(f"[red]Could not parse start date: {e}[/red]")
        raise typer.Exit(1)


def render_response(response: AvailabilitiesResponse, doctor_name: str) -> Table:
    """Build a table with one row per day of the window."""
    table = Table(
        title=f"Free slots for {doctor_name}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Free intervals")

    for day_key, slots in response.available_slots.items():
        if slots:
            table.add_row(day_key, "\n".join(slot.format_display() for slot in slots))
        else:
            table.add_row(day_key, "[dim]no availability[/dim]")

    return table


@app.command()
def find(
    doctor: Annotated[str, typer.Argument(help="Doctor id or configured name.")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", min=1, help="Number of days to look ahead.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    events_file: Annotated[Optional[Path], typer.Option("--events-file", help="Read events from this JSON file instead of the configured source.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Find free appointment slots for a doctor.

    Examples:

        doctoravailability find 1

        doctoravailability find smith --start 2025-03-12 --days 3

        doctoravailability find 1 --events-file events.json
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, events_file)
        tz = config.timezone

        doctor_id = config.resolve_doctor(doctor)
        known = config.find_doctor_by_id(doctor_id)
        doctor_name = known.display_name() if known else f"doctor {doctor_id}"

        start_date = _parse_start_date(start, tz)
        lookahead_days = days if days is not None else config.defaults.lookahead_days

        with build_event_source(config, events_file) as event_source:
            service = AvailabilityFinderService(
                event_source=event_source,
                clock=lambda: calendar_day(pendulum.now(tz)),
                day_key_format=config.defaults.day_key_format,
                timeout_seconds=config.event_source.timeout_seconds,
            )

            result = asyncio.run(
                service.find_available_slots(
                    doctor_id=doctor_id,
                    start_date=start_date,
                    lookahead_days=lookahead_days,
                )
            )

    except (FileNotFoundError, AvailabilityError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if isinstance(result, ValidationError):
        console.print(f"[bold red]Invalid request:[/bold red] {result.message}")
        raise typer.Exit(1)

    if isinstance(result, NotFound):
        console.print(
            f"[yellow]⚠ No calendar events for {doctor_name} "
            f"in the {lookahead_days} days from {start_date.format('YYYY-MM-DD')}.[/yellow]"
        )
        raise typer.Exit(1)

    response = AvailabilitiesResponse(doctor_id=doctor_id, available_slots=result.slots)

    console.print()
    console.print(render_response(response, doctor_name))
    console.print(f"\n[bold green]✓ {response.total_slots()} free interval(s) found[/bold green]\n")


@app.command()
def list_doctors(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List all configured doctors.
    """
    try:
        config_path = config_file or get_default_config_path()
        config = AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not config.doctors:
        console.print("[yellow]No doctors defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured doctors",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name (Alias)", style="bold yellow")
    table.add_column("Doctor ID", style="dim")

    for doctor in config.doctors:
        table.add_row(doctor.name, str(doctor.doctor_id))

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]doctoravailability[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

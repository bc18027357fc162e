"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional, Union

import pendulum
import typer
from pendulum import Date, DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BusinessDayError
from ..domain.models import COMMON_TIMEZONES, BusinessDayBounds, LocationTimeConfig
from ..domain.resolver import BusinessDayResolver
from ..services.date_range_filter import DateRangeFilterService

app = typer.Typer(
    name="businessday",
    help="Resolve operating day boundaries for bar and restaurant locations",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
LocationOption = Annotated[Optional[str], typer.Option("--location", "-l", help="Configured location name")]
CloseTimeOption = Annotated[Optional[str], typer.Option("--close-time", help="Business close time (HH:MM), overrides config")]
TimezoneOption = Annotated[Optional[str], typer.Option("--timezone", "--tz", help="IANA timezone, overrides config. See 'businessday timezones'")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print bounds as JSON")]


class _Context:
    """Resolved settings shared by every command."""

    def __init__(self, config: AppConfig, time_config: LocationTimeConfig, resolver: BusinessDayResolver):
        self.config = config
        self.time_config = time_config
        self.resolver = resolver


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """
    Operating day tools. A location's operating day starts at its business
    close time, so late-night sales count toward the previous day.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load an explicit config file, the default one if present, or defaults."""
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()


def _build_context(
    *,
    config_file: Optional[Path],
    location: Optional[str],
    close_time: Optional[str],
    timezone: Optional[str],
) -> _Context:
    config = _load_config(config_file)
    resolver = config.build_resolver()
    location_timezone = None

    if location:
        service = DateRangeFilterService(
            resolver,
            provider=config,
            fallback_timezone=config.timezone,
        )
        base = service.time_config_for_location(location)
        # A location with only a timezone still keeps its own zone
        location_timezone = config.find_location(location).timezone
    else:
        base = config.default_time_config()

    time_config = LocationTimeConfig(
        business_close_time=close_time or base.business_close_time,
        timezone=timezone or location_timezone or base.timezone,
    ).validate()

    return _Context(config=config, time_config=time_config, resolver=resolver)


def _parse_when(value: str, tz: str) -> Union[Date, DateTime]:
    """
    Parse a command line date or datetime.

    A bare date (YYYY-MM-DD) names the operating day starting on it; a
    datetime without an offset is read in the location's timezone.
    """
    try:
        parsed = pendulum.parse(value, tz=tz, exact=True)
    except ValueError as exc:
        raise typer.BadParameter(f"Cannot parse date '{value}': {exc}") from exc

    if not isinstance(parsed, (Date, DateTime)):
        raise typer.BadParameter(f"Expected a date or datetime, got '{value}'")
    return parsed


def _print_bounds(bounds: BusinessDayBounds, tz: str, *, title: str, as_json: bool) -> None:
    if as_json:
        data = bounds.to_dict()
        data["timezone"] = tz
        console.print_json(data=data)
        return

    local = bounds.in_timezone(tz)
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("", style="bold yellow")
    table.add_column("UTC")
    table.add_column(f"Local ({tz})", style="dim")
    table.add_row("Start", bounds.start.to_iso8601_string(), local.start.to_iso8601_string())
    table.add_row("End", bounds.end.to_iso8601_string(), local.end.to_iso8601_string())

    console.print()
    console.print(table)
    console.print()


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(1)


@app.command()
def bounds(
    when: Annotated[Optional[str], typer.Argument(help="Date or datetime; defaults to now")] = None,
    config_file: ConfigOption = None,
    location: LocationOption = None,
    close_time: CloseTimeOption = None,
    timezone: TimezoneOption = None,
    as_json: JsonOption = False,
):
    """
    Show the operating day containing a point in time.

    Examples:

        businessday bounds "2024-06-18 01:30" --close-time 02:00 --tz America/New_York

        businessday bounds 2024-06-18 --location downtown --json
    """
    try:
        ctx = _build_context(config_file=config_file, location=location, close_time=close_time, timezone=timezone)
        tz = ctx.time_config.timezone

        if when is None:
            result = ctx.resolver.resolve_bounds_for_today(ctx.time_config)
        else:
            result = ctx.resolver.resolve_bounds(_parse_when(when, tz), ctx.time_config)

        _print_bounds(result, tz, title="Operating day", as_json=as_json)

    except (BusinessDayError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def today(
    config_file: ConfigOption = None,
    location: LocationOption = None,
    close_time: CloseTimeOption = None,
    timezone: TimezoneOption = None,
    as_json: JsonOption = False,
):
    """
    Show the operating day in progress.
    """
    try:
        ctx = _build_context(config_file=config_file, location=location, close_time=close_time, timezone=timezone)
        result = ctx.resolver.resolve_bounds_for_today(ctx.time_config)
        _print_bounds(result, ctx.time_config.timezone, title="Today", as_json=as_json)

    except (BusinessDayError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def yesterday(
    config_file: ConfigOption = None,
    location: LocationOption = None,
    close_time: CloseTimeOption = None,
    timezone: TimezoneOption = None,
    as_json: JsonOption = False,
):
    """
    Show the previous operating day.
    """
    try:
        ctx = _build_context(config_file=config_file, location=location, close_time=close_time, timezone=timezone)
        result = ctx.resolver.resolve_bounds_for_yesterday(ctx.time_config)
        _print_bounds(result, ctx.time_config.timezone, title="Yesterday", as_json=as_json)

    except (BusinessDayError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("range")
def range_(
    start: Annotated[str, typer.Argument(help="First date (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    location: LocationOption = None,
    close_time: CloseTimeOption = None,
    timezone: TimezoneOption = None,
):
    """
    List every operating day between two dates.
    """
    try:
        ctx = _build_context(config_file=config_file, location=location, close_time=close_time, timezone=timezone)
        tz = ctx.time_config.timezone

        days = ctx.resolver.resolve_range(_parse_when(start, tz), _parse_when(end, tz), ctx.time_config)

        if not days:
            console.print("[yellow]⚠ No operating days in that range.[/yellow]")
            return

        table = Table(
            title=f"Operating days ({ctx.time_config.business_close_time} close, {tz})",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Day", style="bold yellow")
        table.add_column("Start (UTC)")
        table.add_column("End (UTC)")

        for operating_day in days:
            table.add_row(
                operating_day.start.in_timezone(tz).format("YYYY-MM-DD"),
                operating_day.start.to_iso8601_string(),
                operating_day.end.to_iso8601_string(),
            )

        console.print()
        console.print(table)
        console.print()

    except (BusinessDayError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def collapse(
    start: Annotated[str, typer.Argument(help="First date or datetime")],
    end: Annotated[str, typer.Argument(help="Last date or datetime")],
    config_file: ConfigOption = None,
    location: LocationOption = None,
    close_time: CloseTimeOption = None,
    timezone: TimezoneOption = None,
    as_json: JsonOption = False,
):
    """
    Convert a date range into UTC query filter bounds.
    """
    try:
        ctx = _build_context(config_file=config_file, location=location, close_time=close_time, timezone=timezone)
        tz = ctx.time_config.timezone

        result = ctx.resolver.collapse_range_to_bounds(
            _parse_when(start, tz),
            _parse_when(end, tz),
            ctx.time_config,
        )
        _print_bounds(result, tz, title="Filter bounds", as_json=as_json)

    except (BusinessDayError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def day(
    timestamp: Annotated[str, typer.Argument(help="Timestamp (ISO-8601); no offset means location time")],
    config_file: ConfigOption = None,
    location: LocationOption = None,
    close_time: CloseTimeOption = None,
    timezone: TimezoneOption = None,
):
    """
    Show which operating day a timestamp belongs to.
    """
    try:
        ctx = _build_context(config_file=config_file, location=location, close_time=close_time, timezone=timezone)
        moment = _parse_when(timestamp, ctx.time_config.timezone)

        operating_day = ctx.resolver.find_operating_day(moment, ctx.time_config)
        console.print(operating_day.to_date_string())

    except (BusinessDayError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def list_locations(
    config_file: ConfigOption = None,
):
    """
    List all configured locations.
    """
    try:
        config = _load_config(config_file)

        if not config.locations:
            console.print("[yellow]No locations defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured locations",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name", style="bold yellow")
        table.add_column("Close time")
        table.add_column("Timezone", style="dim")

        for location in config.locations:
            table.add_row(
                location.name,
                location.business_close_time or "-",
                location.timezone or "-",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def timezones():
    """
    List commonly used timezones with their current UTC offset.
    """
    now = pendulum.now("UTC")

    table = Table(
        title="Common timezones",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Timezone", style="bold yellow")
    table.add_column("UTC offset")
    table.add_column("Local time", style="dim")

    for name in COMMON_TIMEZONES:
        local = now.in_timezone(name)
        table.add_row(name, local.format("Z"), local.format("HH:mm"))

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]businessday[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

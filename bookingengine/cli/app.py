"""
Main CLI application using Typer.
"""

import asyncio
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..adapters.availability_client import AvailabilityClient
from ..adapters.mock_availability_client import MockAvailabilityClient
from ..adapters.payloads import index_services
from ..config import AppConfig, load_config
from ..domain.calendar_navigator import WEEKDAY_LABELS, CalendarNavigator
from ..domain.dates import parse_date_key, parse_time_slot, today
from ..domain.exceptions import BookingEngineError, ValidationConflict
from ..domain.models import Technician, WorkloadLevel
from ..domain.reservation_planner import ReservationPlanner
from ..domain.time_slots import BusinessHours
from ..domain.workload import WorkdayWindow, WorkloadAggregator
from ..services.availability_store import AvailabilityStore, build_default_seed
from ..services.booking_flow import BookingFlow, Customer

app = typer.Typer(
    name="bookingengine",
    help="Availability and scheduling tools for home-service bookings",
    add_completion=False
)

console = Console()

DEFAULT_STATE_FILE = Path.home() / ".bookingengine_mock_availability.json"

LEVEL_STYLES = {
    WorkloadLevel.LOW: "green",
    WorkloadLevel.MEDIUM: "yellow",
    WorkloadLevel.HIGH: "red",
}

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the backend.")]
StateFileOption = Annotated[Optional[Path], typer.Option("--state-file", help="Where mock mode keeps committed availability.")]


def business_hours_from_config(config: AppConfig) -> BusinessHours:
    hours = config.business_hours
    return BusinessHours(
        start_hour=hours.start_hour,
        end_hour=hours.end_hour,
        break_start=hours.break_start,
        break_end=hours.break_end,
        interval_minutes=hours.interval_minutes,
    )


def workday_from_config(config: AppConfig) -> WorkdayWindow:
    workload = config.workload
    return WorkdayWindow(
        start_hour=workload.start_hour,
        end_hour=workload.end_hour,
        unpaid_break_minutes=workload.unpaid_break_minutes,
        default_duration_minutes=workload.default_duration_minutes,
        medium_threshold=workload.medium_threshold,
        high_threshold=workload.high_threshold,
    )


def build_client(config: AppConfig, mock: bool, state_file: Optional[Path]):
    if mock:
        return MockAvailabilityClient(state_file=state_file or DEFAULT_STATE_FILE)
    return AvailabilityClient(base_url=config.api.base_url, timeout=config.api.timeout_seconds)


def build_store(config: AppConfig, client) -> AvailabilityStore:
    seed = build_default_seed(
        fully_booked_offsets=config.seed.fully_booked_day_offsets,
        booked_slots=[(slot.offset_days, slot.time) for slot in config.seed.booked_slots],
        reference=today(config.timezone),
    )
    return AvailabilityStore(client=client, default_seed=seed)


def _technicians(config: AppConfig, client) -> List[Technician]:
    technicians = config.get_technicians()
    if not technicians and isinstance(client, MockAvailabilityClient):
        technicians = client.get_technicians()
    return technicians


def _describe_segment(segment, day) -> str:
    booking = segment.booking
    if booking.start_date != day:
        return f"{booking.service} (continued, {booking.schedule_label()}) - {booking.customer_name}"
    return f"{booking.time} {booking.service} ({segment.duration_minutes} min) - {booking.customer_name}"


def _parse_date_option(value: str) -> pendulum.Date:
    try:
        return parse_date_key(value)
    except ValueError as e:
        console.print(f"[red]Error parsing date: {e}[/red]")
        raise typer.Exit(1)


def _load_store(config_file: Optional[Path], mock: bool, state_file: Optional[Path]):
    config = load_config(config_file)
    client = build_client(config, mock, state_file)
    store = build_store(config, client)
    asyncio.run(store.load())
    return config, client, store


def _commit(store: AvailabilityStore) -> None:
    if not store.has_unsaved_changes():
        console.print("[dim]No changes to save.[/dim]")
        return
    asyncio.run(store.commit())
    console.print("[green]✓ Changes saved[/green]")


@app.command()
def slots(
    config_file: ConfigOption = None,
):
    """
    Show the bookable time slots of a business day.
    """
    try:
        config = load_config(config_file)
        hours = business_hours_from_config(config)
        time_slots = hours.time_slots()

        console.print(
            f"\n[bold cyan]Business hours[/bold cyan] {hours.start_hour:02d}:00 - {hours.end_hour:02d}:00 "
            f"(break {hours.break_start:02d}:00 - {hours.break_end:02d}:00, every {hours.interval_minutes} min)\n"
        )
        console.print("  " + "  ".join(time_slots))
        console.print(f"\n[green]✓ {len(time_slots)} slot(s)[/green]\n")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def calendar(
    month: Annotated[Optional[str], typer.Option("--month", "-m", help="Month to show (YYYY-MM). Defaults to the current month.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    state_file: StateFileOption = None,
):
    """
    Render a month with fully-booked days marked.
    """
    try:
        config, _, store = _load_store(config_file, mock, state_file)
        reference = today(config.timezone)
        focus = _parse_date_option(f"{month}-01") if month else reference

        navigator = CalendarNavigator(
            selected_date=None,
            fully_booked_dates=store.committed.fully_booked_dates,
            today=reference,
        )
        navigator.move_focus(focus)

        table = Table(title=navigator.month_label(), show_header=True, header_style="bold cyan")
        for label in WEEKDAY_LABELS:
            table.add_column(label, justify="center")

        for week in navigator.cells():
            row = []
            for cell in week:
                if cell is None:
                    row.append("")
                elif cell.is_fully_booked:
                    row.append(f"[red strike]{cell.date.day}[/red strike]")
                elif cell.is_past:
                    row.append(f"[dim]{cell.date.day}[/dim]")
                elif cell.is_today:
                    row.append(f"[bold green]{cell.date.day}[/bold green]")
                else:
                    row.append(str(cell.date.day))
            table.add_row(*row)

        console.print()
        console.print(table)
        console.print("[dim]Struck-through days are fully booked.[/dim]\n")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def availability(
    config_file: ConfigOption = None,
    mock: MockOption = False,
    state_file: StateFileOption = None,
):
    """
    List fully-booked dates and booked slots.
    """
    try:
        _, _, store = _load_store(config_file, mock, state_file)
        snapshot = store.committed

        table = Table(title="Fully booked dates", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold yellow")
        table.add_column("Weekday", style="dim")
        for key in snapshot.sorted_fully_booked():
            table.add_row(key, parse_date_key(key).format("dddd"))

        console.print()
        if snapshot.fully_booked_dates:
            console.print(table)
        else:
            console.print("[yellow]No fully booked dates.[/yellow]")

        console.print("\n[bold cyan]Booked slots[/bold cyan]")
        for key in snapshot.sorted_booked_slots():
            console.print(f"  {key}")
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def block(
    date: Annotated[str, typer.Argument(help="Day to block or unblock (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    state_file: StateFileOption = None,
):
    """
    Toggle a whole day between blocked and open.
    """
    day = _parse_date_option(date)

    try:
        _, _, store = _load_store(config_file, mock, state_file)
        blocked = store.toggle_full_day(day)
        console.print(f"{date}: {'[red]blocked[/red]' if blocked else '[green]open[/green]'}")
        _commit(store)

    except (FileNotFoundError, ValueError, BookingEngineError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def toggle_slot(
    date: Annotated[str, typer.Argument(help="Day of the slot (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Slot start (HH:MM)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    state_file: StateFileOption = None,
):
    """
    Toggle a single slot between booked and free.
    """
    day = _parse_date_option(date)

    try:
        config, _, store = _load_store(config_file, mock, state_file)
        parse_time_slot(time)

        if time not in business_hours_from_config(config).time_slots():
            console.print(f"[yellow]Warning: {time} is not one of the generated slots[/yellow]")
        if store.draft.is_fully_booked(day):
            console.print(f"[yellow]Note: {date} is fully booked; the slot has no effect until it is opened[/yellow]")

        booked = store.toggle_slot(day, time)
        console.print(f"{date} {time}: {'[red]booked[/red]' if booked else '[green]free[/green]'}")
        _commit(store)

    except (FileNotFoundError, ValueError, BookingEngineError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def book(
    service_id: Annotated[int, typer.Argument(help="Service id from the catalog")],
    date: Annotated[str, typer.Argument(help="Start date (YYYY-MM-DD)")],
    time: Annotated[Optional[str], typer.Argument(help="Start time (HH:MM). Omit to list free times.")] = None,
    name: Annotated[str, typer.Option("--name", "-n", help="Customer name")] = "Walk-in customer",
    config_file: ConfigOption = None,
    mock: MockOption = False,
    state_file: StateFileOption = None,
):
    """
    Reserve a service starting on a date, or list its free times.
    """
    day = _parse_date_option(date)

    try:
        config, client, store = _load_store(config_file, mock, state_file)
        services = {service.id: service for service in client.get_services()}

        service = services.get(service_id)
        if service is None:
            console.print(f"[bold red]Error:[/bold red] Unknown service id {service_id}")
            raise typer.Exit(1)

        planner = ReservationPlanner(business_hours_from_config(config), workday_from_config(config))
        flow = BookingFlow(store=store, planner=planner)
        flow.choose_service(service)
        plan = flow.select_date(day)

        console.print(
            f"\n[bold cyan]{service.name}[/bold cyan] occupies {len(plan.dates)} day(s): "
            f"{', '.join(plan.dates)}"
        )

        if time is None:
            free = flow.available_times()
            console.print(f"Free times on {plan.start_key}: {'  '.join(free) if free else '[yellow]none[/yellow]'}\n")
            return

        request = asyncio.run(flow.confirm(time, Customer(name=name)))
        console.print(Panel.fit(
            f"[bold green]✓ Reserved[/bold green]\n\n"
            f"[bold]Service:[/bold] {request.service.name}\n"
            f"[bold]Schedule:[/bold] {request.date} {request.time}"
            + (f" until {request.end_date}" if request.end_date != request.date else "")
            + f"\n[bold]Customer:[/bold] {request.customer.name}",
            title="Booking"
        ))
        console.print()

    except ValidationConflict as e:
        console.print(f"[bold red]Not available:[/bold red] {e}")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, BookingEngineError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def workload(
    date: Annotated[Optional[str], typer.Argument(help="Day to report (YYYY-MM-DD). Defaults to today.")] = None,
    technician: Annotated[Optional[str], typer.Option("--technician", "-t", help="Only this technician (id or name).")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show each technician's committed minutes and timeline for a day.
    """
    try:
        config = load_config(config_file)
        day = _parse_date_option(date) if date else today(config.timezone)
        client = build_client(config, mock, None)

        catalog = client.get_services()
        bookings = client.get_bookings(catalog, config.timezone)
        technicians = _technicians(config, client)

        if technician:
            match = config.find_technician(technician) or next(
                (t for t in technicians if str(t.id) == technician or t.name.lower() == technician.lower()),
                None,
            )
            if match is None:
                console.print(f"[bold red]Error:[/bold red] Unknown technician '{technician}'")
                raise typer.Exit(1)
            technicians = [match]

        aggregator = WorkloadAggregator(workday_from_config(config))
        loads = aggregator.team_load(technicians, day, bookings, index_services(catalog))

        table = Table(
            title=f"Technician schedule for {day.format('dddd, D MMMM YYYY')}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Technician", style="bold yellow")
        table.add_column("Workload", justify="right")
        table.add_column("Bookings")

        capacity_hours = aggregator.window.capacity_minutes / 60
        for load in loads:
            style = LEVEL_STYLES[load.level]
            entries = [_describe_segment(segment, day) for segment in load.segments]
            table.add_row(
                load.technician.name,
                f"[{style}]{load.total_hours:.1f} / {capacity_hours:g} h ({load.percentage:.0f}%)[/{style}]",
                "\n".join(entries) or "[dim]-[/dim]",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, BookingEngineError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingengine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

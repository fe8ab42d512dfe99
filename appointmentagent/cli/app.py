"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..config import AppConfig, load_config
from ..domain.exceptions import AppointmentAgentError
from ..services.appointment_service import create_service

app = typer.Typer(
    name="appointmentagent",
    help="Find open appointment slots and book appointments in Google Calendar",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use bundled mock calendar data instead of Google Calendar."),
]
DurationOption = Annotated[
    Optional[int],
    typer.Option("--duration", "-d", help="Slot length in minutes (default: slot_granularity)"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Appointment availability and booking for the voice agent.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path]) -> AppConfig:
    try:
        return load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def find(
    date: Annotated[str, typer.Argument(help="Day to inspect, e.g. 2025-06-20 or 20/06/2025")],
    duration: DurationOption = None,
    timezone: Annotated[Optional[str], typer.Option("--tz", help="IANA timezone (default from config)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List the open appointment slots of one day.

    Examples:

        appointmentagent find 2025-06-20
        appointmentagent find 20/06/2025 --duration 60
        appointmentagent find 2025-06-20 --mock
    """
    config = _load(config_file)
    tz = timezone or config.timezone

    if mock:
        console.print("[yellow]⚠  MOCK MODE: using test data[/yellow]\n")

    try:
        service = create_service(config, mock=mock)
        slots = service.get_availability(date, duration_minutes=duration, timezone=tz)
    except AppointmentAgentError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    window = f"{config.work_start.strftime('%H:%M')} - {config.work_end.strftime('%H:%M')}"
    if not slots:
        console.print(
            f"[yellow]⚠ No open slots on {date} ({window}, {tz}).[/yellow]\n"
            "Try another day or a shorter duration."
        )
        return

    table = Table(
        title=f"{len(slots)} open slot(s) · {window} · {tz}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Slot", style="bold")
    table.add_column("Start (ISO 8601)", style="dim")

    for idx, slot in enumerate(slots, 1):
        table.add_row(str(idx), slot.format_display(tz), slot.to_dict(tz)["start"])

    console.print()
    console.print(table)
    console.print()


@app.command()
def book(
    date: Annotated[str, typer.Argument(help="Day of the appointment, e.g. 2025-06-20")],
    time: Annotated[str, typer.Argument(help="Local start time, 24-hour, e.g. 15:30")],
    name: Annotated[str, typer.Argument(help="Full name of the person booking")],
    phone: Annotated[Optional[str], typer.Option("--phone", help="Contact phone number")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Event description")] = None,
    duration: DurationOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book an appointment. No conflict check is made; run `find` first.
    """
    config = _load(config_file)

    if mock:
        console.print("[yellow]⚠  MOCK MODE: the event is not written anywhere[/yellow]\n")

    try:
        service = create_service(config, mock=mock)
        request = service.build_booking_request(
            date=date,
            time=time,
            name=name,
            phone=phone,
            description=description,
            duration_minutes=duration,
        )
        event = service.book_appointment(request)
    except AppointmentAgentError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Appointment booked[/bold green]\n\n"
        f"[bold]Summary:[/bold] {event.summary}\n"
        f"[bold]Start:[/bold] {event.start}\n"
        f"[bold]End:[/bold] {event.end}\n"
        f"[bold]Event ID:[/bold] {event.event_id}",
        title="✓ Booking"
    ))


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address (default from config)")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port (default from config or $PORT)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Run the HTTP API for the voice agent.
    """
    import uvicorn

    from ..api.app import create_app

    config = _load(config_file)
    bind_host = host or config.server.host
    bind_port = port or config.server.port

    console.print(f"[bold cyan]🚀 API ready on http://{bind_host}:{bind_port}[/bold cyan]")
    uvicorn.run(create_app(config, mock=mock), host=bind_host, port=bind_port)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]appointmentagent[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

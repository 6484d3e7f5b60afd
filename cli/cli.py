"""Developer CLI for the network performance dashboard backend.

Runs the same calendar, code-generation and API code paths as production
from a terminal.
"""

import sys
from datetime import date
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

# Bootstrap must be imported before app imports to set up sys.path correctly
try:
    import cli.bootstrap  # noqa: F401
except ImportError:
    _project_root = Path(__file__).parent.parent
    if str(_project_root) not in sys.path:
        sys.path.insert(0, str(_project_root))

from app.calendar.weeks import calculate_week_range, locate_week
from app.codes.generator import next_code
from app.db.session import get_session

app = typer.Typer(
    name="netperf",
    help="Network performance dashboard developer CLI",
    no_args_is_help=True,
)
console = Console()

DEFAULT_HOST = "127.0.0.1"


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        console.print(f"[red]Invalid date {value!r}, expected YYYY-MM-DD[/red]")
        raise typer.Exit(1) from e


@app.command()
def weeks(reference_date: str = typer.Argument(..., help="Reference date (YYYY-MM-DD)")):
    """Print the 7-week window around a reference date."""
    window = calculate_week_range(_parse_date(reference_date))
    table = Table(title=f"Week window for {reference_date}")
    table.add_column("Offset", justify="right")
    table.add_column("Label")
    table.add_column("Start")
    table.add_column("End")
    for bucket in window:
        table.add_row(f"{bucket.offset:+d}", bucket.label, bucket.start_date.isoformat(), bucket.end_date.isoformat())
    console.print(table)


@app.command()
def locate(
    reference_date: str = typer.Argument(..., help="Reference date (YYYY-MM-DD)"),
    day: str = typer.Argument(..., help="Date to locate (YYYY-MM-DD)"),
):
    """Print which week offset contains a day."""
    offset = locate_week(_parse_date(day), calculate_week_range(_parse_date(reference_date)))
    if offset is None:
        console.print(f"[yellow]{day} is outside the window around {reference_date}[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]{day} is in week {offset:+d}[/green]")


@app.command("next-code")
def next_code_command(
    resource: str = typer.Argument(..., help="Table name"),
    code_field: str = typer.Option("codigo", "--code-field", "-f", help="Code column"),
):
    """Print the next sequential code for a table."""
    try:
        with get_session() as session:
            code = next_code(session, resource, code_field)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    console.print(code)


@app.command()
def serve(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Run the API server."""
    console.print(f"[green]Starting API on http://{host}:{port}[/green]")
    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()

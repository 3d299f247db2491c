"""
MaisQueCardapio CLI.

Command-line interface for database setup and subscription maintenance.
Run from the backend directory: python cli.py --help
"""

import asyncio
import sys

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

app = typer.Typer(
    name="maisquecardapio",
    help="MaisQueCardapio management CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create tables, seed plans and migrate legacy settings."""
    from rest_api.core.lifespan import init_database

    console.print("[blue]Initializing database[/blue]")
    try:
        init_database()
    except Exception as e:
        console.print(f"[red]✗ Initialization failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Database ready[/green]")


@app.command()
def seed_demo(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed plans and the demo establishment (slug 'demo', password admin123)."""
    from shared.config.settings import settings
    from shared.infrastructure.db import get_db_context
    from rest_api.seed import seed

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    with get_db_context() as db:
        seed(db, demo=True)
    console.print("[green]✓ Demo data seeded[/green]")


@app.command()
def migrate_settings():
    """Rename legacy setting keys for every establishment."""
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import migrate_all_legacy_settings

    with get_db_context() as db:
        migrated = migrate_all_legacy_settings(db)
    console.print(f"[green]✓ {migrated} legacy setting rows migrated[/green]")


# =============================================================================
# Subscription Commands
# =============================================================================

@app.command()
def check_subscriptions():
    """Send expiry reminders and downgrade expired premium establishments."""
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import SubscriptionService
    from rest_api.services.notifications import get_notification_dispatcher

    async def _check():
        with get_db_context() as db:
            return await SubscriptionService(db, get_notification_dispatcher()).check_subscriptions()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Checking subscriptions...", total=None)
        report = asyncio.run(_check())

    table = Table(title="Subscription Check")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green")
    for metric, count in report.model_dump().items():
        table.add_row(metric, str(count))
    console.print(table)

    if report.errors:
        raise typer.Exit(1)


@app.command()
def list_establishments():
    """List establishments with plan and paid-until date."""
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import EstablishmentService

    with get_db_context() as db:
        rows = EstablishmentService(db).list_with_plan()

    table = Table(title="Establishments")
    table.add_column("ID", style="cyan")
    table.add_column("Slug", style="cyan")
    table.add_column("Name")
    table.add_column("Plan", style="green")
    table.add_column("Status", style="yellow")
    table.add_column("Paid until")

    for row in rows:
        table.add_row(
            str(row["id"]),
            row["slug"],
            row["name"],
            row["plan_code"],
            row["status"],
            str(row["paid_until"] or "-"),
        )
    console.print(table)


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    url: str = typer.Option("http://localhost:3000/api/health/detailed", help="Health endpoint"),
):
    """Check the running REST API."""
    import time
    import httpx

    start = time.time()
    try:
        response = httpx.get(url, timeout=5.0)
    except httpx.HTTPError as e:
        console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)
    elapsed = (time.time() - start) * 1000

    if response.status_code == 200:
        console.print(f"[green]✓ Healthy ({elapsed:.0f}ms)[/green]")
    else:
        console.print(f"[red]✗ Status {response.status_code} ({elapsed:.0f}ms)[/red]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = Table(title="MaisQueCardapio Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()

"""Init command implementation"""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from jurisai.errors import StorageError
from jurisai.utils.config import get_settings

console = Console()

MIGRATION_PATH = Path(__file__).parent.parent / "db" / "migrations" / "001_supabase.sql"


def init_command(store_factory):
    """Initialize the entity store and working directories"""
    settings = get_settings()
    console.print(Panel.fit(
        "[bold blue]Initializing JurisAI[/bold blue]",
        border_style="blue"
    ))

    console.print(f"\n[yellow]1. Initializing entity store ({settings.db_mode})...[/yellow]")
    if settings.db_mode == "supabase":
        console.print(f"[blue]   SQL migration file:[/blue] {MIGRATION_PATH}")
        console.print("[yellow]   Run this SQL in the Supabase SQL Editor to create tables.[/yellow]")
    else:
        try:
            store_factory().init_db()
            console.print(f"[green]   [OK] SQLite database ready at {settings.database_path}[/green]")
        except StorageError as e:
            console.print(f"[red]   [FAIL] Failed to initialize SQLite: {e}[/red]")
            return False

    console.print("\n[yellow]2. Creating working directories...[/yellow]")
    for directory in (settings.upload_dir, settings.export_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)
        console.print(f"[green]   [OK] {directory}[/green]")

    console.print(Panel.fit(
        "[bold green][OK] Initialization complete![/bold green]\n\n"
        "Next steps:\n"
        "1. Create a matter: [cyan]jurisai matters add --name \"Smith v Jones\" --court \"Court of Appeal\"[/cyan]\n"
        "2. Research an issue: [cyan]jurisai research \"duty of care for occupiers\"[/cyan]",
        border_style="green"
    ))
    return True

"""Inspect stored user memory from the command line."""

from pathlib import Path

from rich.console import Console
from rich.table import Table

console = Console()


def memory_command(user_id: str, config_path: str | None = None) -> None:
    """Print the facts stored for a user.

    Args:
        user_id: User identifier
        config_path: Optional path to config file
    """
    from vitalis.config.loader import load_config
    from vitalis.memory.storage import MemoryStorage, StorageError

    try:
        config = load_config(Path(config_path) if config_path else None)
        storage = MemoryStorage(config.memory.storage_path)
        user = storage.get_user(user_id)
        facts = storage.list_facts(user_id)
        turns = storage.count_messages(user_id)
    except StorageError as e:
        console.print(f"[red]Database error: {e}[/red]")
        return
    except Exception as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        return

    if user is None:
        console.print(f"[yellow]Unknown user {user_id}[/yellow]")
        return

    console.print(f"User [bold]{user.id}[/bold] since {user.created_at:%Y-%m-%d %H:%M} UTC")
    console.print(f"Stored turns: {turns}")

    if not facts:
        console.print("[dim]No facts stored yet.[/dim]")
        return

    table = Table(title="Known facts")
    table.add_column("ID", justify="right")
    table.add_column("Learned", style="cyan")
    table.add_column("Fact")

    for fact in facts:
        table.add_row(str(fact.id), f"{fact.created_at:%Y-%m-%d %H:%M}", fact.content)

    console.print(table)

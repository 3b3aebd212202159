"""Main CLI application using Typer."""

import sys

import typer
from rich.console import Console

from vitalis import __version__

# Create Typer app
app = typer.Typer(
    name="vitalis",
    help="Vitalis - memory-backed health chat backend",
    no_args_is_help=True,
)

console = Console()


@app.command()
def version():
    """Show vitalis version."""
    console.print(f"vitalis version {__version__}")


@app.command()
def start(
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.vitalis/vitalis.yaml)",
    ),
    detach: bool = typer.Option(False, "--detach", "-d", help="Run server in background"),
):
    """Start vitalis API server."""
    from vitalis.cli.server_cmd import start_command

    start_command(config_path=config_path, detach=detach)


@app.command()
def stop():
    """Stop vitalis API server."""
    from vitalis.cli.server_cmd import stop_command

    stop_command()


@app.command()
def status(
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.vitalis/vitalis.yaml)",
    ),
):
    """Check vitalis server status."""
    from vitalis.cli.server_cmd import status_command

    status_command(config_path=config_path)


@app.command()
def memory(
    user_id: str = typer.Argument(..., help="User identifier"),
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
):
    """Show the facts stored for a user."""
    from vitalis.cli.memory_cmd import memory_command

    memory_command(user_id=user_id, config_path=config_path)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Run, stop and inspect the vitalis API server."""

import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import httpx
from rich.console import Console

from vitalis.config.loader import ConfigError, load_config
from vitalis.config.schema import VitalisConfig

STATE_DIR = Path.home() / ".vitalis"
PID_FILE = STATE_DIR / "server.pid"
LOG_FILE = STATE_DIR / "server.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

console = Console()


def configure_logging(level: str) -> None:
    """Send application logs to stderr at the given level."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # PID reused by another user's process
        return False
    return True


def running_pid() -> int | None:
    """PID of the recorded server, or None. A stale PID file is removed."""
    try:
        pid = int(PID_FILE.read_text().strip())
    except FileNotFoundError:
        return None
    except ValueError:
        PID_FILE.unlink(missing_ok=True)
        return None

    if not _is_alive(pid):
        PID_FILE.unlink(missing_ok=True)
        return None
    return pid


def record_pid(pid: int) -> None:
    PID_FILE.parent.mkdir(parents=True, exist_ok=True)
    PID_FILE.write_text(str(pid))


def clear_pid() -> None:
    PID_FILE.unlink(missing_ok=True)


def uvicorn_command(config: VitalisConfig) -> list[str]:
    """Command line that serves the ASGI entry point with the given settings."""
    return [
        sys.executable,
        "-m",
        "uvicorn",
        "vitalis.server.asgi:app",
        "--host",
        config.server.host,
        "--port",
        str(config.server.port),
        "--log-level",
        config.server.log_level,
    ]


def _spawn_detached(config: VitalisConfig, config_path: Path | None) -> int:
    env = dict(os.environ)
    if config_path is not None:
        # The child may not share our idea of relative paths
        env["VITALIS_CONFIG"] = str(config_path.resolve())

    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with LOG_FILE.open("a") as log:
        proc = subprocess.Popen(
            uvicorn_command(config),
            stdout=log,
            stderr=subprocess.STDOUT,
            start_new_session=True,
            env=env,
        )
    return proc.pid


def _serve_foreground(config: VitalisConfig) -> None:
    import uvicorn

    from vitalis.server.app import create_app

    configure_logging(config.server.log_level)
    try:
        app = create_app(config)
    except Exception as e:
        console.print(f"[red]Failed to start server: {e}[/red]")
        return

    record_pid(os.getpid())
    console.print(
        f"[green]Serving vitalis on http://{config.server.host}:{config.server.port}[/green]"
    )
    console.print(f"Chat model: {config.chat.model}  Persona: {config.persona.path or 'built-in'}")
    console.print("Press Ctrl+C to stop")

    try:
        uvicorn.run(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level=config.server.log_level,
        )
    finally:
        clear_pid()


def start_command(config_path: str | None = None, detach: bool = False) -> None:
    """Start the vitalis API server.

    Args:
        config_path: Optional path to config file
        detach: Run server in background
    """
    pid = running_pid()
    if pid is not None:
        console.print(f"[yellow]vitalis is already running (PID {pid}).[/yellow]")
        console.print("Run [bold]vitalis stop[/bold] first.")
        return

    path = Path(config_path) if config_path else None
    try:
        config = load_config(path)
    except ConfigError as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        return

    if not detach:
        _serve_foreground(config)
        return

    pid = _spawn_detached(config, path)
    record_pid(pid)
    console.print(f"[green]vitalis started in background (PID {pid})[/green]")
    console.print(f"  URL: http://{config.server.host}:{config.server.port}")
    console.print(f"  Log: {LOG_FILE}")


def stop_command(timeout: float = 10.0) -> None:
    """Stop the vitalis API server.

    Sends SIGTERM and waits up to ``timeout`` seconds so pending fact
    extractions can finish during shutdown.
    """
    pid = running_pid()
    if pid is None:
        console.print("[yellow]No running vitalis server found.[/yellow]")
        return

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        clear_pid()
        console.print("[yellow]Server process already exited.[/yellow]")
        return

    deadline = time.monotonic() + timeout
    while _is_alive(pid) and time.monotonic() < deadline:
        time.sleep(0.2)

    if _is_alive(pid):
        console.print(f"[yellow]PID {pid} is still shutting down.[/yellow]")
        return

    clear_pid()
    console.print(f"[green]Stopped vitalis (PID {pid})[/green]")


def status_command(config_path: str | None = None) -> None:
    """Report whether the server answers its health check."""
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        return

    url = f"http://{config.server.host}:{config.server.port}"
    pid = running_pid()

    try:
        resp = httpx.get(f"{url}/health", timeout=3.0)
        resp.raise_for_status()
        health = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        if pid is not None:
            console.print(f"[yellow]PID {pid} recorded, but {url} did not answer.[/yellow]")
            console.print(f"  {e}")
        else:
            console.print("[yellow]vitalis is not running.[/yellow]")
            console.print("Start it with: [bold]vitalis start[/bold]")
        return

    console.print(f"[green]vitalis is {health.get('status', 'up')}[/green]")
    console.print(f"  URL:     {url}")
    if pid is not None:
        console.print(f"  PID:     {pid}")
    console.print(f"  Model:   {health.get('model', 'unknown')}")
    console.print(f"  Version: {health.get('version', 'unknown')}")

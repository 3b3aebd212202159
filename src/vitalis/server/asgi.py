"""ASGI entry point for running the vitalis server via uvicorn CLI.

Used by `vitalis start --detach` to launch the server as a subprocess:
    python -m uvicorn vitalis.server.asgi:app --host ... --port ...
"""

import os
from pathlib import Path

from vitalis.config.loader import load_config
from vitalis.server.app import create_app

_config_path = os.environ.get("VITALIS_CONFIG")

config = load_config(Path(_config_path) if _config_path else None)
app = create_app(config)

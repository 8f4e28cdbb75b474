"""
Tesouro API server entry point.

Run with:
    tesouro serve --port 8000
"""

import logging
from pathlib import Path

import uvicorn

from ..config import load_config
from ..state.store import JsonSessionStore
from .server import create_app

logger = logging.getLogger(__name__)


def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    sessions_dir: Path | str = "sessions",
    config_path: Path | None = None,
):
    """Build the app over a JSON session store and run it."""
    app = create_app(
        store=JsonSessionStore(sessions_dir),
        config=load_config(config_path),
    )
    logger.info(f"Serving Tesouro API on {host}:{port} (sessions in {sessions_dir})")
    uvicorn.run(app, host=host, port=port)

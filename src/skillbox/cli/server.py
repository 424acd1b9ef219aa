"""Serve CLI command for the HTTP API."""

import logging

import typer
import uvicorn

from skillbox.api import create_app
from skillbox.core.context import SharedContext
from skillbox.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def serve_command(ctx: typer.Context) -> None:
    """Start the HTTP API server."""
    config = ctx.obj.get("config")

    # Enable console logging for server mode
    setup_logging(config, console_output=True)

    typer.echo("Starting skillbox API...")
    typer.echo(f"Skills path: {config.skills_path}")
    if config.project_skills_path:
        typer.echo(f"Project skills path: {config.project_skills_path}")
    typer.echo("Press Ctrl+C to stop")

    # No interactive approver: scripts needing approval are refused
    context = SharedContext(config)
    app = create_app(context)
    uvicorn.run(app, host=config.api.host, port=config.api.port)

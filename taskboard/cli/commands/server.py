"""Server management commands."""

import click
import uvicorn

from taskboard.cli.utils import info


@click.group(name="server")
def server() -> None:
    """Server management commands."""


@server.command(name="run")
@click.option("--host", default="127.0.0.1", show_default=True, help="Host to bind")
@click.option("--port", default=8000, type=int, show_default=True, help="Port to bind")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload on code changes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
    help="Uvicorn log level",
)
def run(host: str, port: int, reload: bool, log_level: str) -> None:
    """Run the API server with uvicorn."""
    info(f"Server will run at: http://{host}:{port}")
    uvicorn.run(
        "taskboard.app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        # Application logging is configured by the lifespan.
        log_config=None,
    )

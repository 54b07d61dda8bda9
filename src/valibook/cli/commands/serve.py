"""Serve command for starting API server."""

from __future__ import annotations

import click

from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


@click.command(name="serve")
@click.option("--host", help="Host to bind to (default: api.host)")
@click.option("--port", "-p", type=int, help="Port to bind to (default: api.port)")
@click.pass_context
def serve_cmd(ctx, host, port):
    """Start the FastAPI server for the current project.

    \b
    Examples:
        valibook serve
        valibook serve --host localhost --port 8080
    """
    import uvicorn

    from valibook.api.server import create_app

    config = get_config()
    host = host or config.get("api.host", "0.0.0.0")
    port = port or config.get("api.port", 8000)

    click.echo("🚀 Starting Valibook API server...")
    click.echo(f"   Host: {host}")
    click.echo(f"   Port: {port}")

    app = create_app(project_path=ctx.obj.get("project"))
    uvicorn.run(app, host=host, port=port, log_level="info")

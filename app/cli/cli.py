"""
Main CLI application using Typer.

Entry point: python -m app.cli
CLI Name: tonplace-admin
"""
from typing import Optional

import typer

from app import __version__ as app_version

app = typer.Typer(
    name="tonplace-admin",
    help="Ton.Place mini app admin CLI",
)


@app.command()
def version():
    """Show CLI version information."""
    typer.echo(f"Ton.Place mini app CLI version {app_version}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to APP_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (defaults to APP_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the web server."""
    import uvicorn

    from app.core.config import settings

    uvicorn.run(
        "app.main:app",
        host=host or settings.app_host,
        port=port or settings.app_port,
        reload=reload or settings.debug,
        log_level=settings.log_level.lower(),
    )


# Register command groups
from app.cli.commands import signature
app.add_typer(signature.app, name="signature")

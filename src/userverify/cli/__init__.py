"""CLI commands using Typer."""

import typer

from userverify.cli.db import app as db_app
from userverify.cli.users import app as users_app

app = typer.Typer(name="userverify", help="User verification CLI")

# Register sub-apps
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log verification events at debug level"
    ),
):
    """Issue and check email verification tokens."""
    from userverify.logging import setup_logging

    setup_logging(verbose=verbose)


@app.command()
def version():
    """Show version information."""
    from userverify import __version__

    typer.echo(f"userverify v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the verification endpoint server."""
    import uvicorn

    from userverify.logging import get_uvicorn_log_config

    uvicorn.run(
        "userverify.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


if __name__ == "__main__":
    app()

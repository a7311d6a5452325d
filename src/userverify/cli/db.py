"""Database management CLI commands."""

import asyncio

import typer
from rich.console import Console
from sqlalchemy import text
from sqlmodel import SQLModel

from userverify.database import close_db, get_engine, get_session_context
from userverify.services.schema import SchemaInspector

console = Console()
app = typer.Typer(help="Database management commands")

# Column DDL added to make an existing table compliant
VERIFICATION_COLUMNS = {
    "verified": "BOOLEAN NOT NULL DEFAULT FALSE",
    "verification_token": "VARCHAR(255)",
}


@app.command("init")
def init():
    """Create the application tables."""

    async def _init():
        # Register table models on the metadata
        import userverify.models  # noqa: F401

        engine = get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        await close_db()

    asyncio.run(_init())
    console.print("[green]Tables created.[/green]")


@app.command("make-compliant")
def make_compliant(table: str = typer.Argument(..., help="Table to add verification columns to")):
    """Add the verification columns to an existing table (safe to re-run)."""

    async def _migrate() -> list[str]:
        async with get_session_context() as session:
            inspector = SchemaInspector(session)
            columns = await inspector.get_columns(table)
            if not columns:
                console.print(f"[red]Error:[/red] Table {table} not found")
                raise typer.Exit(1)

            conn = await session.connection()
            quoted = conn.dialect.identifier_preparer.quote(table)
            added = []
            for name, ddl in VERIFICATION_COLUMNS.items():
                if name in columns:
                    continue
                await session.execute(text(f"ALTER TABLE {quoted} ADD COLUMN {name} {ddl}"))
                added.append(name)
            await session.commit()
        await close_db()
        return added

    added = asyncio.run(_migrate())
    if added:
        console.print(f"[green]Added columns to {table}:[/green] {', '.join(added)}")
    else:
        console.print(f"[dim]{table} is already compliant[/dim]")

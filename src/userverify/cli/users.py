"""User management and verification CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from userverify.config import settings
from userverify.database import get_session_context
from userverify.exceptions import UserNotFoundError, VerificationError
from userverify.models import Account, User
from userverify.services import VerificationService, build_verification_service

console = Console()
app = typer.Typer(help="User management commands")

TableOption = typer.Option(settings.default_table, "--table", "-t", help="Account table")


async def _require_account(
    verification: VerificationService, email: str, table: str
) -> Account:
    account = await verification.store.find_by_email(email, table)
    if account is None:
        console.print(f"[red]Error:[/red] User {email} not found in {table}")
        raise typer.Exit(1)
    return account


@app.command("list")
def list_users():
    """List all users with their verification state."""

    async def _list():
        async with get_session_context() as session:
            stmt = select(User).order_by(User.email)
            result = await session.execute(stmt)
            users = result.scalars().all()

            table = Table(title="Users")
            table.add_column("ID", style="cyan")
            table.add_column("Email", style="green")
            table.add_column("Verified", style="magenta")
            table.add_column("Pending token", style="dim")
            table.add_column("Created", style="dim")

            for user in users:
                verified_str = "[green]Yes[/green]" if user.verified else "No"
                pending = "Yes" if user.verification_token else "-"
                created = user.created_at.strftime("%Y-%m-%d") if user.created_at else "-"
                table.add_row(str(user.id), user.email, verified_str, pending, created)

            console.print(table)

    asyncio.run(_list())


@app.command("create")
def create_user(
    email: str = typer.Argument(..., help="User email"),
    name: str | None = typer.Option(None, "--name", "-n", help="Display name"),
):
    """Create a new unverified user."""

    async def _create():
        async with get_session_context() as session:
            stmt = select(User).where(User.email == email)
            result = await session.execute(stmt)
            if result.scalar_one_or_none():
                console.print(f"[red]Error:[/red] User {email} already exists")
                raise typer.Exit(1)

            session.add(User(email=email, name=name))
            await session.commit()
            name_str = f" ({name})" if name else ""
            console.print(f"[green]Created user:[/green] {email}{name_str}")

    asyncio.run(_create())


@app.command("generate")
def generate(
    email: str = typer.Argument(..., help="User email"),
    table: str = TableOption,
):
    """Generate a new verification token and print the link."""

    async def _generate():
        async with get_session_context() as session:
            verification = build_verification_service(session)
            account = await _require_account(verification, email, table)

            try:
                saved = await verification.generate(account)
            except VerificationError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                raise typer.Exit(1) from e

            if not saved:
                console.print(f"[red]Error:[/red] Token for {email} was not saved")
                raise typer.Exit(1)

            console.print(f"[green]Verification URL:[/green] {verification.verification_link(account)}")

    asyncio.run(_generate())


@app.command("send")
def send(
    email: str = typer.Argument(..., help="User email"),
    table: str = TableOption,
    subject: str | None = typer.Option(None, "--subject", "-s", help="Email subject"),
    regenerate: bool = typer.Option(False, "--regenerate", help="Generate a fresh token first"),
):
    """Email the verification link to a user."""

    async def _send():
        async with get_session_context() as session:
            verification = build_verification_service(session)
            account = await _require_account(verification, email, table)

            if verification.is_verified(account) and not regenerate:
                console.print(f"[yellow]Warning:[/yellow] User {email} is already verified")
                return

            try:
                if regenerate or account.verification_token is None:
                    await verification.generate(account)
                sent = await verification.send(account, subject)
            except VerificationError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                raise typer.Exit(1) from e

            if not sent:
                console.print(f"[red]Error:[/red] Failed to send verification email to {email}")
                raise typer.Exit(1)
            console.print(f"[green]Sent verification email to:[/green] {email}")

    asyncio.run(_send())


@app.command("status")
def status(
    email: str = typer.Argument(..., help="User email"),
    table: str = TableOption,
):
    """Show the verification state of a user."""

    async def _status():
        async with get_session_context() as session:
            verification = build_verification_service(session)
            account = await _require_account(verification, email, table)
            compliant = await verification.is_compliant(account)

            console.print(f"[bold]{account.email}[/bold] ({table})")
            console.print(f"  Compliant table: {'yes' if compliant else '[red]no[/red]'}")
            console.print(f"  Verified: {'[green]yes[/green]' if verification.is_verified(account) else 'no'}")
            console.print(f"  Pending token: {'yes' if account.verification_token else 'no'}")

    asyncio.run(_status())


@app.command("verify")
def verify(
    token: str = typer.Argument(..., help="Verification token"),
    table: str = TableOption,
):
    """Consume a verification token, as the emailed link would."""

    async def _verify():
        async with get_session_context() as session:
            verification = build_verification_service(session)
            try:
                account = await verification.get_user(token, table)
            except UserNotFoundError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                raise typer.Exit(1) from e

            if not await verification.process(account, token):
                console.print("[red]Error:[/red] Invalid verification token")
                raise typer.Exit(1)
            console.print(f"[green]Verified:[/green] {account.email}")

    asyncio.run(_verify())

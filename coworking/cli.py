"""Coworking admin CLI - serve the API, manage users, tokens, tags and approvals."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .assets.filestore import get_storage
from .config import settings
from .models import Base
from .models.office import APPROVAL_APPROVED, APPROVAL_PENDING, APPROVAL_REJECTED, Office
from .models.tag import Tag
from .services import approval_svc, auth_svc, image_svc, office_svc, tag_svc, user_svc

app = typer.Typer(
    name="coworking",
    help="Coworking offices API administration",
    no_args_is_help=True,
)
console = Console()

users_app = typer.Typer(help="User management")
tokens_app = typer.Typer(help="Personal access tokens")
tags_app = typer.Typer(help="Office tags")
offices_app = typer.Typer(help="Office review and approval")

app.add_typer(users_app, name="users")
app.add_typer(tokens_app, name="tokens")
app.add_typer(tags_app, name="tags")
app.add_typer(offices_app, name="offices")


@asynccontextmanager
async def _session():
    engine = create_async_engine(settings.database_url, echo=settings.echo_sql)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


@app.command("serve")
def serve(
    port: int = typer.Option(8030, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the offices API."""
    import uvicorn

    console.print(f"[bold cyan]Starting Coworking API at http://{host}:{port}[/bold cyan]")
    uvicorn.run("coworking.app:app", host=host, port=port, reload=reload)


@app.command("init-db")
def init_db():
    """Create all tables directly (local SQLite); use Alembic elsewhere."""

    async def _run():
        engine = create_async_engine(settings.database_url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_run())
    console.print("[green]Database tables created[/green]")


# ============================================================================
# Users
# ============================================================================

@users_app.command("create")
def users_create(
    name: str = typer.Argument(..., help="Display name"),
    email: str = typer.Argument(..., help="Email address"),
    admin: bool = typer.Option(False, "--admin", help="Grant admin (receives approval requests)"),
):
    """Create a user."""

    async def _run():
        async with _session() as db:
            return await user_svc.create_user(db, name=name, email=email, is_admin=admin)

    user = asyncio.run(_run())
    role = "admin" if user.is_admin else "user"
    console.print(f"[green]Created {role} {user.email} (id={user.id})[/green]")


# ============================================================================
# Tokens
# ============================================================================

@tokens_app.command("issue")
def tokens_issue(
    user_id: int = typer.Argument(..., help="User id the token belongs to"),
    name: str = typer.Option("cli", "--name", "-n", help="Token name"),
    abilities: Optional[list[str]] = typer.Option(
        None, "--ability", "-a", help="Ability to grant (repeatable, default '*')"
    ),
):
    """Issue a bearer token. The plaintext is printed once."""

    async def _run():
        async with _session() as db:
            user = await user_svc.get_user(db, user_id)
            if not user:
                return None
            return await auth_svc.issue_token(db, user, name, abilities or ["*"])

    issued = asyncio.run(_run())
    if issued is None:
        console.print(f"[red]User {user_id} not found[/red]")
        raise typer.Exit(1)

    token, plaintext = issued
    console.print(f"[green]Issued token {token.name!r} ({', '.join(token.abilities)})[/green]")
    console.print(plaintext)


@tokens_app.command("revoke")
def tokens_revoke(token_id: int = typer.Argument(..., help="Token id")):
    """Revoke a token so it no longer authenticates."""

    async def _run():
        async with _session() as db:
            return await auth_svc.revoke_token(db, token_id)

    if not asyncio.run(_run()):
        console.print(f"[red]Token {token_id} not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Revoked token {token_id}[/green]")


# ============================================================================
# Tags
# ============================================================================

@tags_app.command("create")
def tags_create(name: str = typer.Argument(..., help="Tag name")):
    """Create a tag hosts can put on their offices."""

    async def _run():
        async with _session() as db:
            return await tag_svc.create_tag(db, name)

    tag = asyncio.run(_run())
    console.print(f"[green]Created tag {tag.name!r} (id={tag.id})[/green]")


@tags_app.command("attach")
def tags_attach(
    office_id: int = typer.Argument(..., help="Office id"),
    tag_id: int = typer.Argument(..., help="Tag id"),
):
    """Append a tag to an office's tags."""

    async def _run():
        async with _session() as db:
            office = await office_svc.get_office(db, office_id)
            tag = await db.get(Tag, tag_id)
            if not office or not tag:
                return None
            return await tag_svc.attach_tag(db, office.id, tag.id)

    attached = asyncio.run(_run())
    if attached is None:
        console.print(f"[red]Office {office_id} or tag {tag_id} not found[/red]")
        raise typer.Exit(1)
    if attached:
        console.print(f"[green]Tag {tag_id} attached to office {office_id}[/green]")
    else:
        console.print(f"[dim]Tag {tag_id} already on office {office_id}[/dim]")


# ============================================================================
# Offices
# ============================================================================

@offices_app.command("pending")
def offices_pending():
    """List offices waiting for review."""

    async def _run():
        async with _session() as db:
            stmt = (
                select(Office)
                .where(Office.approval_status == APPROVAL_PENDING, Office.deleted_at.is_(None))
                .order_by(Office.id)
            )
            return list((await db.execute(stmt)).scalars().all())

    offices = asyncio.run(_run())
    if not offices:
        console.print("[dim]No offices pending approval[/dim]")
        return

    table = Table(title="Pending offices")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Host")
    table.add_column("Lat/Lng")
    for office in offices:
        table.add_row(
            str(office.id), office.title, str(office.user_id), f"{office.lat}, {office.lng}"
        )
    console.print(table)


def _set_status(office_id: int, status: str) -> None:
    async def _run():
        async with _session() as db:
            office = await office_svc.get_office(db, office_id)
            if not office:
                return None
            return await approval_svc.set_status(db, office, status)

    office = asyncio.run(_run())
    if office is None:
        console.print(f"[red]Office {office_id} not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Office {office.id} {office.title!r} is now {office.approval_status}[/green]")


@offices_app.command("approve")
def offices_approve(office_id: int = typer.Argument(..., help="Office id")):
    """Approve an office so it shows up in public listings."""
    _set_status(office_id, APPROVAL_APPROVED)


@offices_app.command("reject")
def offices_reject(office_id: int = typer.Argument(..., help="Office id")):
    """Reject an office."""
    _set_status(office_id, APPROVAL_REJECTED)


@offices_app.command("purge-images")
def offices_purge_images(office_id: int = typer.Argument(..., help="Deleted office id")):
    """Retry removing the stored images of a deleted office."""

    async def _run():
        async with _session() as db:
            office = await office_svc.get_office(db, office_id, include_deleted=True)
            if not office or not office.is_deleted:
                return None
            purged = await image_svc.purge_office_images(db, office.id, get_storage())
            return purged, len(await image_svc.list_images(db, office.id))

    outcome = asyncio.run(_run())
    if outcome is None:
        console.print(f"[red]Deleted office {office_id} not found[/red]")
        raise typer.Exit(1)

    purged, left = outcome
    console.print(f"[green]Purged {purged} image(s) of office {office_id}[/green]")
    if left:
        console.print(f"[yellow]{left} image(s) could not be removed[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

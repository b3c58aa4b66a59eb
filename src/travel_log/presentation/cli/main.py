"""Main CLI application for Travel Log."""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from travel_log import __version__
from travel_log.application.client import TravelLogClient
from travel_log.application.view_models.auth import AuthStatus
from travel_log.application.view_models.places import (
    PlaceDetailsStatus,
    PlaceOperationStatus,
    PlacesStatus,
)
from travel_log.domain.entities.place import Place
from travel_log.domain.value_objects.image_source import ImageSource
from travel_log.shared.config.settings import get_settings
from travel_log.shared.logging_config import setup_logging

T = TypeVar("T")

app = typer.Typer(
    name="travel-log",
    help="Personal travel log: record the places you have been.",
    add_completion=False,
)
places_app = typer.Typer(help="Browse and manage places.", no_args_is_help=True)
app.add_typer(places_app, name="places")

console = Console()

# Swapped out by tests to share one in-memory backend across commands.
client_factory: Callable[[], TravelLogClient] = TravelLogClient.from_settings


def _run(action: Callable[[TravelLogClient], Awaitable[T]]) -> T:
    """Run ``action`` against a fresh client and close it afterwards."""

    try:
        client = client_factory()
    except ValueError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(code=2)

    async def runner() -> T:
        async with client:
            return await action(client)

    return asyncio.run(runner())


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(code=1)


def _format_rating(rating: float) -> str:
    stars = "★" * int(round(rating)) + "☆" * (5 - int(round(rating)))
    return f"{stars} {rating:.1f}" if 0 <= rating <= 5 else f"{rating:.1f}"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Personal travel log."""
    settings = get_settings()
    setup_logging(settings.logging, "DEBUG" if verbose else None)


@app.command()
def version():
    """Show version information."""
    console.print(Panel(
        Text(f"Travel Log v{__version__}\nPersonal travel log", justify="center"),
        title="Version Info",
        border_style="blue"
    ))


@app.command()
def config():
    """Show the current configuration."""
    settings = get_settings()
    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("backend.provider", settings.backend.provider)
    table.add_row("backend.places_collection", settings.backend.places_collection)
    table.add_row("backend.image_prefix", settings.backend.image_prefix)
    table.add_row("firebase.project_id", settings.firebase.project_id or "-")
    table.add_row("firebase.storage_bucket", settings.firebase.storage_bucket or "-")
    table.add_row("firebase.api_key", "set" if settings.firebase.api_key else "-")
    table.add_row("session file", str(settings.session_path))
    table.add_row("log level", settings.logging.level)
    console.print(table)


@app.command()
def register(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
):
    """Create an account and sign in."""
    async def action(client: TravelLogClient):
        return await client.auth.sign_up(email, password, password)

    state = _run(action)
    if state.status != AuthStatus.SUCCESS:
        _fail(state.message)
    console.print(f"[bold green]Welcome![/bold green] Signed in as {email}")


@app.command()
def login(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
):
    """Sign in with email and password."""
    async def action(client: TravelLogClient):
        return await client.auth.sign_in(email, password)

    state = _run(action)
    if state.status != AuthStatus.SUCCESS:
        _fail(state.message)
    console.print(f"[bold green]Signed in[/bold green] as {email}")


@app.command()
def logout():
    """Sign out."""
    async def action(client: TravelLogClient):
        client.auth.sign_out()
        return client.auth.auth_state

    _run(action)
    console.print("Signed out")


@app.command()
def whoami():
    """Show the signed-in user."""
    async def action(client: TravelLogClient):
        return client.auth.current_user

    user = _run(action)
    if user is None:
        console.print("[yellow]Not signed in[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"{user.email or '-'} [dim]({user.user_id})[/dim]")


@places_app.command("list")
def list_places():
    """List all places, newest first."""
    async def action(client: TravelLogClient):
        state = await client.places.load_places()
        return state, client.auth.current_user

    state, user = _run(action)
    if state.status == PlacesStatus.ERROR:
        _fail(f"{state.message} (run the command again to retry)")
    if state.status == PlacesStatus.EMPTY:
        console.print("[yellow]No places yet.[/yellow] Add one with [bold]travel-log places add[/bold]")
        return

    table = Table(title="Places")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Rating")
    table.add_column("Added")
    table.add_column("Photo", justify="center")
    table.add_column("Mine", justify="center")
    for place in state.places:
        table.add_row(
            place.id,
            place.name,
            _format_rating(place.rating),
            place.created_at.strftime("%Y-%m-%d %H:%M") if place.created_at else "-",
            "✓" if place.has_image else "",
            "✓" if user and place.is_owned_by(user.user_id) else "",
        )
    console.print(table)


@places_app.command("show")
def show_place(place_id: str = typer.Argument(..., help="Place ID")):
    """Show one place."""
    async def action(client: TravelLogClient):
        return await client.places.load_place(place_id)

    state = _run(action)
    if state.status != PlaceDetailsStatus.SUCCESS:
        _fail(state.message)

    place = state.place
    body = Text()
    body.append(f"{_format_rating(place.rating)}\n\n", style="yellow")
    body.append(place.description or "(no description)")
    if place.has_image:
        body.append(f"\n\nPhoto: {place.image_url}", style="dim")
    if place.created_at:
        body.append(f"\nAdded: {place.created_at:%Y-%m-%d %H:%M}", style="dim")
    console.print(Panel(body, title=place.name, subtitle=place.id, border_style="blue"))


@places_app.command("add")
def add_place(
    name: str = typer.Option(..., "--name", "-n", help="Place name"),
    description: str = typer.Option(..., "--description", "-d", help="Description"),
    rating: float = typer.Option(0.0, "--rating", "-r", help="Rating from 0 to 5"),
    image: Optional[Path] = typer.Option(
        None, "--image", "-i", exists=True, dir_okay=False, help="Photo to attach"
    ),
):
    """Add a place."""
    draft = Place(name=name, description=description, rating=rating)
    source = ImageSource.from_path(image) if image else None

    async def action(client: TravelLogClient):
        return await client.places.add_place(draft, source)

    state = _run(action)
    if state.status != PlaceOperationStatus.SUCCESS:
        _fail(state.message)
    console.print(f"[bold green]Added[/bold green] {name} [dim]({state.place_id})[/dim]")


@places_app.command("edit")
def edit_place(
    place_id: str = typer.Argument(..., help="Place ID"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    rating: Optional[float] = typer.Option(None, "--rating", "-r", help="New rating from 0 to 5"),
    image: Optional[Path] = typer.Option(
        None, "--image", "-i", exists=True, dir_okay=False, help="New photo"
    ),
    remove_image: bool = typer.Option(False, "--remove-image", help="Detach the current photo"),
):
    """Edit one of your places."""
    source = ImageSource.from_path(image) if image else None

    async def action(client: TravelLogClient):
        details = await client.places.load_place(place_id)
        if details.status != PlaceDetailsStatus.SUCCESS:
            return details.message, None
        changes = {
            key: value
            for key, value in (("name", name), ("description", description), ("rating", rating))
            if value is not None
        }
        if remove_image:
            changes["image_url"] = ""
        return None, await client.places.update_place(details.place.copy(**changes), source)

    error, state = _run(action)
    if error is not None:
        _fail(error)
    if state.status != PlaceOperationStatus.SUCCESS:
        _fail(state.message)
    console.print(f"[bold green]Updated[/bold green] {place_id}")


@places_app.command("delete")
def delete_place(
    place_id: str = typer.Argument(..., help="Place ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete one of your places and its photo."""
    if not yes:
        typer.confirm(f"Delete place {place_id}?", abort=True)

    async def action(client: TravelLogClient):
        return await client.places.delete_place(place_id)

    state = _run(action)
    if state.status != PlaceOperationStatus.DELETED:
        _fail(state.message)
    console.print(f"[bold green]Deleted[/bold green] {place_id}")


if __name__ == "__main__":
    app()

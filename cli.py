"""CLI commands for managing the invitation guest list."""

import asyncio

import typer

from invite_site.config.logging import setup_logging
from invite_site.config.settings import settings
from invite_site.guests.dtos import GuestRecord, GuestScope
from invite_site.guests.errors import GuestError
from invite_site.guests.repository import SheetsGuestStore, build_guest_store
from invite_site.guests.service import GuestService

app = typer.Typer(help="CLI commands for managing the invitation guest list")


def _service() -> GuestService:
    return GuestService(store=build_guest_store(settings))


def _run(coroutine):
    """Run one service call, turning guest errors into a clean exit."""
    try:
        return asyncio.run(coroutine)
    except GuestError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)


def _echo_guest(guest: GuestRecord) -> None:
    rsvp = guest.rsvp.value if guest.rsvp else "-"
    color = {
        "yes": typer.colors.GREEN,
        "no": typer.colors.RED,
        "maybe": typer.colors.YELLOW,
    }.get(rsvp, typer.colors.WHITE)
    typer.secho(
        f"  {guest.id:<12} {guest.name:<28} {guest.phone:<16} {rsvp:<6} +{guest.plus_ones:<3} {guest.scope.value}",
        fg=color,
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log store activity")):
    if verbose:
        setup_logging()


@app.command()
def list_guests(
    scope: str = typer.Option(None, "--scope", "-s", help="Only guests in this scope (all/wedding)"),
    rsvp: str = typer.Option(None, "--rsvp", "-r", help="Only this answer (yes/no/maybe/none)"),
    search: str = typer.Option(None, "--search", "-q", help="Match against name or phone"),
):
    """List guests, most recently updated first."""
    guests = _run(_service().list_all(scope=scope, rsvp=rsvp, search=search))

    if not guests:
        typer.secho("No guests found", fg=typer.colors.YELLOW)
        return
    typer.secho(f"{len(guests)} guest(s):", fg=typer.colors.BLUE)
    for guest in guests:
        _echo_guest(guest)


@app.command()
def add_guest(
    name: str = typer.Argument(..., help="Guest name"),
    phone: str = typer.Argument(..., help="Guest phone number"),
    rsvp: str = typer.Option(None, "--rsvp", "-r", help="yes/no/maybe; omit for no response"),
    plus_ones: int = typer.Option(0, "--plus-ones", "-p", help="Extra people in the party"),
    scope: GuestScope = typer.Option(GuestScope.ALL, "--scope", "-s", help="Which event the answer is for"),
):
    """Add a guest, or update the guest already registered with this phone."""
    guest = _run(_service().admin_upsert(name, phone, rsvp, plus_ones, scope))

    typer.secho("Guest saved!", fg=typer.colors.GREEN)
    _echo_guest(guest)


@app.command()
def delete_guest(
    guest_id: str = typer.Argument(..., help="Guest id, as shown by list-guests"),
):
    """Delete a guest by id."""
    if not _run(_service().delete_by_id(guest_id)):
        typer.secho(f"Guest not found: {guest_id}", fg=typer.colors.RED)
        raise typer.Exit(1)
    typer.secho(f"Deleted guest {guest_id}", fg=typer.colors.GREEN)


@app.command()
def summary():
    """Show attendance figures per scope."""
    service = _service()

    async def _summaries():
        return [await service.summarize(scope) for scope in GuestScope]

    for item in _run(_summaries()):
        typer.echo()
        typer.secho(f"Scope: {item.scope.value}", fg=typer.colors.GREEN)
        typer.secho(f"  Total guests: {item.total_guests}", fg=typer.colors.BLUE)
        typer.secho(f"  Total RSVPs:  {item.total_rsvps}", fg=typer.colors.BLUE)
        typer.secho(f"  Attending:    {item.total_people} people", fg=typer.colors.CYAN)
        typer.secho(f"  Yes:   {item.yes:<4} ({item.yes_percent}%)", fg=typer.colors.GREEN)
        typer.secho(f"  Maybe: {item.maybe:<4} ({item.maybe_percent}%)", fg=typer.colors.YELLOW)
        typer.secho(f"  No:    {item.no:<4} ({item.no_percent}%)", fg=typer.colors.RED)


@app.command()
def ensure_sheet():
    """Check the guest sheet header and repair it if columns are missing."""
    store = build_guest_store(settings)
    if not isinstance(store, SheetsGuestStore):
        typer.secho("The JSON file backend is configured; there is no sheet to check.", fg=typer.colors.YELLOW)
        raise typer.Exit(1)

    if _run(store.ensure_schema()):
        typer.secho("Header row repaired.", fg=typer.colors.YELLOW)
    else:
        typer.secho("Header row is complete.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()

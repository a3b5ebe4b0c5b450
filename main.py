import sys
import asyncio
from typing import List, Optional

# --- Settings/Logging ---
from hackmatch.logging.setup import setup_logging

setup_logging()

from loguru import logger

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hackmatch.matching.recommender import fetch_recommendations
from hackmatch.matching.search import filter_profiles, filter_teams
from hackmatch.models.match import Recommendations
from hackmatch.models.profile import Profile
from hackmatch.utils.misc_utils import initials
from hackmatch.storage.supabase_client import (
    fetch_events,
    fetch_pending_join_requests,
    fetch_profile,
    fetch_profiles,
    fetch_teams,
    fetch_upcoming_events,
    initialize_supabase,
    request_to_join,
    respond_to_join_request,
)

APP = typer.Typer(add_completion=False, help="Hackathon team matching")
console = Console()

MAX_COMMON_SKILLS_SHOWN = 3


async def _connect():
    client = await initialize_supabase()
    if not client:
        logger.critical("Failed to initialize Supabase client. Exiting.")
    return client


def render_recommendations(recs: Recommendations) -> None:
    console.print(Panel(", ".join(recs.requester_skills) or "-", title="Your Skills"))

    if recs.teams:
        table = Table(title="Recommended Teams")
        table.add_column("Team")
        table.add_column("Event")
        table.add_column("Members", justify="right")
        table.add_column("Match", justify="right")
        table.add_column("Matching skills", style="green")
        table.add_column("Still needed", style="yellow")
        for match in recs.teams:
            event_name = match.team.event.name if match.team.event else "-"
            table.add_row(
                match.team.name,
                event_name or "-",
                str(match.team.member_count),
                f"{match.match_percentage}%",
                ", ".join(match.matching_skills),
                ", ".join(match.missing_skills),
            )
        console.print(table)

    if recs.profiles:
        table = Table(title="Recommended Developers")
        table.add_column("Developer")
        table.add_column("College")
        table.add_column("Match", justify="right")
        table.add_column("Common skills")
        for match in recs.profiles:
            shown = match.common_skills[:MAX_COMMON_SKILLS_SHOWN]
            extra = len(match.common_skills) - len(shown)
            skills = ", ".join(shown) + (f" +{extra} more" if extra > 0 else "")
            table.add_row(
                f"[bold]{initials(match.profile.name)}[/bold] {match.profile.name}",
                match.profile.college or "-",
                f"{match.match_percentage}%",
                skills,
            )
        console.print(table)

    if recs.is_empty:
        console.print(
            Panel(
                "Try updating your skills or explore more teams and developers.",
                title="No matches found",
            )
        )


@APP.command()
def recommend(
    skill: Optional[List[str]] = typer.Option(
        None, "--skill", "-s", help="A skill of yours (repeatable)."
    ),
    teams: bool = typer.Option(True, "--teams/--no-teams"),
    profiles: bool = typer.Option(True, "--profiles/--no-profiles"),
):
    """Recommend teams and developers for a set of skills."""

    async def _run() -> Optional[Recommendations]:
        client = await _connect()
        if not client:
            return None
        return await fetch_recommendations(
            client,
            requester_skills=skill or None,
            include_teams=teams,
            include_profiles=profiles,
        )

    recs = asyncio.run(_run())
    if recs is None:
        raise typer.Exit(code=1)
    render_recommendations(recs)


@APP.command("teams")
def list_teams(
    search: Optional[str] = typer.Option(None, "--search", help="Name or skill filter."),
    event_id: Optional[str] = typer.Option(None, "--event-id"),
):
    """List teams, optionally filtered by event and search term."""

    async def _run():
        client = await _connect()
        return await fetch_teams(client, event_id=event_id) if client else None

    rows = asyncio.run(_run())
    if rows is None:
        raise typer.Exit(code=1)

    table = Table(title="Teams")
    for column in ("ID", "Name", "Event", "Members", "Required skills"):
        table.add_column(column)
    for team in filter_teams(rows, search):
        table.add_row(
            team.id,
            team.name,
            (team.event.name if team.event else None) or "-",
            str(team.member_count),
            ", ".join(team.required_skills),
        )
    console.print(table)


@APP.command("profiles")
def list_profiles(
    search: Optional[str] = typer.Option(
        None, "--search", help="Name, college or skill filter."
    ),
):
    """List developer profiles."""

    async def _run():
        client = await _connect()
        return await fetch_profiles(client) if client else None

    rows = asyncio.run(_run())
    if rows is None:
        raise typer.Exit(code=1)

    table = Table(title="Developers")
    for column in ("ID", "Name", "College", "Skills"):
        table.add_column(column)
    for profile in filter_profiles(rows, search):
        table.add_row(
            profile.id, profile.name, profile.college or "-", ", ".join(profile.skills)
        )
    console.print(table)


def render_profile(profile: Profile) -> None:
    details = [
        f"College: {profile.college or '-'}",
        f"Skills: {', '.join(profile.skills) or '-'}",
        f"Teams joined: {profile.teams_joined}",
        f"Teams owned: {profile.teams_owned}",
    ]
    console.print(Panel("\n".join(details), title=profile.name))

    if profile.memberships:
        table = Table(title="Team memberships")
        for column in ("Team", "Event", "Role"):
            table.add_column(column)
        for membership in profile.memberships:
            team = membership.team
            event = team.event if team else None
            table.add_row(
                (team.name if team else None) or "-",
                (event.name if event else None) or "-",
                membership.role.value,
            )
        console.print(table)


@APP.command("profile")
def show_profile(profile_id: str):
    """Show one developer with the teams they belong to."""

    async def _run():
        client = await _connect()
        return await fetch_profile(profile_id, client=client) if client else None

    profile = asyncio.run(_run())
    if profile is None:
        console.print(f"[red]Profile {profile_id} not found.[/red]")
        raise typer.Exit(code=1)
    render_profile(profile)


@APP.command("events")
def list_events(
    upcoming: bool = typer.Option(
        False, "--upcoming", help="Only the next few events from today."
    ),
):
    """List hackathons by date."""

    async def _run():
        client = await _connect()
        if not client:
            return None
        if upcoming:
            return await fetch_upcoming_events(client)
        return await fetch_events(client)

    rows = asyncio.run(_run())
    if rows is None:
        raise typer.Exit(code=1)

    table = Table(title="Events")
    for column in ("ID", "Name", "Date", "Description"):
        table.add_column(column)
    for event in rows:
        table.add_row(event.id, event.name, event.date.isoformat(), event.description or "")
    console.print(table)


@APP.command("request-join")
def request_join(team_id: str, user_id: str):
    """File a join request for USER_ID on TEAM_ID."""

    async def _run():
        client = await _connect()
        return await request_to_join(team_id, user_id, client=client) if client else None

    created = asyncio.run(_run())
    if not created:
        console.print("[red]Failed to send join request.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Join request {created.id} sent.[/green]")


@APP.command()
def respond(
    request_id: str,
    accept: bool = typer.Option(..., "--accept/--reject"),
):
    """Accept or reject a pending join request."""

    async def _run() -> bool:
        client = await _connect()
        if not client:
            return False
        pending = await fetch_pending_join_requests(client) or []
        request = next((r for r in pending if r.id == request_id), None)
        if request is None:
            logger.error(f"No pending join request with id {request_id}.")
            return False
        return await respond_to_join_request(request, accept, client=client)

    if not asyncio.run(_run()):
        console.print("[red]Failed to update join request.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Request {'accepted' if accept else 'rejected'}.[/green]")


if __name__ == "__main__":
    try:
        APP()
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)

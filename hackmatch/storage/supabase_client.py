# hackmatch/storage/supabase_client.py
import datetime as dt
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from pydantic import BaseModel, ValidationError
from supabase import AsyncClient, create_async_client

from hackmatch.config.settings import settings
from hackmatch.models.enums import JoinRequestStatus, MemberRole
from hackmatch.models.event import Event
from hackmatch.models.join_request import JoinRequest
from hackmatch.models.profile import Profile
from hackmatch.models.team import Team
from hackmatch.utils.misc_utils import validate_whatsapp_number

ModelT = TypeVar("ModelT", bound=BaseModel)

# PostgREST embeds: the team row with its event and members (and their profiles)
TEAM_SELECT = (
    "id, name, required_skills, event_id, created_at, "
    "events(id, name, date), "
    "team_members(id, team_id, user_id, role, joined_at, profiles(id, name, skills, college))"
)
PROFILE_SELECT = "*"
# Profile page: memberships with their team and event
PROFILE_DETAIL_SELECT = (
    "*, team_members(id, role, joined_at, teams(id, name, events(name, date)))"
)
UPCOMING_EVENTS_LIMIT = 5
JOIN_REQUEST_SELECT = (
    "id, team_id, user_id, status, created_at, profiles(id, name, skills, college)"
)

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


async def initialize_supabase() -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it."""
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    if not settings.supabase_url or not settings.supabase_key:
        logger.critical("Supabase URL or Key not configured in settings.")
        raise SystemExit("Supabase configuration missing.")

    logger.debug(
        f"Attempting to initialize Async Supabase client with URL: {settings.supabase_url}"
    )

    try:
        client: AsyncClient = await create_async_client(
            settings.supabase_url, settings.supabase_key
        )
        _async_supabase_client = client
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


def get_supabase_client() -> Optional[AsyncClient]:
    """Returns the initialized ASYNC Supabase client instance."""
    if not _async_supabase_client:
        logger.warning("Async Supabase client accessed before initialization.")
        return None
    return _async_supabase_client


def set_supabase_client(client: Optional[AsyncClient]) -> None:
    """Replaces the module-level client (used by tests and embedding callers)."""
    global _async_supabase_client
    _async_supabase_client = client


async def _execute(query: Any, description: str) -> Optional[APIResponse]:
    """Awaits a PostgREST query, logging and swallowing backend failures."""
    try:
        return await query.execute()
    except APIError as e:
        logger.error(f"Supabase API error while {description}: {e.message}")
        logger.debug(f"Full APIError details: {e}")
        return None
    except Exception as e:
        logger.error(f"An unexpected error occurred while {description}: {e}")
        logger.exception("Traceback:")
        return None


def _to_models(rows: Sequence[Dict[str, Any]], model: Type[ModelT]) -> List[ModelT]:
    """Validates rows into models, skipping (and logging) malformed ones."""
    models: List[ModelT] = []
    for row in rows:
        try:
            models.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed {model.__name__} row {row.get('id', '?')}: {e}"
            )
    return models


def _client_or_none(client: Optional[AsyncClient]) -> Optional[AsyncClient]:
    client = client or _async_supabase_client
    if not client:
        logger.error("Async Supabase client not available.")
    return client


# --- Reads ---


async def fetch_events(
    client: Optional[AsyncClient] = None,
    from_date: Optional[dt.date] = None,
    limit: Optional[int] = None,
) -> Optional[List[Event]]:
    """Fetches events ordered by date, optionally only those on or after ``from_date``."""
    client = _client_or_none(client)
    if not client:
        return None

    query = client.table("events").select("*")
    if from_date:
        query = query.gte("date", from_date.isoformat())
    query = query.order("date")
    if limit:
        query = query.limit(limit)

    response = await _execute(query, "fetching events")
    if response is None:
        return None
    return _to_models(response.data or [], Event)


async def fetch_upcoming_events(
    client: Optional[AsyncClient] = None, limit: int = UPCOMING_EVENTS_LIMIT
) -> Optional[List[Event]]:
    """The next few events, starting today."""
    return await fetch_events(client, from_date=dt.date.today(), limit=limit)


async def fetch_event(
    event_id: str, client: Optional[AsyncClient] = None
) -> Optional[Event]:
    client = _client_or_none(client)
    if not client:
        return None

    response = await _execute(
        client.table("events").select("*").eq("id", event_id),
        f"fetching event {event_id}",
    )
    if not response or not response.data:
        return None
    events = _to_models(response.data[:1], Event)
    return events[0] if events else None


async def fetch_teams(
    client: Optional[AsyncClient] = None,
    limit: Optional[int] = None,
    event_id: Optional[str] = None,
) -> Optional[List[Team]]:
    """
    Fetches teams with their event and members embedded.

    Args:
        client: Async Supabase client; defaults to the module-level one.
        limit: Maximum number of rows to fetch. The matcher relies on the
               caller bounding candidate lists here.
        event_id: Only return teams registered for this event.

    Returns:
        A list of teams (possibly empty), or None if the fetch failed.
    """
    client = _client_or_none(client)
    if not client:
        return None

    query = client.table("teams").select(TEAM_SELECT)
    if event_id:
        query = query.eq("event_id", event_id)
    if limit:
        query = query.limit(limit)

    response = await _execute(query, "fetching teams")
    if response is None:
        return None
    teams = _to_models(response.data or [], Team)
    logger.info(f"Fetched {len(teams)} teams.")
    return teams


async def fetch_team(team_id: str, client: Optional[AsyncClient] = None) -> Optional[Team]:
    client = _client_or_none(client)
    if not client:
        return None

    response = await _execute(
        client.table("teams").select(TEAM_SELECT).eq("id", team_id),
        f"fetching team {team_id}",
    )
    if not response or not response.data:
        return None
    teams = _to_models(response.data[:1], Team)
    return teams[0] if teams else None


async def fetch_profiles(
    client: Optional[AsyncClient] = None, limit: Optional[int] = None
) -> Optional[List[Profile]]:
    """Fetches developer profiles, or None if the fetch failed."""
    client = _client_or_none(client)
    if not client:
        return None

    query = client.table("profiles").select(PROFILE_SELECT)
    if limit:
        query = query.limit(limit)

    response = await _execute(query, "fetching profiles")
    if response is None:
        return None
    profiles = _to_models(response.data or [], Profile)
    logger.info(f"Fetched {len(profiles)} profiles.")
    return profiles


async def fetch_profile(
    profile_id: str, client: Optional[AsyncClient] = None
) -> Optional[Profile]:
    client = _client_or_none(client)
    if not client:
        return None

    response = await _execute(
        client.table("profiles").select(PROFILE_DETAIL_SELECT).eq("id", profile_id),
        f"fetching profile {profile_id}",
    )
    if not response or not response.data:
        return None
    profiles = _to_models(response.data[:1], Profile)
    return profiles[0] if profiles else None


async def fetch_pending_join_requests(
    client: Optional[AsyncClient] = None, team_id: Optional[str] = None
) -> Optional[List[JoinRequest]]:
    """Fetches pending join requests, optionally for a single team."""
    client = _client_or_none(client)
    if not client:
        return None

    query = (
        client.table("join_requests")
        .select(JOIN_REQUEST_SELECT)
        .eq("status", JoinRequestStatus.PENDING.value)
    )
    if team_id:
        query = query.eq("team_id", team_id)

    response = await _execute(query, "fetching join requests")
    if response is None:
        return None
    return _to_models(response.data or [], JoinRequest)


# --- Writes ---


async def _insert_one(
    client: AsyncClient, table_name: str, data: Dict[str, Any], model: Type[ModelT]
) -> Optional[ModelT]:
    response = await _execute(
        client.table(table_name).insert([data]), f"inserting into {table_name}"
    )
    if not response or not response.data:
        return None
    created = _to_models(response.data[:1], model)
    if created:
        logger.success(f"Inserted 1 record into {table_name}.")
        return created[0]
    return None


async def create_event(
    name: str,
    date: dt.date,
    description: Optional[str] = None,
    client: Optional[AsyncClient] = None,
) -> Optional[Event]:
    client = _client_or_none(client)
    if not client:
        return None

    data = {"name": name, "date": date.isoformat(), "description": description}
    return await _insert_one(client, "events", data, Event)


async def create_team(
    name: str,
    event_id: str,
    required_skills: Optional[Sequence[str]] = None,
    owner_id: Optional[str] = None,
    client: Optional[AsyncClient] = None,
) -> Optional[Team]:
    """Creates a team; when ``owner_id`` is given that profile is added as owner."""
    client = _client_or_none(client)
    if not client:
        return None

    data = {
        "name": name,
        "event_id": event_id,
        "required_skills": list(required_skills or []),
    }
    team = await _insert_one(client, "teams", data, Team)
    if team and owner_id:
        response = await _execute(
            client.table("team_members").insert(
                [{"team_id": team.id, "user_id": owner_id, "role": MemberRole.OWNER.value}]
            ),
            f"adding owner {owner_id} to team {team.id}",
        )
        if response is None:
            logger.warning(f"Team {team.id} created without its owner membership.")
    return team


async def create_profile(
    name: str,
    college: Optional[str] = None,
    skills: Optional[Sequence[str]] = None,
    client: Optional[AsyncClient] = None,
    **details: Any,
) -> Optional[Profile]:
    """
    Creates a developer profile.

    ``details`` carries the optional profile columns (gender, year_of_study,
    branch, whatsapp_number, linkedin_url, github_url). A WhatsApp number
    that is not exactly ten digits rejects the whole profile.
    """
    client = _client_or_none(client)
    if not client:
        return None

    is_valid, digits = validate_whatsapp_number(details.get("whatsapp_number"))
    if not is_valid:
        logger.error("WhatsApp number must be exactly 10 digits. Profile not created.")
        return None

    data: Dict[str, Any] = {
        "name": name,
        "college": college,
        "skills": list(skills or []),
        "gender": details.get("gender") or None,
        "year_of_study": details.get("year_of_study") or None,
        "branch": details.get("branch") or None,
        "whatsapp_number": digits or None,
        "linkedin_url": details.get("linkedin_url") or None,
        "github_url": details.get("github_url") or None,
    }
    return await _insert_one(client, "profiles", data, Profile)


async def add_team_member(
    team: Team, user_id: str, client: Optional[AsyncClient] = None
) -> bool:
    """Adds a profile to a team as a regular member."""
    client = _client_or_none(client)
    if not client:
        return False

    if team.has_member(user_id):
        logger.warning(f"Profile {user_id} is already a member of team {team.id}.")
        return False

    response = await _execute(
        client.table("team_members").insert(
            [{"team_id": team.id, "user_id": user_id, "role": MemberRole.MEMBER.value}]
        ),
        f"adding member {user_id} to team {team.id}",
    )
    return response is not None


async def remove_team_member(
    member_id: str, client: Optional[AsyncClient] = None
) -> bool:
    client = _client_or_none(client)
    if not client:
        return False

    response = await _execute(
        client.table("team_members").delete().eq("id", member_id),
        f"removing team member {member_id}",
    )
    return response is not None


async def request_to_join(
    team_id: str, user_id: str, client: Optional[AsyncClient] = None
) -> Optional[JoinRequest]:
    """Files a pending join request on behalf of ``user_id``."""
    client = _client_or_none(client)
    if not client:
        return None

    data = {
        "team_id": team_id,
        "user_id": user_id,
        "status": JoinRequestStatus.PENDING.value,
    }
    return await _insert_one(client, "join_requests", data, JoinRequest)


async def respond_to_join_request(
    request: JoinRequest,
    accept: bool,
    team_id: Optional[str] = None,
    client: Optional[AsyncClient] = None,
) -> bool:
    """
    Accepts or rejects a join request.

    Accepting first adds the requester to the team, then marks the request
    accepted. The status is not updated if the membership insert fails.
    """
    client = _client_or_none(client)
    if not client:
        return False

    team_id = team_id or request.team_id
    if accept:
        if not team_id or not request.requester_id:
            logger.error(f"Join request {request.id} has no team or requester.")
            return False
        added = await _execute(
            client.table("team_members").insert(
                [
                    {
                        "team_id": team_id,
                        "user_id": request.requester_id,
                        "role": MemberRole.MEMBER.value,
                    }
                ]
            ),
            f"adding requester of {request.id} to team {team_id}",
        )
        if added is None:
            return False

    status = JoinRequestStatus.ACCEPTED if accept else JoinRequestStatus.REJECTED
    response = await _execute(
        client.table("join_requests").update({"status": status.value}).eq("id", request.id),
        f"updating join request {request.id}",
    )
    if response is None:
        return False
    logger.info(f"Join request {request.id} {status.value}.")
    return True

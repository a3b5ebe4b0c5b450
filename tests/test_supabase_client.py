"""Tests for the Supabase data-access functions"""
from datetime import date

import pytest
from postgrest.exceptions import APIError

from conftest import FakeQuery, make_client
from hackmatch.models.join_request import JoinRequest
from hackmatch.models.team import Team
from hackmatch.storage import supabase_client as storage


def api_error(message="boom"):
    return APIError({"message": message, "code": "500", "hint": None, "details": None})


@pytest.mark.asyncio
async def test_fetch_teams_builds_bounded_query(team_rows):
    query = FakeQuery(data=team_rows)
    client = make_client(teams=query)

    teams = await storage.fetch_teams(client, limit=10, event_id="e1")

    assert [t.id for t in teams] == ["t1", "t2"]
    assert query.called("select")[0][1] == (storage.TEAM_SELECT,)
    assert query.called("eq")[0][1] == ("event_id", "e1")
    assert query.called("limit")[0][1] == (10,)


@pytest.mark.asyncio
async def test_fetch_teams_api_error_returns_none():
    client = make_client(teams=FakeQuery(error=api_error()))

    assert await storage.fetch_teams(client) is None


@pytest.mark.asyncio
async def test_fetch_teams_unexpected_error_returns_none():
    client = make_client(teams=FakeQuery(error=RuntimeError("network down")))

    assert await storage.fetch_teams(client) is None


@pytest.mark.asyncio
async def test_fetch_teams_empty_is_not_an_error():
    client = make_client(teams=FakeQuery(data=[]))

    assert await storage.fetch_teams(client) == []


@pytest.mark.asyncio
async def test_fetch_skips_malformed_rows(profile_rows):
    rows = profile_rows + [{"id": "broken"}]  # no name
    client = make_client(profiles=FakeQuery(data=rows))

    profiles = await storage.fetch_profiles(client, limit=20)

    assert [p.id for p in profiles] == ["p1", "p2", "p3"]


@pytest.mark.asyncio
async def test_fetch_without_client_returns_none():
    assert await storage.fetch_profiles() is None


@pytest.mark.asyncio
async def test_fetch_uses_module_client(profile_rows):
    storage.set_supabase_client(make_client(profiles=FakeQuery(data=profile_rows)))

    profiles = await storage.fetch_profiles()

    assert len(profiles) == 3


@pytest.mark.asyncio
async def test_fetch_events_ordered_by_date():
    query = FakeQuery(data=[{"id": "e1", "name": "HackMIT", "date": "2025-09-13"}])
    client = make_client(events=query)

    events = await storage.fetch_events(client)

    assert events[0].date == date(2025, 9, 13)
    assert query.called("order")[0][1] == ("date",)


@pytest.mark.asyncio
async def test_fetch_team_not_found():
    client = make_client(teams=FakeQuery(data=[]))

    assert await storage.fetch_team("missing", client=client) is None


@pytest.mark.asyncio
async def test_fetch_pending_join_requests_filters_status():
    query = FakeQuery(data=[{"id": "r1", "team_id": "t1", "user_id": "p2", "status": "pending"}])
    client = make_client(join_requests=query)

    requests = await storage.fetch_pending_join_requests(client, team_id="t1")

    assert [r.id for r in requests] == ["r1"]
    assert [c[1] for c in query.called("eq")] == [("status", "pending"), ("team_id", "t1")]


@pytest.mark.asyncio
async def test_create_team_with_owner():
    teams = FakeQuery(data=[{"id": "t5", "name": "New", "required_skills": ["Go"]}])
    members = FakeQuery(data=[{"id": "m1"}])
    client = make_client(teams=teams, team_members=members)

    team = await storage.create_team("New", "e1", ["Go"], owner_id="p1", client=client)

    assert team.id == "t5"
    assert teams.called("insert")[0][1][0] == [
        {"name": "New", "event_id": "e1", "required_skills": ["Go"]}
    ]
    assert members.called("insert")[0][1][0] == [
        {"team_id": "t5", "user_id": "p1", "role": "owner"}
    ]


@pytest.mark.asyncio
async def test_create_team_failure_returns_none():
    client = make_client(teams=FakeQuery(error=api_error()))

    assert await storage.create_team("New", "e1", client=client) is None


@pytest.mark.asyncio
async def test_create_event_serializes_date():
    query = FakeQuery(data=[{"id": "e2", "name": "Hack", "date": "2025-10-01"}])
    client = make_client(events=query)

    event = await storage.create_event("Hack", date(2025, 10, 1), client=client)

    assert event.id == "e2"
    assert query.called("insert")[0][1][0][0]["date"] == "2025-10-01"


@pytest.mark.asyncio
async def test_create_profile_rejects_bad_whatsapp_number():
    query = FakeQuery(data=[{"id": "p9", "name": "X"}])
    client = make_client(profiles=query)

    profile = await storage.create_profile("X", whatsapp_number="12345", client=client)

    assert profile is None
    assert query.calls == []


@pytest.mark.asyncio
async def test_create_profile_cleans_optional_fields():
    query = FakeQuery(data=[{"id": "p9", "name": "X", "skills": ["Go"]}])
    client = make_client(profiles=query)

    profile = await storage.create_profile(
        "X", college="MIT", skills=["Go"], whatsapp_number="98765-43210", branch="", client=client
    )

    inserted = query.called("insert")[0][1][0][0]
    assert profile.id == "p9"
    assert inserted["whatsapp_number"] == "9876543210"
    assert inserted["branch"] is None
    assert inserted["skills"] == ["Go"]


@pytest.mark.asyncio
async def test_add_team_member_rejects_existing_member(team_rows):
    team = Team.model_validate(team_rows[0])
    members = FakeQuery()
    client = make_client(team_members=members)

    assert await storage.add_team_member(team, "p1", client=client) is False
    assert members.calls == []


@pytest.mark.asyncio
async def test_add_team_member_inserts_member_row(team_rows):
    team = Team.model_validate(team_rows[0])
    members = FakeQuery(data=[{"id": "m3"}])
    client = make_client(team_members=members)

    assert await storage.add_team_member(team, "p7", client=client) is True
    assert members.called("insert")[0][1][0] == [
        {"team_id": "t1", "user_id": "p7", "role": "member"}
    ]


@pytest.mark.asyncio
async def test_remove_team_member():
    members = FakeQuery()
    client = make_client(team_members=members)

    assert await storage.remove_team_member("m2", client=client) is True
    assert members.called("delete")
    assert members.called("eq")[0][1] == ("id", "m2")


@pytest.mark.asyncio
async def test_request_to_join_uses_given_user():
    query = FakeQuery(data=[{"id": "r1", "team_id": "t1", "user_id": "p3", "status": "pending"}])
    client = make_client(join_requests=query)

    request = await storage.request_to_join("t1", "p3", client=client)

    assert request.requester_id == "p3"
    assert query.called("insert")[0][1][0] == [
        {"team_id": "t1", "user_id": "p3", "status": "pending"}
    ]


@pytest.mark.asyncio
async def test_accept_join_request_adds_member_then_updates_status():
    members = FakeQuery(data=[{"id": "m9"}])
    requests = FakeQuery(data=[{"id": "r1"}])
    client = make_client(team_members=members, join_requests=requests)
    request = JoinRequest(id="r1", team_id="t1", user_id="p3")

    assert await storage.respond_to_join_request(request, accept=True, client=client)

    assert members.called("insert")[0][1][0] == [
        {"team_id": "t1", "user_id": "p3", "role": "member"}
    ]
    assert requests.called("update")[0][1] == ({"status": "accepted"},)


@pytest.mark.asyncio
async def test_reject_join_request_only_updates_status():
    members = FakeQuery()
    requests = FakeQuery(data=[{"id": "r1"}])
    client = make_client(team_members=members, join_requests=requests)
    request = JoinRequest(id="r1", team_id="t1", user_id="p3")

    assert await storage.respond_to_join_request(request, accept=False, client=client)

    assert members.calls == []
    assert requests.called("update")[0][1] == ({"status": "rejected"},)


@pytest.mark.asyncio
async def test_accept_keeps_request_pending_when_membership_fails():
    members = FakeQuery(error=api_error("duplicate key"))
    requests = FakeQuery()
    client = make_client(team_members=members, join_requests=requests)
    request = JoinRequest(id="r1", team_id="t1", user_id="p3")

    assert await storage.respond_to_join_request(request, accept=True, client=client) is False
    assert requests.calls == []


@pytest.mark.asyncio
async def test_initialize_without_configuration_exits(monkeypatch):
    monkeypatch.setattr(storage.settings, "supabase_url", None)

    with pytest.raises(SystemExit):
        await storage.initialize_supabase()


def test_get_client_before_initialization():
    assert storage.get_supabase_client() is None

    client = make_client()
    storage.set_supabase_client(client)

    assert storage.get_supabase_client() is client


@pytest.mark.asyncio
async def test_fetch_single_profile_and_event(profile_rows):
    profiles = FakeQuery(data=profile_rows[:1])
    events = FakeQuery(data=[{"id": "e1", "name": "HackMIT", "date": "2025-09-13"}])
    client = make_client(profiles=profiles, events=events)

    profile = await storage.fetch_profile("p1", client=client)
    event = await storage.fetch_event("e1", client=client)

    assert profile.name == "Ada Lovelace"
    assert event.name == "HackMIT"
    assert profiles.called("eq")[0][1] == ("id", "p1")


@pytest.mark.asyncio
async def test_malformed_skill_columns_keep_the_row():
    profiles = FakeQuery(
        data=[
            {"id": "p1", "name": "Ada", "skills": "React"},
            {"id": "p2", "name": "Linus", "skills": ["React", None]},
            {"id": "p3", "name": "Grace", "skills": {"x": 1}},
        ]
    )
    teams = FakeQuery(data=[{"id": "t1", "name": "Byte Me", "required_skills": 5}])
    client = make_client(profiles=profiles, teams=teams)

    fetched_profiles = await storage.fetch_profiles(client)
    fetched_teams = await storage.fetch_teams(client)

    assert [p.id for p in fetched_profiles] == ["p1", "p2", "p3"]
    assert [p.skills for p in fetched_profiles] == [[], ["React"], []]
    assert [t.id for t in fetched_teams] == ["t1"]
    assert fetched_teams[0].required_skills == []


@pytest.mark.asyncio
async def test_fetch_events_from_date_with_limit():
    query = FakeQuery(data=[{"id": "e1", "name": "HackMIT", "date": "2025-09-13"}])
    client = make_client(events=query)

    events = await storage.fetch_events(client, from_date=date(2025, 9, 1), limit=5)

    assert [e.id for e in events] == ["e1"]
    assert query.called("gte")[0][1] == ("date", "2025-09-01")
    assert query.called("order")[0][1] == ("date",)
    assert query.called("limit")[0][1] == (5,)


@pytest.mark.asyncio
async def test_fetch_upcoming_events_starts_today():
    query = FakeQuery(data=[])
    client = make_client(events=query)

    assert await storage.fetch_upcoming_events(client) == []
    assert query.called("gte")[0][1] == ("date", date.today().isoformat())
    assert query.called("limit")[0][1] == (storage.UPCOMING_EVENTS_LIMIT,)


@pytest.mark.asyncio
async def test_fetch_profile_embeds_memberships():
    query = FakeQuery(
        data=[
            {
                "id": "p1",
                "name": "Ada",
                "team_members": [
                    {"id": "m1", "role": "owner", "teams": {"id": "t1", "name": "Byte Me"}},
                    {"id": "m2", "role": "member", "teams": {"id": "t2", "name": "Other"}},
                ],
            }
        ]
    )
    client = make_client(profiles=query)

    profile = await storage.fetch_profile("p1", client=client)

    assert query.called("select")[0][1] == (storage.PROFILE_DETAIL_SELECT,)
    assert profile.teams_joined == 2
    assert profile.teams_owned == 1

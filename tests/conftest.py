"""Shared fixtures: a stand-in for the Supabase async client's query builder."""
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from hackmatch.storage import supabase_client


class FakeQuery:
    """Records the fluent PostgREST calls and returns canned rows on execute()."""

    def __init__(self, data=None, error=None):
        self.data = data if data is not None else []
        self.error = error
        self.calls = []

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._record("select", *args, **kwargs)

    def eq(self, *args, **kwargs):
        return self._record("eq", *args, **kwargs)

    def gte(self, *args, **kwargs):
        return self._record("gte", *args, **kwargs)

    def limit(self, *args, **kwargs):
        return self._record("limit", *args, **kwargs)

    def order(self, *args, **kwargs):
        return self._record("order", *args, **kwargs)

    def insert(self, *args, **kwargs):
        return self._record("insert", *args, **kwargs)

    def update(self, *args, **kwargs):
        return self._record("update", *args, **kwargs)

    def delete(self, *args, **kwargs):
        return self._record("delete", *args, **kwargs)

    async def execute(self):
        self.calls.append(("execute", (), {}))
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.data)

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


def make_client(**queries):
    """Client whose ``table(name)`` returns ``queries[name]``."""
    client = Mock()
    client.table.side_effect = lambda name: queries[name]
    return client


@pytest.fixture(autouse=True)
def reset_module_client():
    """Keeps the module-level Supabase client out of every test."""
    supabase_client.set_supabase_client(None)
    yield
    supabase_client.set_supabase_client(None)


@pytest.fixture
def team_rows():
    return [
        {
            "id": "t1",
            "name": "Byte Me",
            "required_skills": ["React", "Node.js", "Python"],
            "event_id": "e1",
            "events": {"id": "e1", "name": "HackMIT", "date": "2025-09-13"},
            "team_members": [
                {"id": "m1", "user_id": "p1", "role": "owner", "profiles": {"id": "p1", "name": "Ada"}},
                {"id": "m2", "user_id": "p2", "role": "member", "profiles": {"id": "p2", "name": "Linus"}},
            ],
        },
        {
            "id": "t2",
            "name": "Null Pointers",
            "required_skills": None,
            "event_id": "e1",
            "events": None,
            "team_members": [],
        },
    ]


@pytest.fixture
def profile_rows():
    return [
        {"id": "p1", "name": "Ada Lovelace", "skills": ["Python", "React"], "college": "MIT"},
        {"id": "p2", "name": "Linus T", "skills": ["C", "Linux"], "college": "Helsinki"},
        {"id": "p3", "name": "Grace Hopper", "skills": None, "college": "Yale"},
    ]

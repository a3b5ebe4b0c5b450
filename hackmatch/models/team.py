# hackmatch/models/team.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import MemberRole
from .event import EventRef
from .profile import ProfileSummary
from .skills import SkillList


class TeamMember(BaseModel):
    """A row of ``team_members`` with its joined profile."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    team_id: Optional[str] = None
    user_id: Optional[str] = None
    role: MemberRole = MemberRole.MEMBER
    joined_at: Optional[datetime] = None
    profile: Optional[ProfileSummary] = Field(None, alias="profiles")


class Team(BaseModel):
    """A hackathon team; also the candidate record for team matching.

    Field aliases follow the PostgREST embedding names (``events``,
    ``team_members``) so rows can be validated as returned by Supabase.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    required_skills: SkillList = Field(default_factory=list)
    event_id: Optional[str] = None
    event: Optional[EventRef] = Field(None, alias="events")
    members: List[TeamMember] = Field(default_factory=list, alias="team_members")
    created_at: Optional[datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def owner(self) -> Optional[TeamMember]:
        return next((m for m in self.members if m.role == MemberRole.OWNER), None)

    def has_member(self, user_id: str) -> bool:
        return any(
            m.user_id == user_id or (m.profile is not None and m.profile.id == user_id)
            for m in self.members
        )


# Name used by the matcher
TeamCandidate = Team

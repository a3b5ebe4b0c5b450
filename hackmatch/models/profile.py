from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import MemberRole
from .event import EventRef
from .skills import SkillList


class TeamRef(BaseModel):
    """The slice of a team embedded in a membership row."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    event: Optional[EventRef] = Field(None, alias="events")


class ProfileMembership(BaseModel):
    """A ``team_members`` row seen from the profile side, with its team."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    role: MemberRole = MemberRole.MEMBER
    joined_at: Optional[datetime] = None
    team: Optional[TeamRef] = Field(None, alias="teams")


class Profile(BaseModel):
    """A developer profile; also the candidate record for developer matching."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    skills: SkillList = Field(default_factory=list)
    college: Optional[str] = None

    # Optional details captured by the profile form
    gender: Optional[str] = None
    year_of_study: Optional[int] = None
    branch: Optional[str] = None
    whatsapp_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    created_at: Optional[datetime] = None

    # Only present when fetched with the team_members embed
    memberships: List[ProfileMembership] = Field(
        default_factory=list, alias="team_members"
    )

    @field_validator("memberships", mode="before")
    @classmethod
    def empty_memberships(cls, v):
        return v if isinstance(v, list) else []

    @property
    def teams_joined(self) -> int:
        return len(self.memberships)

    @property
    def teams_owned(self) -> int:
        return sum(1 for m in self.memberships if m.role == MemberRole.OWNER)


# Name used by the matcher
ProfileCandidate = Profile


class ProfileSummary(BaseModel):
    """Nested profile slice returned by joins such as ``team_members(profiles(name))``."""

    id: Optional[str] = None
    name: Optional[str] = None
    skills: SkillList = Field(default_factory=list)
    college: Optional[str] = None

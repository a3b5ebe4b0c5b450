from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .profile import Profile
from .team import Team


class MatchConfig(BaseModel):
    """Scalar knobs for a single matcher call.

    The defaults are the team-matching ones; profile matching uses a floor of
    40 (see ``profile_match_config``).
    """

    limit: int = Field(5, ge=0, description="Maximum number of results returned.")
    min_score: int = Field(
        30, ge=0, le=100, description="Exclusive percentage floor (team default)."
    )
    # Only consulted by profile matching
    min_common_skills: int = Field(0, ge=0)


class TeamMatch(BaseModel):
    """A team ranked against the requester's skills."""

    model_config = ConfigDict(frozen=True)

    team: Team
    match_percentage: int
    matching_skills: List[str]  # required skills the requester has
    missing_skills: List[str]  # required skills the requester lacks


class ProfileMatch(BaseModel):
    """A developer ranked by skill overlap with the requester."""

    model_config = ConfigDict(frozen=True)

    profile: Profile
    match_percentage: int
    common_skills: List[str]


class Recommendations(BaseModel):
    """Output of one recommendation run."""

    requester_skills: List[str]
    teams: List[TeamMatch] = Field(default_factory=list)
    profiles: List[ProfileMatch] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.teams and not self.profiles

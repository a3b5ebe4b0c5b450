from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import JoinRequestStatus
from .profile import ProfileSummary


class JoinRequest(BaseModel):
    """A request by a profile to join a team, reviewed by the team."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    team_id: Optional[str] = None
    user_id: Optional[str] = None
    status: JoinRequestStatus = JoinRequestStatus.PENDING
    created_at: Optional[datetime] = None
    profile: Optional[ProfileSummary] = Field(None, alias="profiles")

    @property
    def requester_id(self) -> Optional[str]:
        """The requesting profile, from the column or the joined row."""
        if self.user_id:
            return self.user_id
        return self.profile.id if self.profile else None

import datetime as dt
from typing import Optional

from pydantic import BaseModel


class EventRef(BaseModel):
    """The slice of an event embedded in a team row (``events(name, date)``)."""

    id: Optional[str] = None
    name: Optional[str] = None
    date: Optional[dt.date] = None


class Event(BaseModel):
    """Represents a hackathon listed on the platform."""

    id: str
    name: str
    date: dt.date
    description: Optional[str] = None
    created_at: Optional[dt.datetime] = None

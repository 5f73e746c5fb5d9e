from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from cardloom.models.base import TCGGame
from cardloom.models.event import EventSource, EventType, RSVPStatus


class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    game: TCGGame
    event_type: EventType
    source: EventSource = EventSource.COMMUNITY
    start_date: datetime
    end_date: datetime
    location: Dict[str, Any] = Field(default_factory=dict)
    max_attendees: Optional[int] = Field(None, ge=1)
    entry_fee: Optional[float] = Field(None, ge=0)
    cover_image_url: Optional[str] = Field(None, max_length=500)


class EventUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    event_type: Optional[EventType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[Dict[str, Any]] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    entry_fee: Optional[float] = Field(None, ge=0)
    cover_image_url: Optional[str] = Field(None, max_length=500)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: int
    title: str
    description: str
    game: TCGGame
    event_type: EventType
    source: EventSource
    start_date: datetime
    end_date: datetime
    location: Dict[str, Any] = Field(default_factory=dict)
    max_attendees: Optional[int] = None
    current_attendees: int
    entry_fee: Optional[float] = None
    organizer_id: int
    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class RSVPRequest(BaseModel):
    status: RSVPStatus


class RSVPResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rsvp_id: int
    event_id: int
    user_id: int
    status: RSVPStatus
    updated_at: Optional[datetime] = None

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column, String, UniqueConstraint
from sqlalchemy.types import TIMESTAMP, Numeric
from sqlmodel import Field

from cardloom.models.base import BaseModel, TCGGame


class EventType(str, Enum):
    TOURNAMENT = "tournament"
    MEETUP = "meetup"
    DRAFT = "draft"
    SEALED = "sealed"
    CASUAL = "casual"


class EventSource(str, Enum):
    COMMUNITY = "community"
    OFFICIAL = "official"


class RSVPStatus(str, Enum):
    ATTENDING = "attending"
    MAYBE = "maybe"
    DECLINED = "declined"


class Event(BaseModel, table=True):
    """
    오프라인 이벤트 (토너먼트, 밋업 등)
    - current_attendees는 attending RSVP 수
    """

    __tablename__ = "events"

    event_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    title: str = Field(max_length=200, nullable=False)
    description: str = Field(nullable=False)
    game: TCGGame = Field(sa_type=String(20), nullable=False, index=True)
    event_type: EventType = Field(sa_type=String(20), nullable=False)
    source: EventSource = Field(default=EventSource.COMMUNITY, sa_type=String(20))

    start_date: datetime = Field(sa_type=TIMESTAMP(timezone=True), nullable=False, index=True)
    end_date: datetime = Field(sa_type=TIMESTAMP(timezone=True), nullable=False)

    location: dict = Field(default_factory=dict, sa_column=Column(JSON))
    max_attendees: Optional[int] = Field(default=None)
    current_attendees: int = Field(default=0)

    entry_fee: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )

    organizer_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    cover_image_url: Optional[str] = Field(default=None, max_length=500)


class EventRSVP(BaseModel, table=True):
    __tablename__ = "event_rsvps"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_rsvp_event_user"),
    )

    rsvp_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    event_id: int = Field(foreign_key="events.event_id", nullable=False, index=True)
    user_id: int = Field(foreign_key="users.user_id", nullable=False)
    status: RSVPStatus = Field(sa_type=String(20), nullable=False)

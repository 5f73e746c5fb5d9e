import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.models.event import Event, EventRSVP, RSVPStatus

logger = logging.getLogger(__name__)


class EventRepository:
    """
    이벤트 / 참가 응답(RSVP) Repository
    """

    async def search(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        event_type: Optional[str] = None,
        source: Optional[str] = None,
        starts_after: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Event], int]:
        conditions = [Event.is_deleted == False]  # noqa: E712
        if game:
            conditions.append(Event.game == game)
        if event_type:
            conditions.append(Event.event_type == event_type)
        if source:
            conditions.append(Event.source == source)
        if starts_after is not None:
            conditions.append(Event.start_date >= starts_after)

        count_result = await db.execute(select(func.count()).select_from(Event).where(*conditions))
        result = await db.execute(
            select(Event)
            .where(*conditions)
            .order_by(Event.start_date.asc(), Event.event_id.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def get_by_id(self, db: AsyncSession, event_id: int) -> Optional[Event]:
        result = await db.execute(
            select(Event).where(Event.event_id == event_id, Event.is_deleted == False)  # noqa: E712
        )
        event = result.scalars().first()
        if not event:
            logger.warning(f"이벤트를 찾을 수 없음: {event_id}")
        return event

    async def create(self, db: AsyncSession, organizer_id: int, data: Dict[str, Any]) -> Event:
        event = Event(organizer_id=organizer_id, current_attendees=0, **data)
        db.add(event)
        await db.commit()
        await db.refresh(event)
        logger.info(f"이벤트 생성: event={event.event_id}, organizer={organizer_id}")
        return event

    async def update(self, db: AsyncSession, event: Event, update_data: Dict[str, Any]) -> Event:
        for key, value in update_data.items():
            setattr(event, key, value)
        await db.commit()
        await db.refresh(event)
        return event

    async def soft_delete(self, db: AsyncSession, event: Event) -> None:
        event.is_deleted = True
        await db.commit()
        logger.info(f"이벤트 삭제: {event.event_id}")

    async def get_rsvp(self, db: AsyncSession, event_id: int, user_id: int) -> Optional[EventRSVP]:
        result = await db.execute(
            select(EventRSVP).where(EventRSVP.event_id == event_id, EventRSVP.user_id == user_id)
        )
        return result.scalars().first()

    async def upsert_rsvp(self, db: AsyncSession, event: Event, user_id: int, status: RSVPStatus) -> EventRSVP:
        """
        RSVP 등록/변경 후 참석 인원(attending 수) 재계산
        """
        rsvp = await self.get_rsvp(db, event.event_id, user_id)
        if rsvp:
            rsvp.status = status
        else:
            rsvp = EventRSVP(event_id=event.event_id, user_id=user_id, status=status)
            db.add(rsvp)
        await db.flush()

        count_result = await db.execute(
            select(func.count()).select_from(EventRSVP).where(
                EventRSVP.event_id == event.event_id,
                EventRSVP.status == RSVPStatus.ATTENDING,
            )
        )
        event.current_attendees = count_result.scalar() or 0

        await db.commit()
        await db.refresh(rsvp)
        await db.refresh(event)
        logger.info(f"RSVP: event={event.event_id}, user={user_id}, status={status}")
        return rsvp

    async def list_rsvps(self, db: AsyncSession, event_id: int) -> List[EventRSVP]:
        result = await db.execute(
            select(EventRSVP)
            .where(EventRSVP.event_id == event_id)
            .order_by(EventRSVP.created_at.asc(), EventRSVP.rsvp_id.asc())
        )
        return list(result.scalars().all())

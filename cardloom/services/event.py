import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.event import Event, RSVPStatus
from cardloom.repositories.event import EventRepository
from cardloom.schemas.common import PagedResult, Pagination
from cardloom.schemas.event import (EventCreateRequest, EventResponse,
                                    EventUpdateRequest, RSVPResponse)
from cardloom.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _check_period(start, end) -> None:
    if ensure_utc(end) < ensure_utc(start):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must not be before start date",
        )


class EventService:
    """
    오프라인 이벤트 / RSVP 비즈니스 로직
    """

    def __init__(self):
        self.event_repo = EventRepository()

    async def search_events(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        event_type: Optional[str] = None,
        source: Optional[str] = None,
        upcoming: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> PagedResult[EventResponse]:
        events, total = await self.event_repo.search(
            db,
            game=game,
            event_type=event_type,
            source=source,
            starts_after=utc_now() if upcoming else None,
            limit=limit,
            offset=offset,
        )
        return PagedResult[EventResponse](
            items=[EventResponse.model_validate(e) for e in events],
            pagination=Pagination.build(total, limit, offset),
        )

    async def _get_event(self, db: AsyncSession, event_id: int) -> Event:
        event = await self.event_repo.get_by_id(db, event_id)
        if not event:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
        return event

    async def _get_organized(self, db: AsyncSession, event_id: int, user_id: int) -> Event:
        event = await self._get_event(db, event_id)
        if event.organizer_id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this event")
        return event

    async def get_event(self, db: AsyncSession, event_id: int) -> EventResponse:
        return EventResponse.model_validate(await self._get_event(db, event_id))

    async def create_event(self, db: AsyncSession, organizer_id: int, request: EventCreateRequest) -> EventResponse:
        _check_period(request.start_date, request.end_date)

        data = request.model_dump()
        data["start_date"] = ensure_utc(request.start_date)
        data["end_date"] = ensure_utc(request.end_date)
        if request.entry_fee is not None:
            data["entry_fee"] = Decimal(str(request.entry_fee))

        event = await self.event_repo.create(db, organizer_id, data)
        return EventResponse.model_validate(event)

    async def update_event(
        self, db: AsyncSession, event_id: int, user_id: int, request: EventUpdateRequest
    ) -> EventResponse:
        event = await self._get_organized(db, event_id, user_id)

        update_data = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
        for key in ("start_date", "end_date"):
            if key in update_data:
                update_data[key] = ensure_utc(update_data[key])
        if "entry_fee" in update_data:
            update_data["entry_fee"] = Decimal(str(update_data["entry_fee"]))

        _check_period(update_data.get("start_date", event.start_date), update_data.get("end_date", event.end_date))

        event = await self.event_repo.update(db, event, update_data)
        return EventResponse.model_validate(event)

    async def delete_event(self, db: AsyncSession, event_id: int, user_id: int) -> None:
        event = await self._get_organized(db, event_id, user_id)
        await self.event_repo.soft_delete(db, event)

    async def rsvp(self, db: AsyncSession, event_id: int, user_id: int, rsvp_status: RSVPStatus) -> RSVPResponse:
        """
        참가 응답 등록/변경
        - 정원이 찬 이벤트에 새로 attending 하면 400
        """
        event = await self._get_event(db, event_id)
        current = await self.event_repo.get_rsvp(db, event.event_id, user_id)
        already_attending = current is not None and RSVPStatus(current.status) == RSVPStatus.ATTENDING

        if (
            rsvp_status == RSVPStatus.ATTENDING
            and not already_attending
            and event.max_attendees is not None
            and event.current_attendees >= event.max_attendees
        ):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is at full capacity")

        rsvp = await self.event_repo.upsert_rsvp(db, event, user_id, rsvp_status)
        return RSVPResponse.model_validate(rsvp)

    async def list_rsvps(self, db: AsyncSession, event_id: int) -> List[RSVPResponse]:
        event = await self._get_event(db, event_id)
        return [RSVPResponse.model_validate(r) for r in await self.event_repo.list_rsvps(db, event.event_id)]

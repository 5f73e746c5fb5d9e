# routers/events.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.base import TCGGame
from cardloom.models.event import EventSource, EventType
from cardloom.models.user import User
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.schemas.event import (EventCreateRequest, EventResponse,
                                    EventUpdateRequest, RSVPRequest, RSVPResponse)
from cardloom.services.event import EventService
from cardloom.utils.dependencies import get_current_user, get_event_service
from cardloom.utils.router import get_router

router = get_router("events")


@router.get("", response_model=ApiResponse[List[EventResponse]], summary="이벤트 목록")
async def search_events(
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    game: Optional[TCGGame] = None,
    event_type: Optional[EventType] = None,
    source: Optional[EventSource] = None,
    upcoming: bool = Query(False, description="시작 시각이 현재 이후인 이벤트만"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.search_events(
        db,
        game=game.value if game else None,
        event_type=event_type.value if event_type else None,
        source=source.value if source else None,
        upcoming=upcoming,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.post(
    "",
    response_model=ApiResponse[EventResponse],
    status_code=status.HTTP_201_CREATED,
    summary="이벤트 생성",
    responses={400: {"model": ErrorResponse, "description": "종료 시각이 시작 시각보다 이전"}},
)
async def create_event(
    request: EventCreateRequest,
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    event = await service.create_event(db, current_user.user_id, request)
    return ApiResponse(data=event, message="Event created")


@router.get("/{event_id}", response_model=ApiResponse[EventResponse], summary="이벤트 상세")
async def get_event(
    event_id: int,
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.get_event(db, event_id))


@router.put("/{event_id}", response_model=ApiResponse[EventResponse], summary="이벤트 수정")
async def update_event(
    event_id: int,
    request: EventUpdateRequest,
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.update_event(db, event_id, current_user.user_id, request))


@router.delete("/{event_id}", response_model=MessageResponse, summary="이벤트 삭제")
async def delete_event(
    event_id: int,
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete_event(db, event_id, current_user.user_id)
    return MessageResponse(message="Event deleted")


@router.post("/{event_id}/rsvp", response_model=ApiResponse[RSVPResponse], summary="참가 응답")
async def rsvp_event(
    event_id: int,
    request: RSVPRequest,
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    - **status**: attending, maybe, declined
    """
    rsvp = await service.rsvp(db, event_id, current_user.user_id, request.status)
    return ApiResponse(data=rsvp)


@router.get("/{event_id}/rsvps", response_model=ApiResponse[List[RSVPResponse]], summary="참가 응답 목록")
async def list_rsvps(
    event_id: int,
    service: Annotated[EventService, Depends(get_event_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.list_rsvps(db, event_id))

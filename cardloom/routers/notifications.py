# routers/notifications.py
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.user import User
from cardloom.schemas.common import ApiResponse, MessageResponse
from cardloom.schemas.notification import NotificationListResponse, NotificationResponse
from cardloom.services.notification import NotificationService
from cardloom.utils.dependencies import get_current_user, get_notification_service
from cardloom.utils.router import get_router

router = get_router("notifications")


@router.get("", response_model=ApiResponse[NotificationListResponse], summary="알림 목록")
async def list_notifications(
    service: Annotated[NotificationService, Depends(get_notification_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    unread_only: bool = False,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result, pagination = await service.list_notifications(db, current_user.user_id, unread_only, limit, offset)
    return ApiResponse(data=result, pagination=pagination)


@router.put("/read-all", response_model=MessageResponse, summary="알림 전체 읽음")
async def mark_all_read(
    service: Annotated[NotificationService, Depends(get_notification_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    updated = await service.mark_all_read(db, current_user.user_id)
    return MessageResponse(message=f"{updated} notifications marked as read")


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse], summary="알림 읽음")
async def mark_read(
    notification_id: int,
    service: Annotated[NotificationService, Depends(get_notification_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.mark_read(db, notification_id, current_user.user_id))


@router.delete("/{notification_id}", response_model=MessageResponse, summary="알림 삭제")
async def delete_notification(
    notification_id: int,
    service: Annotated[NotificationService, Depends(get_notification_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete(db, notification_id, current_user.user_id)
    return MessageResponse(message="Notification deleted")

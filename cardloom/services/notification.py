import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.notification import PREFERENCE_KEYS, Notification, NotificationType
from cardloom.repositories.notification import NotificationRepository
from cardloom.repositories.user import UserRepository
from cardloom.schemas.common import Pagination
from cardloom.schemas.notification import NotificationListResponse, NotificationResponse

logger = logging.getLogger(__name__)


class NotificationService:
    """
    알림 발송 / 조회 비즈니스 로직
    - 발송 시 수신자의 알림 환경설정(preferences.notifications)을 확인
    """

    def __init__(self):
        self.notification_repo = NotificationRepository()
        self.user_repo = UserRepository()

    async def notify(
        self,
        db: AsyncSession,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        """
        알림 생성. 수신자가 해당 유형을 꺼두었으면 생성하지 않고 None 반환
        """
        user = await self.user_repo.get_by_id(db, user_id)
        if not user or not user.is_active:
            return None

        preference_key = PREFERENCE_KEYS.get(type)
        if preference_key and not user.wants_notification(preference_key):
            logger.debug(f"알림 환경설정으로 발송 생략: user={user_id}, type={type.value}")
            return None

        return await self.notification_repo.create(db, user_id, type, title, message, data)

    async def list_notifications(
        self, db: AsyncSession, user_id: int, unread_only: bool, limit: int, offset: int
    ) -> tuple[NotificationListResponse, Pagination]:
        notifications, total = await self.notification_repo.list_for_user(
            db, user_id, unread_only, limit, offset
        )
        unread_count = await self.notification_repo.unread_count(db, user_id)
        response = NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=unread_count,
        )
        return response, Pagination.build(total, limit, offset)

    async def _get_owned(self, db: AsyncSession, notification_id: int, user_id: int) -> Notification:
        notification = await self.notification_repo.get_owned(db, notification_id, user_id)
        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
        return notification

    async def mark_read(self, db: AsyncSession, notification_id: int, user_id: int) -> NotificationResponse:
        notification = await self._get_owned(db, notification_id, user_id)
        notification = await self.notification_repo.mark_read(db, notification)
        return NotificationResponse.model_validate(notification)

    async def mark_all_read(self, db: AsyncSession, user_id: int) -> int:
        updated = await self.notification_repo.mark_all_read(db, user_id)
        logger.info(f"알림 전체 읽음 처리: user={user_id}, {updated}건")
        return updated

    async def delete(self, db: AsyncSession, notification_id: int, user_id: int) -> None:
        notification = await self._get_owned(db, notification_id, user_id)
        await self.notification_repo.soft_delete(db, notification)

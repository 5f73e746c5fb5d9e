import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationRepository:
    """
    알림 Repository
    """

    async def create(
        self,
        db: AsyncSession,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(user_id=user_id, type=type, title=title, message=message, data=data)
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        logger.info(f"알림 생성: user={user_id}, type={type.value}")
        return notification

    async def list_for_user(
        self, db: AsyncSession, user_id: int, unread_only: bool, limit: int, offset: int
    ) -> Tuple[List[Notification], int]:
        conditions = [Notification.user_id == user_id, Notification.is_deleted == False]  # noqa: E712
        if unread_only:
            conditions.append(Notification.is_read == False)  # noqa: E712

        count_result = await db.execute(select(func.count()).select_from(Notification).where(*conditions))
        result = await db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.notification_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def unread_count(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(Notification).where(
                Notification.user_id == user_id,
                Notification.is_read == False,  # noqa: E712
                Notification.is_deleted == False,  # noqa: E712
            )
        )
        return result.scalar() or 0

    async def get_owned(self, db: AsyncSession, notification_id: int, user_id: int) -> Optional[Notification]:
        """본인 알림만 조회 (타인 알림은 None)"""
        result = await db.execute(
            select(Notification).where(
                Notification.notification_id == notification_id,
                Notification.user_id == user_id,
                Notification.is_deleted == False,  # noqa: E712
            )
        )
        return result.scalars().first()

    async def mark_read(self, db: AsyncSession, notification: Notification) -> Notification:
        notification.is_read = True
        await db.commit()
        await db.refresh(notification)
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        await db.commit()
        return result.rowcount or 0

    async def soft_delete(self, db: AsyncSession, notification: Notification) -> None:
        notification.is_deleted = True
        await db.commit()

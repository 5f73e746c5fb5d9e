from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column, String
from sqlmodel import Field

from cardloom.models.base import BaseModel


class NotificationType(str, Enum):
    NEW_OFFER = "new_offer"
    OFFER_RESPONSE = "offer_response"
    NEW_MESSAGE = "new_message"
    NEW_FOLLOWER = "new_follower"
    DECK_ENGAGEMENT = "deck_engagement"
    PRICE_DROP = "price_drop"
    EVENT_REMINDER = "event_reminder"
    ORDER_UPDATE = "order_update"


# 알림 유형 -> 사용자 환경설정(preferences.notifications) 키
# None이면 항상 발송
PREFERENCE_KEYS = {
    NotificationType.NEW_OFFER: "offers",
    NotificationType.OFFER_RESPONSE: "offers",
    NotificationType.NEW_MESSAGE: "messages",
    NotificationType.NEW_FOLLOWER: "followers",
    NotificationType.DECK_ENGAGEMENT: None,
    NotificationType.PRICE_DROP: "price_drops",
    NotificationType.EVENT_REMINDER: "events",
    NotificationType.ORDER_UPDATE: None,
}


class Notification(BaseModel, table=True):
    __tablename__ = "notifications"

    notification_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    user_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    type: NotificationType = Field(sa_type=String(30), nullable=False)
    title: str = Field(max_length=200, nullable=False)
    message: str = Field(nullable=False)
    data: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    is_read: bool = Field(default=False)

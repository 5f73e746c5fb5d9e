from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Column, String, UniqueConstraint
from sqlalchemy.types import Numeric
from sqlmodel import Field

from cardloom.models.base import BaseModel
from cardloom.models.listing import CardCondition


class CollectionItem(BaseModel, table=True):
    """
    사용자 보유 카드
    - (user_id, card_id, condition, is_foil) 조합당 한 행, 중복 추가 시 수량 증가
    """

    __tablename__ = "collection_items"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", "condition", "is_foil", name="uq_collection_identity"),
        CheckConstraint("quantity > 0", name="ck_collection_quantity_positive"),
    )

    item_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="보유 항목 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    user_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    card_id: int = Field(foreign_key="cards.card_id", nullable=False)
    quantity: int = Field(default=1, nullable=False)
    condition: CardCondition = Field(default=CardCondition.NEAR_MINT, sa_type=String(30))
    is_foil: bool = Field(default=False)

    purchase_price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )
    notes: Optional[str] = Field(default=None)


class WatchlistItem(BaseModel, table=True):
    """
    관심 카드 (user_id, card_id 유니크)
    - target_price 이하 등록이 올라오면 price_drop 알림
    """

    __tablename__ = "watchlist_items"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="uq_watchlist_user_card"),
    )

    watch_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    user_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    card_id: int = Field(foreign_key="cards.card_id", nullable=False, index=True)

    target_price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )

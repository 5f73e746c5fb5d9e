from typing import Optional

from sqlalchemy import JSON, CheckConstraint, Column, String, UniqueConstraint
from sqlmodel import Field

from cardloom.models.base import BaseModel, TCGGame


class Deck(BaseModel, table=True):
    """
    사용자가 구성한 덱
    """

    __tablename__ = "decks"

    deck_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="덱 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    user_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    game: TCGGame = Field(sa_type=String(20), nullable=False, index=True)
    title: str = Field(max_length=100, nullable=False)
    description: Optional[str] = Field(default=None)
    format: str = Field(max_length=50, nullable=False, description="Standard, Commander 등")
    is_public: bool = Field(default=False)
    cover_image_url: Optional[str] = Field(default=None, max_length=500)
    tags: list = Field(default_factory=list, sa_column=Column(JSON))


class DeckCard(BaseModel, table=True):
    """
    덱 구성 카드 (deck_id, card_id 유니크)
    """

    __tablename__ = "deck_cards"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", name="uq_deckcard_pair"),
        CheckConstraint("quantity > 0", name="ck_deckcard_quantity_positive"),
    )

    deck_card_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    deck_id: int = Field(foreign_key="decks.deck_id", nullable=False, index=True)
    card_id: int = Field(foreign_key="cards.card_id", nullable=False)
    quantity: int = Field(default=1, nullable=False)
    notes: Optional[str] = Field(default=None)

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column, Index, String, UniqueConstraint
from sqlalchemy.types import Numeric
from sqlmodel import Field

from cardloom.models.base import BaseModel, TCGGame


class CardRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    HOLO_RARE = "holo_rare"
    SUPER_RARE = "super_rare"
    SECRET_RARE = "secret_rare"
    MYTHIC_RARE = "mythic_rare"
    LEGENDARY = "legendary"
    ULTRA_RARE = "ultra_rare"


class SetType(str, Enum):
    CORE = "core"
    EXPANSION = "expansion"
    SUPPLEMENTAL = "supplemental"
    PROMO = "promo"
    SPECIAL = "special"


class CardSet(BaseModel, table=True):
    """
    카드 세트(확장팩) 정보
    - code는 전체 게임에서 유일
    """

    __tablename__ = "card_sets"
    __table_args__ = (
        UniqueConstraint("code", name="uq_card_set_code"),
    )

    set_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="세트 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    game: TCGGame = Field(sa_type=String(20), nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    code: str = Field(max_length=10, nullable=False)
    release_date: date = Field(nullable=False, index=True)
    total_cards: int = Field(default=0, nullable=False)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None)
    block: Optional[str] = Field(default=None, max_length=10, description="MTG 블록")
    set_type: Optional[SetType] = Field(default=None, sa_type=String(20))


class Card(BaseModel, table=True):
    """
    카드 카탈로그
    - attributes: 게임별 속성 JSON (convertedManaCost, colors, hp 등)
    """

    __tablename__ = "cards"
    __table_args__ = (
        Index("ix_cards_game_rarity", "game", "rarity"),
    )

    card_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="카드 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    game: TCGGame = Field(sa_type=String(20), nullable=False, index=True)

    set_id: int = Field(
        foreign_key="card_sets.set_id",
        nullable=False,
        index=True,
        description="소속 세트",
    )

    name: str = Field(max_length=255, nullable=False, index=True)
    number: str = Field(max_length=10, nullable=False, description="세트 내 카드 번호")
    rarity: CardRarity = Field(sa_type=String(20), nullable=False)
    card_type: Optional[str] = Field(default=None, max_length=100, description="Creature, Pokémon, Monster 등")
    image_url: str = Field(max_length=500, nullable=False)
    rules_text: Optional[str] = Field(default=None)

    market_price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )

    attributes: dict = Field(default_factory=dict, sa_column=Column(JSON))
    related_cards: Optional[list] = Field(default=None, sa_column=Column(JSON))

    is_active: bool = Field(default=True)

    def full_name(self, set_code: Optional[str] = None) -> str:
        return f"{self.name} ({set_code or self.set_id} {self.number})"

    @property
    def display_rarity(self) -> str:
        rarity = getattr(self.rarity, "value", self.rarity)
        return rarity.replace("_", " ").upper()

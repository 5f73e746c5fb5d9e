import datetime
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from cardloom.models.base import TCGGame
from cardloom.models.card import CardRarity, SetType


class CardSortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    NUMBER = "number"
    RARITY = "rarity"
    NEWEST = "newest"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PricePeriod(str, Enum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"

    @property
    def days(self) -> int:
        return {"7d": 7, "30d": 30, "90d": 90, "1y": 365}[self.value]


class CardSetCreateRequest(BaseModel):
    game: TCGGame
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=10)
    release_date: date
    total_cards: int = Field(0, ge=0)
    logo_url: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    block: Optional[str] = Field(None, max_length=10)
    set_type: Optional[SetType] = None


class CardSetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    set_id: int
    game: TCGGame
    name: str
    code: str
    release_date: date
    total_cards: int
    logo_url: Optional[str] = None
    description: Optional[str] = None
    block: Optional[str] = None
    set_type: Optional[SetType] = None


class CardCreateRequest(BaseModel):
    game: TCGGame
    set_id: int
    name: str = Field(..., min_length=1, max_length=255)
    number: str = Field(..., min_length=1, max_length=10)
    rarity: CardRarity
    card_type: Optional[str] = Field(None, max_length=100)
    image_url: HttpUrl
    rules_text: Optional[str] = None
    market_price: Optional[float] = Field(None, ge=0)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    related_cards: Optional[List[str]] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "game": "pokemon",
            "set_id": 1,
            "name": "Charizard",
            "number": "4",
            "rarity": "holo_rare",
            "card_type": "Fire",
            "image_url": "https://example.com/charizard.jpg",
            "rules_text": "Fire-type Pokémon with 120 HP",
            "market_price": 45.99,
            "attributes": {"hp": 120, "types": ["Fire"]},
        }
    })


class CardResponse(BaseModel):
    card_id: int
    game: TCGGame
    set_id: int
    set_code: Optional[str] = None
    name: str
    full_name: str
    number: str
    rarity: CardRarity
    display_rarity: str
    card_type: Optional[str] = None
    image_url: str
    rules_text: Optional[str] = None
    market_price: Optional[float] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    related_cards: Optional[List[str]] = None


class PricePoint(BaseModel):
    date: datetime.date
    price: float
    volume: int


class PriceSummary(BaseModel):
    current_price: float
    change: float
    change_percent: float
    min_price: float
    max_price: float
    avg_price: float
    volatility: float
    trend: str = Field(..., description="up | down | stable")


class PriceHistoryResponse(BaseModel):
    card_id: int
    period: PricePeriod
    points: List[PricePoint]
    summary: Optional[PriceSummary] = None

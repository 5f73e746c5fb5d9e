from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cardloom.models.base import TCGGame
from cardloom.schemas.card import CardResponse


class DeckCreateRequest(BaseModel):
    game: TCGGame
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    format: str = Field(..., min_length=1, max_length=50, description="Standard, Commander, Modern ...")
    is_public: bool = False
    cover_image_url: Optional[str] = Field(None, max_length=500)
    tags: List[str] = Field(default_factory=list, max_length=20)


class DeckUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    format: Optional[str] = Field(None, min_length=1, max_length=50)
    is_public: Optional[bool] = None
    cover_image_url: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = Field(None, max_length=20)


class DeckDuplicateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)


class DeckCardAddRequest(BaseModel):
    card_id: int
    quantity: int = Field(1, ge=1, le=100)
    notes: Optional[str] = Field(None, max_length=500)


class DeckCardQuantityRequest(BaseModel):
    quantity: int = Field(..., ge=0, le=100, description="0이면 덱에서 제거")


class DeckCardEntry(BaseModel):
    card: CardResponse
    quantity: int
    notes: Optional[str] = None


class DeckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    deck_id: int
    user_id: int
    game: TCGGame
    title: str
    description: Optional[str] = None
    format: str
    is_public: bool
    cover_image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    card_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeckDetailResponse(DeckResponse):
    cards: List[DeckCardEntry] = Field(default_factory=list)


class DeckLegality(BaseModel):
    is_legal: bool
    issues: List[str] = Field(default_factory=list)


class DeckAnalysisResponse(BaseModel):
    deck_id: Optional[int] = None
    game: TCGGame
    format: str
    total_cards: int
    unique_cards: int
    average_cost: float
    color_distribution: Dict[str, int]
    type_distribution: Dict[str, int]
    mana_curve: Dict[int, int]
    synergies: List[str]
    weaknesses: List[str]
    suggestions: List[str]
    legality: DeckLegality

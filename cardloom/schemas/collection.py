from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from cardloom.models.listing import CardCondition
from cardloom.schemas.card import CardResponse


class CollectionAddRequest(BaseModel):
    """
    보유 카드 추가 요청
    - 같은 카드/상태/포일 조합이 이미 있으면 수량만 증가
    """
    card_id: int
    quantity: int = Field(1, ge=1, le=10000)
    condition: CardCondition = CardCondition.NEAR_MINT
    is_foil: bool = False
    purchase_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class CollectionUpdateRequest(BaseModel):
    quantity: Optional[int] = Field(None, ge=1, le=10000)
    condition: Optional[CardCondition] = None
    is_foil: Optional[bool] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class CollectionItemResponse(BaseModel):
    item_id: int
    card: CardResponse
    quantity: int
    condition: CardCondition
    is_foil: bool
    purchase_price: Optional[float] = None
    notes: Optional[str] = None
    date_added: Optional[datetime] = None


class CollectionSummary(BaseModel):
    total_items: int = Field(..., description="수량 합계")
    unique_cards: int = Field(..., description="항목 수")
    total_value: float = Field(..., description="구매가 x 수량 합계")
    market_value: float = Field(..., description="시세 x 수량 합계")


class CollectionResponse(BaseModel):
    items: List[CollectionItemResponse]
    summary: CollectionSummary


class WatchlistAddRequest(BaseModel):
    card_id: int
    target_price: Optional[float] = Field(None, gt=0)


class WatchlistItemResponse(BaseModel):
    watch_id: int
    card: CardResponse
    current_price: Optional[float] = None
    target_price: Optional[float] = None
    date_added: Optional[datetime] = None
    last_updated: Optional[datetime] = None

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cardloom.models.listing import (CardCondition, ListingStatus, ListingType,
                                     OfferStatus, TransactionStatus)


class ListingSortField(str, Enum):
    NEWEST = "newest"
    PRICE = "price"


class Location(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ShippingInfo(BaseModel):
    free_shipping: bool = False
    cost: float = Field(0, ge=0)
    method: Optional[str] = None
    ships_from: Optional[Location] = None
    ships_to: List[str] = Field(default_factory=list)


class ListingCreateRequest(BaseModel):
    """
    판매/교환 등록 요청
    - sale, sale_or_trade 는 가격 필수
    """
    card_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[float] = Field(None, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    condition: CardCondition
    is_foil: bool = False
    language: str = Field("English", max_length=30)
    quantity: int = Field(1, ge=1)
    listing_type: ListingType = ListingType.SALE
    images: List[str] = Field(default_factory=list)
    location: Optional[Location] = None
    shipping: Optional[ShippingInfo] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "card_id": 1,
            "title": "1st Edition Charizard",
            "description": "Mint condition, never played",
            "price": 45.99,
            "condition": "mint",
            "listing_type": "sale",
        }
    })


class ListingUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[float] = Field(None, ge=0)
    condition: Optional[CardCondition] = None
    is_foil: Optional[bool] = None
    quantity: Optional[int] = Field(None, ge=1)
    listing_type: Optional[ListingType] = None
    status: Optional[ListingStatus] = None
    images: Optional[List[str]] = None
    location: Optional[Location] = None
    shipping: Optional[ShippingInfo] = None


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    seller_id: int
    card_id: int
    title: str
    description: Optional[str] = None
    price: Optional[float] = None
    currency: str
    condition: CardCondition
    is_foil: bool
    language: str
    quantity: int
    listing_type: ListingType
    status: ListingStatus
    images: List[str] = Field(default_factory=list)
    location: Optional[Dict[str, Any]] = None
    shipping: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OfferCreateRequest(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    message: Optional[str] = Field(None, max_length=2000)


class OfferRespondRequest(BaseModel):
    status: OfferStatus
    counter_amount: Optional[float] = Field(None, gt=0)

    @model_validator(mode="after")
    def check_status(self):
        if self.status == OfferStatus.PENDING:
            raise ValueError("status must be accepted, declined or countered")
        if self.status == OfferStatus.COUNTERED and self.counter_amount is None:
            raise ValueError("counter_amount is required when countering an offer")
        return self


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    offer_id: int
    listing_id: int
    buyer_id: int
    amount: Optional[float] = None
    counter_amount: Optional[float] = None
    message: Optional[str] = None
    status: OfferStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OfferDecisionResponse(BaseModel):
    offer: OfferResponse
    transaction: Optional["TransactionResponse"] = None


class TransactionStatusRequest(BaseModel):
    status: TransactionStatus


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transaction_id: int
    listing_id: int
    offer_id: Optional[int] = None
    buyer_id: int
    seller_id: int
    amount: float
    status: TransactionStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    review_id: int
    reviewer_id: int
    reviewee_id: int
    transaction_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


OfferDecisionResponse.model_rebuild()

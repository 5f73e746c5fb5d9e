from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, CheckConstraint, Column, String, UniqueConstraint
from sqlalchemy.types import Numeric
from sqlmodel import Field

from cardloom.models.base import BaseModel


class CardCondition(str, Enum):
    MINT = "mint"
    NEAR_MINT = "near_mint"
    LIGHTLY_PLAYED = "lightly_played"
    MODERATELY_PLAYED = "moderately_played"
    HEAVILY_PLAYED = "heavily_played"
    DAMAGED = "damaged"


class ListingType(str, Enum):
    SALE = "sale"
    TRADE = "trade"
    SALE_OR_TRADE = "sale_or_trade"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    INACTIVE = "inactive"


class OfferStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COUNTERED = "countered"


class TransactionStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Listing(BaseModel, table=True):
    """
    마켓플레이스 판매/교환 등록
    """

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_listing_quantity_non_negative"),
    )

    listing_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="등록 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    seller_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    card_id: int = Field(foreign_key="cards.card_id", nullable=False, index=True)

    title: str = Field(max_length=200, nullable=False)
    description: Optional[str] = Field(default=None)

    price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )
    currency: str = Field(default="USD", max_length=3)

    condition: CardCondition = Field(sa_type=String(30), nullable=False)
    is_foil: bool = Field(default=False)
    language: str = Field(default="English", max_length=30)
    quantity: int = Field(default=1, nullable=False)

    listing_type: ListingType = Field(default=ListingType.SALE, sa_type=String(20))
    status: ListingStatus = Field(default=ListingStatus.ACTIVE, sa_type=String(20), index=True)

    images: list = Field(default_factory=list, sa_column=Column(JSON))
    location: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    shipping: Optional[dict] = Field(default=None, sa_column=Column(JSON))


class Offer(BaseModel, table=True):
    """
    등록 건에 대한 구매/교환 제안
    """

    __tablename__ = "offers"

    offer_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="제안 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    listing_id: int = Field(foreign_key="listings.listing_id", nullable=False, index=True)
    buyer_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)

    amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )
    counter_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
    )
    message: Optional[str] = Field(default=None)
    status: OfferStatus = Field(default=OfferStatus.PENDING, sa_type=String(20))


class Transaction(BaseModel, table=True):
    """
    수락된 제안으로부터 생성되는 거래
    """

    __tablename__ = "transactions"

    transaction_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="거래 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    listing_id: int = Field(foreign_key="listings.listing_id", nullable=False, index=True)
    offer_id: Optional[int] = Field(default=None, foreign_key="offers.offer_id")
    buyer_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    seller_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)

    amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )
    status: TransactionStatus = Field(
        default=TransactionStatus.PENDING_PAYMENT, sa_type=String(20)
    )


class Review(BaseModel, table=True):
    """
    완료된 거래에 대한 평가 (거래당 작성자 1회)
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("transaction_id", "reviewer_id", name="uq_review_transaction_reviewer"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
    )

    review_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="리뷰 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    reviewer_id: int = Field(foreign_key="users.user_id", nullable=False)
    reviewee_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    transaction_id: int = Field(foreign_key="transactions.transaction_id", nullable=False)
    rating: int = Field(nullable=False)
    comment: Optional[str] = Field(default=None)

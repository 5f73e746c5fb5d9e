import logging
from decimal import Decimal
from typing import Dict, List, Optional, Set

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.listing import (Listing, ListingStatus, ListingType,
                                     OfferStatus, Transaction, TransactionStatus)
from cardloom.models.notification import NotificationType
from cardloom.repositories.collection import WatchlistRepository
from cardloom.repositories.marketplace import (ListingRepository, OfferRepository,
                                               ReviewRepository, TransactionRepository)
from cardloom.repositories.user import UserRepository
from cardloom.schemas.common import PagedResult, Pagination
from cardloom.schemas.marketplace import (ListingCreateRequest, ListingResponse,
                                          ListingSortField, ListingUpdateRequest,
                                          OfferCreateRequest, OfferDecisionResponse,
                                          OfferRespondRequest, OfferResponse,
                                          ReviewCreateRequest, ReviewResponse,
                                          TransactionResponse)
from cardloom.schemas.card import SortOrder
from cardloom.services.card import CardService
from cardloom.services.notification import NotificationService

logger = logging.getLogger(__name__)

# 거래 상태 전이 규칙
TRANSACTION_TRANSITIONS: Dict[TransactionStatus, Set[TransactionStatus]] = {
    TransactionStatus.PENDING_PAYMENT: {TransactionStatus.PAID, TransactionStatus.CANCELLED},
    TransactionStatus.PAID: {TransactionStatus.SHIPPED, TransactionStatus.CANCELLED},
    TransactionStatus.SHIPPED: {TransactionStatus.DELIVERED},
    TransactionStatus.DELIVERED: {TransactionStatus.COMPLETED},
    TransactionStatus.COMPLETED: set(),
    TransactionStatus.CANCELLED: set(),
}

PRICED_LISTING_TYPES = {ListingType.SALE, ListingType.SALE_OR_TRADE}

# null 로 비울 수 있는 필드 (나머지는 null 이면 무시)
CLEARABLE_LISTING_FIELDS = {"description", "price", "location", "shipping"}


def _to_decimal(value: Optional[float]) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _dump_json(model) -> Optional[dict]:
    return model.model_dump(mode="json") if model is not None else None


class MarketplaceService:
    """
    마켓플레이스 (등록 / 제안 / 거래 / 리뷰) 비즈니스 로직
    """

    def __init__(self):
        self.listing_repo = ListingRepository()
        self.offer_repo = OfferRepository()
        self.transaction_repo = TransactionRepository()
        self.review_repo = ReviewRepository()
        self.watchlist_repo = WatchlistRepository()
        self.user_repo = UserRepository()
        self.card_service = CardService()
        self.notification_service = NotificationService()

    # -------------------- #
    # 등록 (Listing)
    # -------------------- #

    async def search_listings(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        condition: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        listing_type: Optional[str] = None,
        status_filter: Optional[str] = ListingStatus.ACTIVE.value,
        seller_id: Optional[int] = None,
        search: Optional[str] = None,
        sort: ListingSortField = ListingSortField.NEWEST,
        order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> PagedResult[ListingResponse]:
        if price_min is not None and price_max is not None and price_min > price_max:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="price_min cannot be greater than price_max",
            )

        listings, total = await self.listing_repo.search(
            db,
            game=game,
            condition=condition,
            price_min=price_min,
            price_max=price_max,
            listing_type=listing_type,
            status=status_filter,
            seller_id=seller_id,
            search=search.strip() if search else None,
            sort=sort.value,
            order=order.value,
            limit=limit,
            offset=offset,
        )
        return PagedResult[ListingResponse](
            items=[ListingResponse.model_validate(x) for x in listings],
            pagination=Pagination.build(total, limit, offset),
        )

    async def _get_listing(self, db: AsyncSession, listing_id: int) -> Listing:
        listing = await self.listing_repo.get_by_id(db, listing_id)
        if not listing:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
        return listing

    async def _get_owned_listing(self, db: AsyncSession, listing_id: int, user_id: int) -> Listing:
        listing = await self._get_listing(db, listing_id)
        if listing.seller_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this listing")
        return listing

    async def get_listing(self, db: AsyncSession, listing_id: int) -> ListingResponse:
        return ListingResponse.model_validate(await self._get_listing(db, listing_id))

    async def create_listing(self, db: AsyncSession, seller_id: int, request: ListingCreateRequest) -> ListingResponse:
        card = await self.card_service.get_card_model(db, request.card_id)

        if request.listing_type in PRICED_LISTING_TYPES and not request.price:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A positive price is required for sale listings",
            )

        data = request.model_dump(exclude={"location", "shipping"})
        data["price"] = _to_decimal(request.price)
        data["currency"] = request.currency.upper()
        data["location"] = _dump_json(request.location)
        data["shipping"] = _dump_json(request.shipping)

        listing = await self.listing_repo.create(db, seller_id, data)
        if not listing:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not create listing")

        if listing.price is not None:
            await self._notify_price_watchers(db, listing, card.name)
        return ListingResponse.model_validate(listing)

    async def _notify_price_watchers(self, db: AsyncSession, listing: Listing, card_name: str) -> None:
        """목표가 이하 등록 시 관심 등록자에게 price_drop 알림"""
        watchers = await self.watchlist_repo.watchers_below(
            db, listing.card_id, listing.price, exclude_user_id=listing.seller_id
        )
        for watch in watchers:
            await self.notification_service.notify(
                db,
                watch.user_id,
                NotificationType.PRICE_DROP,
                "Price alert",
                f"{card_name} is listed at {listing.price} {listing.currency}",
                {
                    "listing_id": listing.listing_id,
                    "card_id": listing.card_id,
                    "price": float(listing.price),
                    "target_price": float(watch.target_price),
                },
            )
        if watchers:
            logger.info(f"가격 알림 발송: listing={listing.listing_id}, {len(watchers)}명")

    async def update_listing(
        self, db: AsyncSession, listing_id: int, user_id: int, request: ListingUpdateRequest
    ) -> ListingResponse:
        listing = await self._get_owned_listing(db, listing_id, user_id)

        update_data = {
            k: v
            for k, v in request.model_dump(exclude_unset=True, exclude={"location", "shipping"}).items()
            if v is not None or k in CLEARABLE_LISTING_FIELDS
        }
        if "price" in update_data:
            update_data["price"] = _to_decimal(update_data["price"])
        if "location" in request.model_fields_set:
            update_data["location"] = _dump_json(request.location)
        if "shipping" in request.model_fields_set:
            update_data["shipping"] = _dump_json(request.shipping)

        listing_type = ListingType(update_data.get("listing_type", listing.listing_type))
        price = update_data.get("price", listing.price)
        if listing_type in PRICED_LISTING_TYPES and not price:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A positive price is required for sale listings",
            )

        listing = await self.listing_repo.update(db, listing, update_data)
        return ListingResponse.model_validate(listing)

    async def delete_listing(self, db: AsyncSession, listing_id: int, user_id: int) -> None:
        listing = await self._get_owned_listing(db, listing_id, user_id)
        await self.listing_repo.soft_delete(db, listing)

    # -------------------- #
    # 제안 (Offer)
    # -------------------- #

    async def create_offer(
        self, db: AsyncSession, listing_id: int, buyer_id: int, request: OfferCreateRequest
    ) -> OfferResponse:
        listing = await self._get_listing(db, listing_id)

        if listing.seller_id == buyer_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot make an offer on your own listing")
        if listing.status != ListingStatus.ACTIVE:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Listing is not active")
        if listing.listing_type == ListingType.SALE and request.amount is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="An offer amount is required for sale listings")
        if request.amount is None and not request.message:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="A trade offer needs a message describing it")

        offer = await self.offer_repo.create(db, listing.listing_id, buyer_id, {
            "amount": _to_decimal(request.amount),
            "message": request.message,
        })

        await self.notification_service.notify(
            db,
            listing.seller_id,
            NotificationType.NEW_OFFER,
            "New offer",
            f"You received an offer on \"{listing.title}\"",
            {"listing_id": listing.listing_id, "offer_id": offer.offer_id},
        )
        return OfferResponse.model_validate(offer)

    async def list_listing_offers(self, db: AsyncSession, listing_id: int, user_id: int) -> List[OfferResponse]:
        listing = await self._get_owned_listing(db, listing_id, user_id)
        offers = await self.offer_repo.list_for_listing(db, listing.listing_id)
        return [OfferResponse.model_validate(o) for o in offers]

    async def list_my_offers(self, db: AsyncSession, buyer_id: int, limit: int, offset: int) -> PagedResult[OfferResponse]:
        offers, total = await self.offer_repo.list_by_buyer(db, buyer_id, limit, offset)
        return PagedResult[OfferResponse](
            items=[OfferResponse.model_validate(o) for o in offers],
            pagination=Pagination.build(total, limit, offset),
        )

    async def respond_to_offer(
        self, db: AsyncSession, offer_id: int, seller_id: int, request: OfferRespondRequest
    ) -> OfferDecisionResponse:
        """
        판매자의 제안 응답 (수락 / 거절 / 역제안)
        - 수락 시 결제 대기 거래 생성
        """
        offer = await self.offer_repo.get_by_id(db, offer_id)
        if not offer:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Offer not found")

        listing = await self._get_listing(db, offer.listing_id)
        if listing.seller_id != seller_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Only the seller can respond to this offer")
        if offer.status not in (OfferStatus.PENDING, OfferStatus.COUNTERED):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Offer has already been {OfferStatus(offer.status).value}")

        transaction: Optional[Transaction] = None
        if request.status == OfferStatus.ACCEPTED:
            if listing.status != ListingStatus.ACTIVE or listing.quantity < 1:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Listing is not available")

            amount = offer.counter_amount if offer.status == OfferStatus.COUNTERED else offer.amount
            if amount is None:
                amount = listing.price
            if amount is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot accept an offer without an amount on an unpriced listing",
                )
            transaction = await self.offer_repo.accept(db, offer, listing, amount)
        elif request.status == OfferStatus.COUNTERED:
            offer = await self.offer_repo.set_status(
                db, offer, OfferStatus.COUNTERED, _to_decimal(request.counter_amount))
        else:
            offer = await self.offer_repo.set_status(db, offer, OfferStatus.DECLINED)

        logger.info(f"제안 응답: offer={offer.offer_id}, status={request.status.value}")
        await self.notification_service.notify(
            db,
            offer.buyer_id,
            NotificationType.OFFER_RESPONSE,
            "Offer update",
            f"Your offer on \"{listing.title}\" was {request.status.value}",
            {
                "listing_id": listing.listing_id,
                "offer_id": offer.offer_id,
                "status": request.status.value,
                "transaction_id": transaction.transaction_id if transaction else None,
            },
        )

        return OfferDecisionResponse(
            offer=OfferResponse.model_validate(offer),
            transaction=TransactionResponse.model_validate(transaction) if transaction else None,
        )

    # -------------------- #
    # 거래 (Transaction)
    # -------------------- #

    async def list_transactions(
        self, db: AsyncSession, user_id: int, status_filter: Optional[str], limit: int, offset: int
    ) -> PagedResult[TransactionResponse]:
        transactions, total = await self.transaction_repo.list_for_user(db, user_id, status_filter, limit, offset)
        return PagedResult[TransactionResponse](
            items=[TransactionResponse.model_validate(t) for t in transactions],
            pagination=Pagination.build(total, limit, offset),
        )

    async def _get_participant_transaction(self, db: AsyncSession, transaction_id: int, user_id: int) -> Transaction:
        transaction = await self.transaction_repo.get_by_id(db, transaction_id)
        if not transaction:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
        if user_id not in (transaction.buyer_id, transaction.seller_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not a participant of this transaction")
        return transaction

    async def update_transaction_status(
        self, db: AsyncSession, transaction_id: int, user_id: int, new_status: TransactionStatus
    ) -> TransactionResponse:
        transaction = await self._get_participant_transaction(db, transaction_id, user_id)

        current = TransactionStatus(transaction.status)
        if new_status not in TRANSACTION_TRANSITIONS[current]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot move a transaction from {current.value} to {new_status.value}",
            )

        if new_status == TransactionStatus.COMPLETED:
            await self.user_repo.record_completed_trade(db, [transaction.buyer_id, transaction.seller_id])
        transaction = await self.transaction_repo.set_status(db, transaction, new_status)
        logger.info(f"거래 상태 변경: transaction={transaction.transaction_id}, {current.value} -> {new_status.value}")

        other_party = transaction.seller_id if user_id == transaction.buyer_id else transaction.buyer_id
        await self.notification_service.notify(
            db,
            other_party,
            NotificationType.ORDER_UPDATE,
            "Order update",
            f"Transaction #{transaction.transaction_id} is now {new_status.value}",
            {"transaction_id": transaction.transaction_id, "status": new_status.value},
        )
        return TransactionResponse.model_validate(transaction)

    # -------------------- #
    # 리뷰 (Review)
    # -------------------- #

    async def create_review(
        self, db: AsyncSession, transaction_id: int, reviewer_id: int, request: ReviewCreateRequest
    ) -> ReviewResponse:
        transaction = await self._get_participant_transaction(db, transaction_id, reviewer_id)

        if transaction.status != TransactionStatus.COMPLETED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Only completed transactions can be reviewed")
        if await self.review_repo.exists(db, transaction.transaction_id, reviewer_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="You have already reviewed this transaction")

        reviewee_id = transaction.seller_id if reviewer_id == transaction.buyer_id else transaction.buyer_id
        reviewee = await self.user_repo.get_by_id(db, reviewee_id)
        if not reviewee:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reviewed user not found")

        review = await self.review_repo.create(db, {
            "reviewer_id": reviewer_id,
            "reviewee_id": reviewee_id,
            "transaction_id": transaction.transaction_id,
            "rating": request.rating,
            "comment": request.comment,
        }, reviewee)
        if not review:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="You have already reviewed this transaction")
        return ReviewResponse.model_validate(review)

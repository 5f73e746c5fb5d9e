import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.models.card import Card
from cardloom.models.listing import (Listing, ListingStatus, Offer, OfferStatus,
                                     Review, Transaction, TransactionStatus)

logger = logging.getLogger(__name__)


class ListingRepository:
    """
    마켓플레이스 등록 Repository
    """

    async def search(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        condition: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        listing_type: Optional[str] = None,
        status: Optional[str] = None,
        seller_id: Optional[int] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Listing], int]:
        conditions = [Listing.is_deleted == False]  # noqa: E712
        if game:
            # 게임은 카드 기준으로 필터
            conditions.append(
                Listing.card_id.in_(select(Card.card_id).where(Card.game == game))
            )
        if condition:
            conditions.append(Listing.condition == condition)
        if price_min is not None:
            conditions.append(Listing.price >= Decimal(str(price_min)))
        if price_max is not None:
            conditions.append(Listing.price <= Decimal(str(price_max)))
        if listing_type:
            conditions.append(Listing.listing_type == listing_type)
        if status:
            conditions.append(Listing.status == status)
        if seller_id is not None:
            conditions.append(Listing.seller_id == seller_id)
        if search:
            conditions.append(Listing.title.ilike(f"%{search}%"))

        count_result = await db.execute(
            select(func.count()).select_from(Listing).where(*conditions)
        )
        total = count_result.scalar() or 0

        sort_column = Listing.price if sort == "price" else Listing.created_at
        ordering = sort_column.asc() if order == "asc" else sort_column.desc()
        tie_breaker = Listing.listing_id.asc() if order == "asc" else Listing.listing_id.desc()

        result = await db.execute(
            select(Listing)
            .where(*conditions)
            .order_by(ordering, tie_breaker)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_by_id(self, db: AsyncSession, listing_id: int) -> Optional[Listing]:
        result = await db.execute(
            select(Listing).where(Listing.listing_id == listing_id, Listing.is_deleted == False)  # noqa: E712
        )
        listing = result.scalars().first()
        if not listing:
            logger.warning(f"등록을 찾을 수 없음: {listing_id}")
        return listing

    async def create(self, db: AsyncSession, seller_id: int, data: Dict[str, Any]) -> Optional[Listing]:
        try:
            listing = Listing(seller_id=seller_id, status=ListingStatus.ACTIVE, **data)
            db.add(listing)
            await db.commit()
            await db.refresh(listing)
            logger.info(f"등록 생성 완료: listing={listing.listing_id}, seller={seller_id}")
            return listing
        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"등록 생성 무결성 오류 (seller={seller_id}): {ie}")
            return None

    async def update(self, db: AsyncSession, listing: Listing, update_data: Dict[str, Any]) -> Listing:
        for key, value in update_data.items():
            setattr(listing, key, value)
        await db.commit()
        await db.refresh(listing)
        logger.info(f"등록 수정 완료: {listing.listing_id}")
        return listing

    async def soft_delete(self, db: AsyncSession, listing: Listing) -> None:
        listing.is_deleted = True
        listing.status = ListingStatus.INACTIVE
        await db.commit()
        logger.info(f"등록 삭제 완료: {listing.listing_id}")


class OfferRepository:
    """
    제안 Repository
    """

    async def get_by_id(self, db: AsyncSession, offer_id: int) -> Optional[Offer]:
        result = await db.execute(
            select(Offer).where(Offer.offer_id == offer_id, Offer.is_deleted == False)  # noqa: E712
        )
        return result.scalars().first()

    async def create(self, db: AsyncSession, listing_id: int, buyer_id: int, data: Dict[str, Any]) -> Offer:
        offer = Offer(listing_id=listing_id, buyer_id=buyer_id, status=OfferStatus.PENDING, **data)
        db.add(offer)
        await db.commit()
        await db.refresh(offer)
        logger.info(f"제안 생성: offer={offer.offer_id}, listing={listing_id}, buyer={buyer_id}")
        return offer

    async def list_for_listing(self, db: AsyncSession, listing_id: int) -> List[Offer]:
        result = await db.execute(
            select(Offer)
            .where(Offer.listing_id == listing_id, Offer.is_deleted == False)  # noqa: E712
            .order_by(Offer.created_at.desc(), Offer.offer_id.desc())
        )
        return list(result.scalars().all())

    async def list_by_buyer(
        self, db: AsyncSession, buyer_id: int, limit: int, offset: int
    ) -> Tuple[List[Offer], int]:
        conditions = [Offer.buyer_id == buyer_id, Offer.is_deleted == False]  # noqa: E712
        count_result = await db.execute(select(func.count()).select_from(Offer).where(*conditions))
        result = await db.execute(
            select(Offer)
            .where(*conditions)
            .order_by(Offer.created_at.desc(), Offer.offer_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def set_status(
        self, db: AsyncSession, offer: Offer, status: OfferStatus, counter_amount: Optional[Decimal] = None
    ) -> Offer:
        offer.status = status
        if counter_amount is not None:
            offer.counter_amount = counter_amount
        await db.commit()
        await db.refresh(offer)
        return offer

    async def accept(
        self, db: AsyncSession, offer: Offer, listing: Listing, amount: Decimal
    ) -> Transaction:
        """
        제안 수락 처리 (단일 커밋)
        - 결제 대기 거래 생성
        - 등록 수량 차감, 0이면 sold
        - 같은 등록의 다른 미결 제안은 모두 거절
        """
        offer.status = OfferStatus.ACCEPTED

        transaction = Transaction(
            listing_id=listing.listing_id,
            offer_id=offer.offer_id,
            buyer_id=offer.buyer_id,
            seller_id=listing.seller_id,
            amount=amount,
            status=TransactionStatus.PENDING_PAYMENT,
        )
        db.add(transaction)

        listing.quantity = max(listing.quantity - 1, 0)
        if listing.quantity == 0:
            listing.status = ListingStatus.SOLD

        result = await db.execute(
            select(Offer).where(
                Offer.listing_id == listing.listing_id,
                Offer.offer_id != offer.offer_id,
                Offer.status.in_([OfferStatus.PENDING, OfferStatus.COUNTERED]),
            )
        )
        declined = result.scalars().all()
        for other in declined:
            other.status = OfferStatus.DECLINED

        await db.commit()
        await db.refresh(offer)
        await db.refresh(listing)
        await db.refresh(transaction)

        logger.info(
            f"제안 수락: offer={offer.offer_id}, transaction={transaction.transaction_id}, "
            f"다른 제안 {len(declined)}건 거절"
        )
        return transaction


class TransactionRepository:
    """
    거래 Repository
    """

    async def get_by_id(self, db: AsyncSession, transaction_id: int) -> Optional[Transaction]:
        result = await db.execute(
            select(Transaction).where(
                Transaction.transaction_id == transaction_id,
                Transaction.is_deleted == False,  # noqa: E712
            )
        )
        return result.scalars().first()

    async def list_for_user(
        self, db: AsyncSession, user_id: int, status: Optional[str], limit: int, offset: int
    ) -> Tuple[List[Transaction], int]:
        conditions = [
            or_(Transaction.buyer_id == user_id, Transaction.seller_id == user_id),
            Transaction.is_deleted == False,  # noqa: E712
        ]
        if status:
            conditions.append(Transaction.status == status)

        count_result = await db.execute(select(func.count()).select_from(Transaction).where(*conditions))
        result = await db.execute(
            select(Transaction)
            .where(*conditions)
            .order_by(Transaction.created_at.desc(), Transaction.transaction_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def set_status(self, db: AsyncSession, transaction: Transaction, status: TransactionStatus) -> Transaction:
        transaction.status = status
        await db.commit()
        await db.refresh(transaction)
        return transaction


class ReviewRepository:
    """
    거래 리뷰 Repository
    """

    async def exists(self, db: AsyncSession, transaction_id: int, reviewer_id: int) -> bool:
        result = await db.execute(
            select(func.count()).select_from(Review).where(
                Review.transaction_id == transaction_id,
                Review.reviewer_id == reviewer_id,
            )
        )
        return (result.scalar() or 0) > 0

    async def create(self, db: AsyncSession, data: Dict[str, Any], reviewee) -> Optional[Review]:
        """
        리뷰 작성 + 대상자 평점(누적 평균, 소수 둘째 자리) 갱신을 한 번에 커밋
        """
        try:
            review = Review(**data)
            db.add(review)

            count = reviewee.review_count or 0
            current = Decimal(reviewee.seller_rating or 0)
            new_rating = (current * count + review.rating) / (count + 1)
            reviewee.review_count = count + 1
            reviewee.seller_rating = new_rating.quantize(Decimal("0.01"))

            await db.commit()
            await db.refresh(review)
            await db.refresh(reviewee)
            logger.info(f"리뷰 작성: review={review.review_id}, reviewee={reviewee.user_id}")
            return review
        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"리뷰 작성 무결성 오류 (transaction={data.get('transaction_id')}): {ie}")
            return None

    async def list_for_user(
        self, db: AsyncSession, reviewee_id: int, limit: int, offset: int
    ) -> Tuple[List[Review], int]:
        conditions = [Review.reviewee_id == reviewee_id, Review.is_deleted == False]  # noqa: E712
        count_result = await db.execute(select(func.count()).select_from(Review).where(*conditions))
        result = await db.execute(
            select(Review)
            .where(*conditions)
            .order_by(Review.created_at.desc(), Review.review_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

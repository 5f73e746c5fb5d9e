import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.models.card import Card
from cardloom.models.collection import CollectionItem, WatchlistItem

logger = logging.getLogger(__name__)


class CollectionRepository:
    """
    사용자 보유 카드(컬렉션) Repository
    """

    async def list_with_cards(
        self,
        db: AsyncSession,
        user_id: int,
        game: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Tuple[CollectionItem, Card]]:
        stmt = (
            select(CollectionItem, Card)
            .join(Card, Card.card_id == CollectionItem.card_id)
            .where(CollectionItem.user_id == user_id, Card.is_deleted == False)  # noqa: E712
        )
        if game:
            stmt = stmt.where(Card.game == game)
        if search:
            stmt = stmt.where(Card.name.ilike(f"%{search}%"))

        result = await db.execute(stmt.order_by(CollectionItem.created_at.desc(), CollectionItem.item_id.desc()))
        return [(row[0], row[1]) for row in result.all()]

    async def get_by_id(self, db: AsyncSession, item_id: int) -> Optional[CollectionItem]:
        result = await db.execute(select(CollectionItem).where(CollectionItem.item_id == item_id))
        return result.scalars().first()

    async def find_identity(
        self, db: AsyncSession, user_id: int, card_id: int, condition: str, is_foil: bool
    ) -> Optional[CollectionItem]:
        """같은 카드/상태/포일 조합의 기존 항목 조회"""
        result = await db.execute(
            select(CollectionItem).where(
                CollectionItem.user_id == user_id,
                CollectionItem.card_id == card_id,
                CollectionItem.condition == condition,
                CollectionItem.is_foil == is_foil,
            )
        )
        return result.scalars().first()

    async def create(self, db: AsyncSession, user_id: int, data: Dict[str, Any]) -> Optional[CollectionItem]:
        try:
            item = CollectionItem(user_id=user_id, **data)
            db.add(item)
            await db.commit()
            await db.refresh(item)
            logger.info(f"컬렉션 항목 추가: user={user_id}, card={item.card_id}, qty={item.quantity}")
            return item
        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"컬렉션 항목 추가 무결성 오류 (user={user_id}): {ie}")
            return None

    async def increment(
        self, db: AsyncSession, item: CollectionItem, quantity: int,
        purchase_price: Optional[Decimal] = None, notes: Optional[str] = None,
    ) -> CollectionItem:
        item.quantity += quantity
        if purchase_price is not None:
            item.purchase_price = purchase_price
        if notes:
            item.notes = notes
        await db.commit()
        await db.refresh(item)
        logger.info(f"컬렉션 수량 증가: item={item.item_id}, qty={item.quantity}")
        return item

    async def update(self, db: AsyncSession, item: CollectionItem, update_data: Dict[str, Any]) -> Optional[CollectionItem]:
        try:
            for key, value in update_data.items():
                setattr(item, key, value)
            await db.commit()
            await db.refresh(item)
            return item
        except IntegrityError as ie:
            # 상태/포일 변경으로 기존 항목과 겹치는 경우
            await db.rollback()
            logger.error(f"컬렉션 항목 수정 무결성 오류 (item={item.item_id}): {ie}")
            return None

    async def delete(self, db: AsyncSession, item: CollectionItem) -> None:
        # 식별 키 재사용을 위해 실제 삭제
        await db.delete(item)
        await db.commit()
        logger.info(f"컬렉션 항목 삭제: {item.item_id}")


class WatchlistRepository:
    """
    관심 카드(워치리스트) Repository
    """

    async def list_with_cards(self, db: AsyncSession, user_id: int) -> List[Tuple[WatchlistItem, Card]]:
        result = await db.execute(
            select(WatchlistItem, Card)
            .join(Card, Card.card_id == WatchlistItem.card_id)
            .where(WatchlistItem.user_id == user_id, Card.is_deleted == False)  # noqa: E712
            .order_by(WatchlistItem.created_at.desc(), WatchlistItem.watch_id.desc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get(self, db: AsyncSession, user_id: int, card_id: int) -> Optional[WatchlistItem]:
        result = await db.execute(
            select(WatchlistItem).where(WatchlistItem.user_id == user_id, WatchlistItem.card_id == card_id)
        )
        return result.scalars().first()

    async def upsert(
        self, db: AsyncSession, user_id: int, card_id: int, target_price: Optional[Decimal]
    ) -> Tuple[WatchlistItem, bool]:
        """
        관심 카드 추가 또는 목표가 갱신

        Returns:
            (항목, 새로 생성 여부)
        """
        item = await self.get(db, user_id, card_id)
        created = item is None
        if created:
            item = WatchlistItem(user_id=user_id, card_id=card_id, target_price=target_price)
            db.add(item)
        else:
            item.target_price = target_price
        await db.commit()
        await db.refresh(item)
        logger.info(f"워치리스트 {'추가' if created else '갱신'}: user={user_id}, card={card_id}")
        return item, created

    async def delete(self, db: AsyncSession, item: WatchlistItem) -> None:
        await db.delete(item)
        await db.commit()

    async def watchers_below(
        self, db: AsyncSession, card_id: int, price: Decimal, exclude_user_id: int
    ) -> List[WatchlistItem]:
        """목표가가 price 이상인 관심 등록 (해당 가격이면 알림 대상)"""
        result = await db.execute(
            select(WatchlistItem).where(
                WatchlistItem.card_id == card_id,
                WatchlistItem.target_price != None,  # noqa: E711
                WatchlistItem.target_price >= price,
                WatchlistItem.user_id != exclude_user_id,
            )
        )
        return list(result.scalars().all())

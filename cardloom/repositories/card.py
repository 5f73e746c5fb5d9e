import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.models.card import Card, CardRarity, CardSet

logger = logging.getLogger(__name__)

# 희귀도 정렬 순서 (낮음 -> 높음)
RARITY_ORDER = [
    CardRarity.COMMON,
    CardRarity.UNCOMMON,
    CardRarity.RARE,
    CardRarity.HOLO_RARE,
    CardRarity.SUPER_RARE,
    CardRarity.ULTRA_RARE,
    CardRarity.MYTHIC_RARE,
    CardRarity.SECRET_RARE,
    CardRarity.LEGENDARY,
]


class CardRepository:
    """
    카드 카탈로그 / 세트 데이터베이스 접근 Repository
    """

    # -------------------- #
    # 카드
    # -------------------- #

    async def search(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        rarity: Optional[str] = None,
        set_id: Optional[int] = None,
        search: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        sort: str = "name",
        order: str = "asc",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Card], int]:
        """
        필터/정렬/페이지네이션 적용 카드 검색

        Returns:
            (카드 목록, 필터 적용 후 전체 건수)
        """
        conditions = [Card.is_deleted == False, Card.is_active == True]  # noqa: E712
        if game:
            conditions.append(Card.game == game)
        if rarity:
            conditions.append(Card.rarity == rarity)
        if set_id is not None:
            conditions.append(Card.set_id == set_id)
        if search:
            conditions.append(Card.name.ilike(f"%{search}%"))
        if price_min is not None:
            conditions.append(Card.market_price >= Decimal(str(price_min)))
        if price_max is not None:
            conditions.append(Card.market_price <= Decimal(str(price_max)))

        count_result = await db.execute(
            select(func.count()).select_from(Card).where(*conditions)
        )
        total = count_result.scalar() or 0

        if sort == "price":
            sort_column = Card.market_price
        elif sort == "number":
            sort_column = Card.number
        elif sort == "rarity":
            sort_column = case(
                {r.value: idx for idx, r in enumerate(RARITY_ORDER)},
                value=Card.rarity,
                else_=len(RARITY_ORDER),
            )
        elif sort == "newest":
            sort_column = Card.created_at
        else:
            sort_column = Card.name

        ordering = sort_column.desc() if order == "desc" else sort_column.asc()
        result = await db.execute(
            select(Card)
            .where(*conditions)
            .order_by(ordering, Card.card_id.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_by_id(self, db: AsyncSession, card_id: int) -> Optional[Card]:
        result = await db.execute(
            select(Card).where(Card.card_id == card_id, Card.is_deleted == False)  # noqa: E712
        )
        card = result.scalars().first()
        if not card:
            logger.warning(f"카드를 찾을 수 없음: {card_id}")
        return card

    async def get_by_ids(self, db: AsyncSession, card_ids: Iterable[int]) -> Dict[int, Card]:
        ids = set(card_ids)
        if not ids:
            return {}
        result = await db.execute(
            select(Card).where(Card.card_id.in_(ids), Card.is_deleted == False)  # noqa: E712
        )
        return {c.card_id: c for c in result.scalars().all()}

    async def create_card(self, db: AsyncSession, data: Dict[str, Any]) -> Optional[Card]:
        try:
            card = Card(**data)
            db.add(card)
            await db.commit()
            await db.refresh(card)
            logger.info(f"카드 생성 완료: {card.name} (id={card.card_id})")
            return card
        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"카드 생성 무결성 오류 ({data.get('name')}): {ie}")
            return None

    # -------------------- #
    # 세트
    # -------------------- #

    async def list_sets(self, db: AsyncSession, game: Optional[str] = None) -> List[CardSet]:
        stmt = select(CardSet).where(CardSet.is_deleted == False)  # noqa: E712
        if game:
            stmt = stmt.where(CardSet.game == game)
        result = await db.execute(stmt.order_by(CardSet.release_date.asc(), CardSet.set_id.asc()))
        return list(result.scalars().all())

    async def get_set_by_id(self, db: AsyncSession, set_id: int) -> Optional[CardSet]:
        result = await db.execute(
            select(CardSet).where(CardSet.set_id == set_id, CardSet.is_deleted == False)  # noqa: E712
        )
        return result.scalars().first()

    async def get_set_by_code(self, db: AsyncSession, code: str) -> Optional[CardSet]:
        result = await db.execute(select(CardSet).where(CardSet.code == code))
        return result.scalars().first()

    async def get_set_codes(self, db: AsyncSession, set_ids: Iterable[int]) -> Dict[int, str]:
        """세트 ID -> 세트 코드 매핑 (카드 full_name 표기용)"""
        ids = set(set_ids)
        if not ids:
            return {}
        result = await db.execute(
            select(CardSet.set_id, CardSet.code).where(CardSet.set_id.in_(ids))
        )
        return {row[0]: row[1] for row in result.all()}

    async def create_set(self, db: AsyncSession, data: Dict[str, Any]) -> Optional[CardSet]:
        try:
            card_set = CardSet(**data)
            db.add(card_set)
            await db.commit()
            await db.refresh(card_set)
            logger.info(f"세트 생성 완료: {card_set.code}")
            return card_set
        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"세트 생성 무결성 오류 (code={data.get('code')}): {ie}")
            return None

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.utils.datetime import utc_now
from cardloom.models.card import Card
from cardloom.models.deck import Deck, DeckCard

logger = logging.getLogger(__name__)


class DeckRepository:
    """
    덱 / 덱 구성 카드 Repository
    """

    async def search(
        self,
        db: AsyncSession,
        *,
        user_id: Optional[int] = None,
        public_only: bool = True,
        game: Optional[str] = None,
        format: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Deck], int]:
        conditions = [Deck.is_deleted == False]  # noqa: E712
        if public_only:
            conditions.append(Deck.is_public == True)  # noqa: E712
        if user_id is not None:
            conditions.append(Deck.user_id == user_id)
        if game:
            conditions.append(Deck.game == game)
        if format:
            conditions.append(func.lower(Deck.format) == format.lower())
        if search:
            conditions.append(Deck.title.ilike(f"%{search}%"))

        count_result = await db.execute(select(func.count()).select_from(Deck).where(*conditions))
        result = await db.execute(
            select(Deck)
            .where(*conditions)
            .order_by(Deck.updated_at.desc(), Deck.deck_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def get_by_id(self, db: AsyncSession, deck_id: int) -> Optional[Deck]:
        result = await db.execute(
            select(Deck).where(Deck.deck_id == deck_id, Deck.is_deleted == False)  # noqa: E712
        )
        deck = result.scalars().first()
        if not deck:
            logger.warning(f"덱을 찾을 수 없음: {deck_id}")
        return deck

    async def create(self, db: AsyncSession, user_id: int, data: Dict[str, Any]) -> Deck:
        deck = Deck(user_id=user_id, **data)
        db.add(deck)
        await db.commit()
        await db.refresh(deck)
        logger.info(f"덱 생성 완료: deck={deck.deck_id}, user={user_id}")
        return deck

    async def update(self, db: AsyncSession, deck: Deck, update_data: Dict[str, Any]) -> Deck:
        for key, value in update_data.items():
            setattr(deck, key, value)
        await db.commit()
        await db.refresh(deck)
        return deck

    async def soft_delete(self, db: AsyncSession, deck: Deck) -> None:
        deck.is_deleted = True
        await db.commit()
        logger.info(f"덱 삭제 완료: {deck.deck_id}")

    async def card_counts(self, db: AsyncSession, deck_ids: List[int]) -> Dict[int, int]:
        """덱별 카드 수량 합계"""
        if not deck_ids:
            return {}
        result = await db.execute(
            select(DeckCard.deck_id, func.sum(DeckCard.quantity))
            .where(DeckCard.deck_id.in_(deck_ids))
            .group_by(DeckCard.deck_id)
        )
        return {row[0]: int(row[1] or 0) for row in result.all()}

    # -------------------- #
    # 덱 구성 카드
    # -------------------- #

    async def list_cards(self, db: AsyncSession, deck_id: int) -> List[Tuple[DeckCard, Card]]:
        result = await db.execute(
            select(DeckCard, Card)
            .join(Card, Card.card_id == DeckCard.card_id)
            .where(DeckCard.deck_id == deck_id)
            .order_by(DeckCard.deck_card_id.asc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get_entry(self, db: AsyncSession, deck_id: int, card_id: int) -> Optional[DeckCard]:
        result = await db.execute(
            select(DeckCard).where(DeckCard.deck_id == deck_id, DeckCard.card_id == card_id)
        )
        return result.scalars().first()

    async def add_card(
        self, db: AsyncSession, deck: Deck, card_id: int, quantity: int, notes: Optional[str] = None
    ) -> DeckCard:
        """
        덱에 카드 추가 (이미 있으면 수량 증가)
        """
        entry = await self.get_entry(db, deck.deck_id, card_id)
        if entry:
            entry.quantity += quantity
            if notes:
                entry.notes = notes
        else:
            entry = DeckCard(deck_id=deck.deck_id, card_id=card_id, quantity=quantity, notes=notes)
            db.add(entry)

        # 덱 수정 시각 갱신
        deck.updated_at = utc_now()
        await db.commit()
        await db.refresh(entry)
        await db.refresh(deck)
        return entry

    async def set_quantity(self, db: AsyncSession, deck: Deck, entry: DeckCard, quantity: int) -> Optional[DeckCard]:
        """수량 설정, 0이면 제거"""
        if quantity <= 0:
            await self.remove_card(db, deck, entry)
            return None
        entry.quantity = quantity
        deck.updated_at = utc_now()
        await db.commit()
        await db.refresh(entry)
        return entry

    async def remove_card(self, db: AsyncSession, deck: Deck, entry: DeckCard) -> None:
        await db.delete(entry)
        deck.updated_at = utc_now()
        await db.commit()
        logger.info(f"덱 카드 제거: deck={deck.deck_id}, card={entry.card_id}")

    async def duplicate(self, db: AsyncSession, source: Deck, user_id: int, title: str) -> Deck:
        """
        덱 복제 (비공개, 호출자 소유)
        """
        duplicated = Deck(
            user_id=user_id,
            game=source.game,
            title=title,
            description=source.description,
            format=source.format,
            is_public=False,
            cover_image_url=source.cover_image_url,
            tags=list(source.tags or []),
        )
        db.add(duplicated)
        await db.flush()

        result = await db.execute(select(DeckCard).where(DeckCard.deck_id == source.deck_id))
        for entry in result.scalars().all():
            db.add(DeckCard(
                deck_id=duplicated.deck_id,
                card_id=entry.card_id,
                quantity=entry.quantity,
                notes=entry.notes,
            ))

        await db.commit()
        await db.refresh(duplicated)
        logger.info(f"덱 복제: source={source.deck_id} -> duplicated={duplicated.deck_id}, user={user_id}")
        return duplicated

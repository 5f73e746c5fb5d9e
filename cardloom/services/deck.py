import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.deck import Deck
from cardloom.models.notification import NotificationType
from cardloom.repositories.deck import DeckRepository
from cardloom.schemas.common import PagedResult, Pagination
from cardloom.schemas.deck import (DeckAnalysisResponse, DeckCardAddRequest,
                                   DeckCardEntry, DeckCreateRequest,
                                   DeckDetailResponse, DeckResponse,
                                   DeckUpdateRequest)
from cardloom.services.card import CardService
from cardloom.services.deck_analysis import DeckEntry, analyze_deck
from cardloom.services.notification import NotificationService

logger = logging.getLogger(__name__)


def to_deck_response(deck: Deck, card_count: int = 0) -> DeckResponse:
    response = DeckResponse.model_validate(deck)
    response.card_count = card_count
    return response


class DeckService:
    """
    덱 빌더 비즈니스 로직
    - 공개 덱은 누구나, 비공개 덱은 소유자만 조회 가능 (그 외 404)
    """

    def __init__(self):
        self.deck_repo = DeckRepository()
        self.card_service = CardService()
        self.notification_service = NotificationService()

    async def _paged(self, db: AsyncSession, decks: List[Deck], total: int, limit: int, offset: int):
        counts = await self.deck_repo.card_counts(db, [d.deck_id for d in decks])
        return PagedResult[DeckResponse](
            items=[to_deck_response(d, counts.get(d.deck_id, 0)) for d in decks],
            pagination=Pagination.build(total, limit, offset),
        )

    async def list_public_decks(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        format: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> PagedResult[DeckResponse]:
        decks, total = await self.deck_repo.search(
            db, public_only=True, game=game, format=format,
            search=search.strip() if search else None, limit=limit, offset=offset,
        )
        return await self._paged(db, decks, total, limit, offset)

    async def list_my_decks(self, db: AsyncSession, user_id: int, limit: int, offset: int) -> PagedResult[DeckResponse]:
        decks, total = await self.deck_repo.search(
            db, user_id=user_id, public_only=False, limit=limit, offset=offset
        )
        return await self._paged(db, decks, total, limit, offset)

    async def _get_visible(self, db: AsyncSession, deck_id: int, user_id: Optional[int]) -> Deck:
        deck = await self.deck_repo.get_by_id(db, deck_id)
        if not deck or (not deck.is_public and deck.user_id != user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deck not found")
        return deck

    async def _get_owned(self, db: AsyncSession, deck_id: int, user_id: int) -> Deck:
        deck = await self.deck_repo.get_by_id(db, deck_id)
        if not deck:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deck not found")
        if deck.user_id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this deck")
        return deck

    async def _detail(self, db: AsyncSession, deck: Deck) -> DeckDetailResponse:
        rows = await self.deck_repo.list_cards(db, deck.deck_id)
        card_map = await self.card_service.to_response_map(db, [card for _, card in rows])
        entries = [
            DeckCardEntry(card=card_map[card.card_id], quantity=entry.quantity, notes=entry.notes)
            for entry, card in rows
        ]
        detail = DeckDetailResponse.model_validate(deck)
        detail.cards = entries
        detail.card_count = sum(e.quantity for e in entries)
        return detail

    async def create_deck(self, db: AsyncSession, user_id: int, request: DeckCreateRequest) -> DeckDetailResponse:
        deck = await self.deck_repo.create(db, user_id, request.model_dump())
        return await self._detail(db, deck)

    async def get_deck(self, db: AsyncSession, deck_id: int, user_id: Optional[int]) -> DeckDetailResponse:
        deck = await self._get_visible(db, deck_id, user_id)
        return await self._detail(db, deck)

    async def update_deck(
        self, db: AsyncSession, deck_id: int, user_id: int, request: DeckUpdateRequest
    ) -> DeckDetailResponse:
        deck = await self._get_owned(db, deck_id, user_id)
        update_data = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
        deck = await self.deck_repo.update(db, deck, update_data)
        return await self._detail(db, deck)

    async def delete_deck(self, db: AsyncSession, deck_id: int, user_id: int) -> None:
        deck = await self._get_owned(db, deck_id, user_id)
        await self.deck_repo.soft_delete(db, deck)

    # -------------------- #
    # 덱 구성 카드
    # -------------------- #

    async def add_card(
        self, db: AsyncSession, deck_id: int, user_id: int, request: DeckCardAddRequest
    ) -> DeckDetailResponse:
        deck = await self._get_owned(db, deck_id, user_id)
        card = await self.card_service.get_card_model(db, request.card_id)
        if card.game != deck.game:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Card does not belong to the deck's game",
            )

        await self.deck_repo.add_card(db, deck, card.card_id, request.quantity, request.notes)
        return await self._detail(db, deck)

    async def set_card_quantity(
        self, db: AsyncSession, deck_id: int, user_id: int, card_id: int, quantity: int
    ) -> DeckDetailResponse:
        deck = await self._get_owned(db, deck_id, user_id)
        entry = await self.deck_repo.get_entry(db, deck.deck_id, card_id)
        if not entry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card is not in this deck")

        await self.deck_repo.set_quantity(db, deck, entry, quantity)
        return await self._detail(db, deck)

    async def remove_card(self, db: AsyncSession, deck_id: int, user_id: int, card_id: int) -> DeckDetailResponse:
        deck = await self._get_owned(db, deck_id, user_id)
        entry = await self.deck_repo.get_entry(db, deck.deck_id, card_id)
        if not entry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card is not in this deck")

        await self.deck_repo.remove_card(db, deck, entry)
        return await self._detail(db, deck)

    async def duplicate_deck(self, db: AsyncSession, deck_id: int, user_id: int, title: str) -> DeckDetailResponse:
        source = await self._get_visible(db, deck_id, user_id)
        duplicated = await self.deck_repo.duplicate(db, source, user_id, title)

        if source.user_id != user_id:
            await self.notification_service.notify(
                db,
                source.user_id,
                NotificationType.DECK_ENGAGEMENT,
                "Your deck was copied",
                f'Someone copied your deck "{source.title}"',
                {"deck_id": source.deck_id, "copied_deck_id": duplicated.deck_id, "user_id": user_id},
            )
        return await self._detail(db, duplicated)

    async def analyze(self, db: AsyncSession, deck_id: int, user_id: Optional[int]) -> DeckAnalysisResponse:
        deck = await self._get_visible(db, deck_id, user_id)
        rows = await self.deck_repo.list_cards(db, deck.deck_id)

        analysis = analyze_deck([DeckEntry(card, entry.quantity) for entry, card in rows], deck.game, deck.format)
        logger.info(f"덱 분석: deck={deck.deck_id}, cards={analysis['total_cards']}")
        return DeckAnalysisResponse(deck_id=deck.deck_id, **analysis)

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.collection import CollectionItem
from cardloom.repositories.collection import CollectionRepository, WatchlistRepository
from cardloom.schemas.card import CardResponse
from cardloom.schemas.collection import (CollectionAddRequest, CollectionItemResponse,
                                         CollectionResponse, CollectionSummary,
                                         CollectionUpdateRequest, WatchlistAddRequest,
                                         WatchlistItemResponse)
from cardloom.services.card import CardService, to_float

logger = logging.getLogger(__name__)


def _to_decimal(value: Optional[float]) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def to_item_response(item: CollectionItem, card: CardResponse) -> CollectionItemResponse:
    return CollectionItemResponse(
        item_id=item.item_id,
        card=card,
        quantity=item.quantity,
        condition=item.condition,
        is_foil=item.is_foil,
        purchase_price=to_float(item.purchase_price),
        notes=item.notes,
        date_added=item.created_at,
    )


def summarize_collection(items: List[CollectionItemResponse]) -> CollectionSummary:
    """
    컬렉션 요약
    - total_value: 구매가 x 수량
    - market_value: 시세 x 수량 (가격 없으면 0)
    """
    total_items = sum(i.quantity for i in items)
    total_value = sum((i.purchase_price or 0) * i.quantity for i in items)
    market_value = sum((i.card.market_price or 0) * i.quantity for i in items)
    return CollectionSummary(
        total_items=total_items,
        unique_cards=len(items),
        total_value=round(total_value, 2),
        market_value=round(market_value, 2),
    )


class CollectionService:
    """
    보유 카드(컬렉션) 비즈니스 로직
    """

    def __init__(self):
        self.collection_repo = CollectionRepository()
        self.card_service = CardService()

    async def get_collection(
        self, db: AsyncSession, user_id: int, game: Optional[str] = None, search: Optional[str] = None
    ) -> CollectionResponse:
        rows = await self.collection_repo.list_with_cards(db, user_id, game, search)
        card_map = await self.card_service.to_response_map(db, [card for _, card in rows])
        items = [to_item_response(item, card_map[card.card_id]) for item, card in rows]
        return CollectionResponse(items=items, summary=summarize_collection(items))

    async def add_card(
        self, db: AsyncSession, user_id: int, request: CollectionAddRequest
    ) -> Tuple[CollectionItemResponse, bool]:
        """
        보유 카드 추가

        Returns:
            (항목, 새로 생성 여부) - 기존 항목 수량 증가 시 False
        """
        card = await self.card_service.get_card_model(db, request.card_id)

        existing = await self.collection_repo.find_identity(
            db, user_id, request.card_id, request.condition.value, request.is_foil
        )
        if existing:
            item = await self.collection_repo.increment(
                db, existing, request.quantity,
                purchase_price=_to_decimal(request.purchase_price),
                notes=request.notes,
            )
            created = False
        else:
            data = request.model_dump()
            data["purchase_price"] = _to_decimal(request.purchase_price)
            item = await self.collection_repo.create(db, user_id, data)
            if not item:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="Could not add card to collection")
            created = True

        card_response = (await self.card_service.to_responses(db, [card]))[0]
        return to_item_response(item, card_response), created

    async def _get_owned(self, db: AsyncSession, user_id: int, item_id: int) -> CollectionItem:
        item = await self.collection_repo.get_by_id(db, item_id)
        if not item:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Collection item not found")
        if item.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this item")
        return item

    async def update_item(
        self, db: AsyncSession, user_id: int, item_id: int, request: CollectionUpdateRequest
    ) -> CollectionItemResponse:
        item = await self._get_owned(db, user_id, item_id)

        # 매입가/메모만 null 로 비울 수 있음
        update_data = {
            k: v
            for k, v in request.model_dump(exclude_unset=True).items()
            if v is not None or k in ("purchase_price", "notes")
        }
        if "purchase_price" in update_data:
            update_data["purchase_price"] = _to_decimal(update_data["purchase_price"])

        updated = await self.collection_repo.update(db, item, update_data)
        if not updated:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An entry with the same card, condition and foil already exists",
            )

        card = await self.card_service.get_card_model(db, updated.card_id)
        card_response = (await self.card_service.to_responses(db, [card]))[0]
        return to_item_response(updated, card_response)

    async def remove_item(self, db: AsyncSession, user_id: int, item_id: int) -> None:
        item = await self._get_owned(db, user_id, item_id)
        await self.collection_repo.delete(db, item)


class WatchlistService:
    """
    관심 카드 비즈니스 로직
    """

    def __init__(self):
        self.watchlist_repo = WatchlistRepository()
        self.card_service = CardService()

    async def get_watchlist(self, db: AsyncSession, user_id: int) -> List[WatchlistItemResponse]:
        rows = await self.watchlist_repo.list_with_cards(db, user_id)
        card_map = await self.card_service.to_response_map(db, [card for _, card in rows])
        return [
            WatchlistItemResponse(
                watch_id=item.watch_id,
                card=card_map[card.card_id],
                current_price=to_float(card.market_price),
                target_price=to_float(item.target_price),
                date_added=item.created_at,
                last_updated=item.updated_at,
            )
            for item, card in rows
        ]

    async def add(
        self, db: AsyncSession, user_id: int, request: WatchlistAddRequest
    ) -> Tuple[WatchlistItemResponse, bool]:
        card = await self.card_service.get_card_model(db, request.card_id)
        item, created = await self.watchlist_repo.upsert(
            db, user_id, card.card_id, _to_decimal(request.target_price)
        )
        card_response = (await self.card_service.to_responses(db, [card]))[0]
        return WatchlistItemResponse(
            watch_id=item.watch_id,
            card=card_response,
            current_price=to_float(card.market_price),
            target_price=to_float(item.target_price),
            date_added=item.created_at,
            last_updated=item.updated_at,
        ), created

    async def remove(self, db: AsyncSession, user_id: int, card_id: int) -> None:
        item = await self.watchlist_repo.get(db, user_id, card_id)
        if not item:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card is not in your watchlist")
        await self.watchlist_repo.delete(db, item)

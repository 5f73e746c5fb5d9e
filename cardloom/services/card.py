import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.card import Card
from cardloom.repositories.card import CardRepository
from cardloom.schemas.card import (CardCreateRequest, CardResponse,
                                   CardSetCreateRequest, CardSetResponse,
                                   CardSortField, PriceHistoryResponse,
                                   PricePeriod, PricePoint, PriceSummary,
                                   SortOrder)
from cardloom.schemas.common import PagedResult, Pagination
from cardloom.utils.datetime import utc_today
from cardloom.utils.price_calc import generate_price_history, summarize_prices

logger = logging.getLogger(__name__)


def to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def build_card_response(card: Card, set_code: Optional[str] = None) -> CardResponse:
    """Card 모델 -> 응답 스키마 (세트 코드 포함 full_name 계산)"""
    return CardResponse(
        card_id=card.card_id,
        game=card.game,
        set_id=card.set_id,
        set_code=set_code,
        name=card.name,
        full_name=card.full_name(set_code),
        number=card.number,
        rarity=card.rarity,
        display_rarity=card.display_rarity,
        card_type=card.card_type,
        image_url=card.image_url,
        rules_text=card.rules_text,
        market_price=to_float(card.market_price),
        attributes=card.attributes or {},
        related_cards=card.related_cards,
    )


class CardService:
    """
    카드 카탈로그 비즈니스 로직
    """

    def __init__(self):
        self.card_repo = CardRepository()

    async def to_responses(self, db: AsyncSession, cards: Iterable[Card]) -> List[CardResponse]:
        cards = list(cards)
        set_codes = await self.card_repo.get_set_codes(db, [c.set_id for c in cards])
        return [build_card_response(c, set_codes.get(c.set_id)) for c in cards]

    async def to_response_map(self, db: AsyncSession, cards: Iterable[Card]) -> Dict[int, CardResponse]:
        return {r.card_id: r for r in await self.to_responses(db, cards)}

    async def search_cards(
        self,
        db: AsyncSession,
        *,
        game: Optional[str] = None,
        rarity: Optional[str] = None,
        set_id: Optional[int] = None,
        search: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        sort: CardSortField = CardSortField.NAME,
        order: SortOrder = SortOrder.ASC,
        limit: int = 20,
        offset: int = 0,
    ) -> PagedResult[CardResponse]:
        if price_min is not None and price_max is not None and price_min > price_max:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="price_min cannot be greater than price_max",
            )

        cards, total = await self.card_repo.search(
            db,
            game=game,
            rarity=rarity,
            set_id=set_id,
            search=search.strip() if search else None,
            price_min=price_min,
            price_max=price_max,
            sort=sort.value,
            order=order.value,
            limit=limit,
            offset=offset,
        )
        items = await self.to_responses(db, cards)
        return PagedResult[CardResponse](items=items, pagination=Pagination.build(total, limit, offset))

    async def get_card_model(self, db: AsyncSession, card_id: int) -> Card:
        card = await self.card_repo.get_by_id(db, card_id)
        if not card:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found")
        return card

    async def get_card(self, db: AsyncSession, card_id: int) -> CardResponse:
        card = await self.get_card_model(db, card_id)
        return (await self.to_responses(db, [card]))[0]

    async def list_sets(self, db: AsyncSession, game: Optional[str] = None) -> List[CardSetResponse]:
        sets = await self.card_repo.list_sets(db, game)
        return [CardSetResponse.model_validate(s) for s in sets]

    async def create_set(self, db: AsyncSession, request: CardSetCreateRequest) -> CardSetResponse:
        code = request.code.upper()
        if await self.card_repo.get_set_by_code(db, code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Set code '{code}' already exists")

        data = request.model_dump()
        data["code"] = code
        card_set = await self.card_repo.create_set(db, data)
        if not card_set:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not create set")
        return CardSetResponse.model_validate(card_set)

    async def create_card(self, db: AsyncSession, request: CardCreateRequest) -> CardResponse:
        card_set = await self.card_repo.get_set_by_id(db, request.set_id)
        if not card_set:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Card set does not exist")
        if card_set.game != request.game.value:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Card set belongs to a different game",
            )

        data = request.model_dump()
        data["image_url"] = str(request.image_url)
        if request.market_price is not None:
            data["market_price"] = Decimal(str(request.market_price))

        card = await self.card_repo.create_card(db, data)
        if not card:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not create card")
        return build_card_response(card, card_set.code)

    async def get_price_history(
        self, db: AsyncSession, card_id: int, period: PricePeriod
    ) -> PriceHistoryResponse:
        card = await self.get_card_model(db, card_id)

        points = generate_price_history(
            card_id=card.card_id,
            base_price=to_float(card.market_price),
            days=period.days,
            today=utc_today(),
        )
        summary = summarize_prices([p["price"] for p in points])

        return PriceHistoryResponse(
            card_id=card.card_id,
            period=period,
            points=[PricePoint(**p) for p in points],
            summary=PriceSummary(**summary) if summary else None,
        )

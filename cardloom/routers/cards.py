# routers/cards.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.base import TCGGame
from cardloom.models.card import CardRarity
from cardloom.models.user import UserRole
from cardloom.schemas.card import (CardCreateRequest, CardResponse,
                                   CardSetCreateRequest, CardSetResponse,
                                   CardSortField, PriceHistoryResponse,
                                   PricePeriod, SortOrder)
from cardloom.schemas.common import ApiResponse, ErrorResponse
from cardloom.services.card import CardService
from cardloom.utils.dependencies import get_card_service, require_roles
from cardloom.utils.router import get_router

router = get_router("cards")

catalog_editor = require_roles(UserRole.ADMIN, UserRole.MODERATOR)


@router.get("", response_model=ApiResponse[List[CardResponse]], summary="카드 검색")
async def search_cards(
    service: Annotated[CardService, Depends(get_card_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    game: Optional[TCGGame] = None,
    rarity: Optional[CardRarity] = None,
    set_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=100, description="카드명 부분 일치 (대소문자 무시)"),
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    sort: CardSortField = CardSortField.NAME,
    order: SortOrder = SortOrder.ASC,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.search_cards(
        db,
        game=game.value if game else None,
        rarity=rarity.value if rarity else None,
        set_id=set_id,
        search=search,
        price_min=price_min,
        price_max=price_max,
        sort=sort,
        order=order,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.get("/sets", response_model=ApiResponse[List[CardSetResponse]], summary="세트 목록")
async def list_sets(
    service: Annotated[CardService, Depends(get_card_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    game: Optional[TCGGame] = None,
):
    return ApiResponse(data=await service.list_sets(db, game.value if game else None))


@router.post(
    "/sets",
    response_model=ApiResponse[CardSetResponse],
    status_code=status.HTTP_201_CREATED,
    summary="세트 등록 (관리자)",
    dependencies=[Depends(catalog_editor)],
    responses={400: {"model": ErrorResponse, "description": "세트 코드 중복"}},
)
async def create_set(
    request: CardSetCreateRequest,
    service: Annotated[CardService, Depends(get_card_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.create_set(db, request), message="Set created")


@router.post(
    "",
    response_model=ApiResponse[CardResponse],
    status_code=status.HTTP_201_CREATED,
    summary="카드 등록 (관리자)",
    dependencies=[Depends(catalog_editor)],
)
async def create_card(
    request: CardCreateRequest,
    service: Annotated[CardService, Depends(get_card_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.create_card(db, request), message="Card created")


@router.get(
    "/{card_id}",
    response_model=ApiResponse[CardResponse],
    summary="카드 상세",
    responses={404: {"model": ErrorResponse, "description": "카드를 찾을 수 없음"}},
)
async def get_card(
    card_id: int,
    service: Annotated[CardService, Depends(get_card_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.get_card(db, card_id))


@router.get("/{card_id}/price-history", response_model=ApiResponse[PriceHistoryResponse], summary="가격 추이")
async def get_price_history(
    card_id: int,
    service: Annotated[CardService, Depends(get_card_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    period: PricePeriod = PricePeriod.MONTH,
):
    """
    카드의 일별 가격 추이 (시세 기반 생성 데이터)

    - **period**: 7d, 30d, 90d, 1y
    """
    return ApiResponse(data=await service.get_price_history(db, card_id, period))

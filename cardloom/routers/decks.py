# routers/decks.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.base import TCGGame
from cardloom.models.user import User
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.schemas.deck import (DeckAnalysisResponse, DeckCardAddRequest,
                                   DeckCardQuantityRequest, DeckCreateRequest,
                                   DeckDetailResponse, DeckDuplicateRequest,
                                   DeckResponse, DeckUpdateRequest)
from cardloom.services.deck import DeckService
from cardloom.utils.dependencies import get_current_user, get_deck_service, get_optional_user
from cardloom.utils.router import get_router

router = get_router("decks")


def _user_id(user: Optional[User]) -> Optional[int]:
    return user.user_id if user else None


@router.get("", response_model=ApiResponse[List[DeckResponse]], summary="공개 덱 목록")
async def list_public_decks(
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    game: Optional[TCGGame] = None,
    format: Optional[str] = Query(None, max_length=50),
    search: Optional[str] = Query(None, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_public_decks(
        db, game=game.value if game else None, format=format, search=search, limit=limit, offset=offset
    )
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.get("/mine", response_model=ApiResponse[List[DeckResponse]], summary="내 덱 목록")
async def list_my_decks(
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_my_decks(db, current_user.user_id, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.post("", response_model=ApiResponse[DeckDetailResponse], status_code=status.HTTP_201_CREATED, summary="덱 생성")
async def create_deck(
    request: DeckCreateRequest,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    deck = await service.create_deck(db, current_user.user_id, request)
    return ApiResponse(data=deck, message="Deck created")


@router.get(
    "/{deck_id}",
    response_model=ApiResponse[DeckDetailResponse],
    summary="덱 상세",
    responses={404: {"model": ErrorResponse, "description": "없거나 비공개 덱"}},
)
async def get_deck(
    deck_id: int,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
):
    return ApiResponse(data=await service.get_deck(db, deck_id, _user_id(current_user)))


@router.put("/{deck_id}", response_model=ApiResponse[DeckDetailResponse], summary="덱 수정")
async def update_deck(
    deck_id: int,
    request: DeckUpdateRequest,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.update_deck(db, deck_id, current_user.user_id, request))


@router.delete("/{deck_id}", response_model=MessageResponse, summary="덱 삭제")
async def delete_deck(
    deck_id: int,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete_deck(db, deck_id, current_user.user_id)
    return MessageResponse(message="Deck deleted")


@router.post("/{deck_id}/cards", response_model=ApiResponse[DeckDetailResponse], summary="덱에 카드 추가")
async def add_card_to_deck(
    deck_id: int,
    request: DeckCardAddRequest,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.add_card(db, deck_id, current_user.user_id, request))


@router.put("/{deck_id}/cards/{card_id}", response_model=ApiResponse[DeckDetailResponse], summary="덱 카드 수량 변경")
async def set_deck_card_quantity(
    deck_id: int,
    card_id: int,
    request: DeckCardQuantityRequest,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    - **quantity**: 0이면 덱에서 제거
    """
    deck = await service.set_card_quantity(db, deck_id, current_user.user_id, card_id, request.quantity)
    return ApiResponse(data=deck)


@router.delete("/{deck_id}/cards/{card_id}", response_model=ApiResponse[DeckDetailResponse], summary="덱에서 카드 제거")
async def remove_card_from_deck(
    deck_id: int,
    card_id: int,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.remove_card(db, deck_id, current_user.user_id, card_id))


@router.post(
    "/{deck_id}/duplicate",
    response_model=ApiResponse[DeckDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="덱 복제",
)
async def duplicate_deck(
    deck_id: int,
    request: DeckDuplicateRequest,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    deck = await service.duplicate_deck(db, deck_id, current_user.user_id, request.title)
    return ApiResponse(data=deck, message="Deck duplicated")


@router.get("/{deck_id}/analysis", response_model=ApiResponse[DeckAnalysisResponse], summary="덱 분석")
async def analyze_deck(
    deck_id: int,
    service: Annotated[DeckService, Depends(get_deck_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
):
    """
    마나 커브, 색상/타입 분포, 시너지/약점/제안, 포맷 적합성을 계산합니다.
    """
    return ApiResponse(data=await service.analyze(db, deck_id, _user_id(current_user)))

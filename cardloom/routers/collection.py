# routers/collection.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.base import TCGGame
from cardloom.models.user import User
from cardloom.schemas.collection import (CollectionAddRequest, CollectionItemResponse,
                                         CollectionResponse, CollectionUpdateRequest,
                                         WatchlistAddRequest, WatchlistItemResponse)
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.services.collection import CollectionService, WatchlistService
from cardloom.utils.dependencies import (get_collection_service, get_current_user,
                                         get_watchlist_service)
from cardloom.utils.router import get_router

router = get_router("collection")
watchlist_router = get_router("watchlist")


@router.get("", response_model=ApiResponse[CollectionResponse], summary="내 컬렉션")
async def get_collection(
    service: Annotated[CollectionService, Depends(get_collection_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    game: Optional[TCGGame] = None,
    search: Optional[str] = Query(None, max_length=100),
):
    collection = await service.get_collection(
        db, current_user.user_id, game.value if game else None, search.strip() if search else None
    )
    return ApiResponse(data=collection)


@router.post(
    "",
    response_model=ApiResponse[CollectionItemResponse],
    status_code=status.HTTP_201_CREATED,
    summary="컬렉션에 카드 추가",
    responses={
        200: {"description": "기존 항목 수량 증가"},
        404: {"model": ErrorResponse, "description": "카드를 찾을 수 없음"},
    },
)
async def add_to_collection(
    request: CollectionAddRequest,
    response: Response,
    service: Annotated[CollectionService, Depends(get_collection_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    같은 카드 / 상태 / 포일 여부의 항목이 이미 있으면 수량만 증가 (200)
    """
    item, created = await service.add_card(db, current_user.user_id, request)
    if not created:
        response.status_code = status.HTTP_200_OK
        return ApiResponse(data=item, message="Collection quantity updated")
    return ApiResponse(data=item, message="Card added to collection")


@router.put("/{item_id}", response_model=ApiResponse[CollectionItemResponse], summary="컬렉션 항목 수정")
async def update_collection_item(
    item_id: int,
    request: CollectionUpdateRequest,
    service: Annotated[CollectionService, Depends(get_collection_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.update_item(db, current_user.user_id, item_id, request))


@router.delete("/{item_id}", response_model=MessageResponse, summary="컬렉션 항목 삭제")
async def remove_collection_item(
    item_id: int,
    service: Annotated[CollectionService, Depends(get_collection_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.remove_item(db, current_user.user_id, item_id)
    return MessageResponse(message="Card removed from collection")


# -------------------- #
# 관심 카드 (watchlist)
# -------------------- #

@watchlist_router.get("", response_model=ApiResponse[List[WatchlistItemResponse]], summary="관심 카드 목록")
async def get_watchlist(
    service: Annotated[WatchlistService, Depends(get_watchlist_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.get_watchlist(db, current_user.user_id))


@watchlist_router.post(
    "",
    response_model=ApiResponse[WatchlistItemResponse],
    status_code=status.HTTP_201_CREATED,
    summary="관심 카드 추가",
)
async def add_to_watchlist(
    request: WatchlistAddRequest,
    response: Response,
    service: Annotated[WatchlistService, Depends(get_watchlist_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    이미 관심 카드이면 목표가만 갱신 (200)
    """
    item, created = await service.add(db, current_user.user_id, request)
    if not created:
        response.status_code = status.HTTP_200_OK
        return ApiResponse(data=item, message="Target price updated")
    return ApiResponse(data=item, message="Card added to watchlist")


@watchlist_router.delete(
    "/{card_id}",
    response_model=MessageResponse,
    summary="관심 카드 해제",
    responses={404: {"model": ErrorResponse, "description": "관심 카드가 아님"}},
)
async def remove_from_watchlist(
    card_id: int,
    service: Annotated[WatchlistService, Depends(get_watchlist_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.remove(db, current_user.user_id, card_id)
    return MessageResponse(message="Card removed from watchlist")

# routers/marketplace.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.base import TCGGame
from cardloom.models.listing import CardCondition, ListingStatus, ListingType, TransactionStatus
from cardloom.models.user import User
from cardloom.schemas.card import SortOrder
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.schemas.marketplace import (ListingCreateRequest, ListingResponse,
                                          ListingSortField, ListingUpdateRequest,
                                          OfferCreateRequest, OfferDecisionResponse,
                                          OfferRespondRequest, OfferResponse,
                                          ReviewCreateRequest, ReviewResponse,
                                          TransactionResponse, TransactionStatusRequest)
from cardloom.services.marketplace import MarketplaceService
from cardloom.utils.dependencies import get_current_user, get_marketplace_service
from cardloom.utils.router import get_router

router = get_router("marketplace")


# -------------------- #
# 등록 (Listing)
# -------------------- #

@router.get("/listings", response_model=ApiResponse[List[ListingResponse]], summary="판매 등록 검색")
async def search_listings(
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    game: Optional[TCGGame] = None,
    condition: Optional[CardCondition] = None,
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    listing_type: Optional[ListingType] = None,
    listing_status: ListingStatus = Query(ListingStatus.ACTIVE, alias="status"),
    seller_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort: ListingSortField = ListingSortField.NEWEST,
    order: SortOrder = SortOrder.DESC,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.search_listings(
        db,
        game=game.value if game else None,
        condition=condition.value if condition else None,
        price_min=price_min,
        price_max=price_max,
        listing_type=listing_type.value if listing_type else None,
        status_filter=listing_status.value,
        seller_id=seller_id,
        search=search,
        sort=sort,
        order=order,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.get(
    "/listings/{listing_id}",
    response_model=ApiResponse[ListingResponse],
    summary="판매 등록 상세",
    responses={404: {"model": ErrorResponse, "description": "등록을 찾을 수 없음"}},
)
async def get_listing(
    listing_id: int,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.get_listing(db, listing_id))


@router.get("/user/{user_id}/listings", response_model=ApiResponse[List[ListingResponse]], summary="사용자 판매 등록")
async def get_user_listings(
    user_id: int,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    listing_status: ListingStatus = Query(ListingStatus.ACTIVE, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.search_listings(
        db, seller_id=user_id, status_filter=listing_status.value, limit=limit, offset=offset
    )
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.post(
    "/listings",
    response_model=ApiResponse[ListingResponse],
    status_code=status.HTTP_201_CREATED,
    summary="판매 등록",
    responses={
        400: {"model": ErrorResponse, "description": "판매 가격 누락"},
        404: {"model": ErrorResponse, "description": "카드를 찾을 수 없음"},
    },
)
async def create_listing(
    request: ListingCreateRequest,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    listing = await service.create_listing(db, current_user.user_id, request)
    return ApiResponse(data=listing, message="Listing created")


@router.put("/listings/{listing_id}", response_model=ApiResponse[ListingResponse], summary="판매 등록 수정")
async def update_listing(
    listing_id: int,
    request: ListingUpdateRequest,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    listing = await service.update_listing(db, listing_id, current_user.user_id, request)
    return ApiResponse(data=listing, message="Listing updated")


@router.delete("/listings/{listing_id}", response_model=MessageResponse, summary="판매 등록 삭제")
async def delete_listing(
    listing_id: int,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete_listing(db, listing_id, current_user.user_id)
    return MessageResponse(message="Listing deleted")


# -------------------- #
# 제안 (Offer)
# -------------------- #

@router.post(
    "/listings/{listing_id}/offers",
    response_model=ApiResponse[OfferResponse],
    status_code=status.HTTP_201_CREATED,
    summary="구매/교환 제안",
)
async def create_offer(
    listing_id: int,
    request: OfferCreateRequest,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    offer = await service.create_offer(db, listing_id, current_user.user_id, request)
    return ApiResponse(data=offer, message="Offer sent")


@router.get("/listings/{listing_id}/offers", response_model=ApiResponse[List[OfferResponse]], summary="받은 제안 목록")
async def list_listing_offers(
    listing_id: int,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.list_listing_offers(db, listing_id, current_user.user_id))


@router.get("/offers", response_model=ApiResponse[List[OfferResponse]], summary="내가 한 제안 목록")
async def list_my_offers(
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_my_offers(db, current_user.user_id, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.put("/offers/{offer_id}", response_model=ApiResponse[OfferDecisionResponse], summary="제안 응답")
async def respond_to_offer(
    offer_id: int,
    request: OfferRespondRequest,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    판매자가 제안을 수락 / 거절 / 역제안 합니다.

    - 수락 시 결제 대기(pending_payment) 거래가 생성됩니다.
    """
    decision = await service.respond_to_offer(db, offer_id, current_user.user_id, request)
    return ApiResponse(data=decision)


# -------------------- #
# 거래 / 리뷰
# -------------------- #

@router.get("/transactions", response_model=ApiResponse[List[TransactionResponse]], summary="내 거래 목록")
async def list_transactions(
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    transaction_status: Optional[TransactionStatus] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_transactions(
        db, current_user.user_id, transaction_status.value if transaction_status else None, limit, offset
    )
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.put(
    "/transactions/{transaction_id}/status",
    response_model=ApiResponse[TransactionResponse],
    summary="거래 상태 변경",
    responses={400: {"model": ErrorResponse, "description": "허용되지 않는 상태 전이"}},
)
async def update_transaction_status(
    transaction_id: int,
    request: TransactionStatusRequest,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    transaction = await service.update_transaction_status(db, transaction_id, current_user.user_id, request.status)
    return ApiResponse(data=transaction)


@router.post(
    "/transactions/{transaction_id}/review",
    response_model=ApiResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="거래 리뷰 작성",
)
async def create_review(
    transaction_id: int,
    request: ReviewCreateRequest,
    service: Annotated[MarketplaceService, Depends(get_marketplace_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    review = await service.create_review(db, transaction_id, current_user.user_id, request)
    return ApiResponse(data=review, message="Review submitted")

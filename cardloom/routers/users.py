# routers/users.py
from typing import Annotated, List

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.user import User
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.schemas.marketplace import ReviewResponse
from cardloom.schemas.user import (ChangePasswordRequest, ProfileUpdateRequest,
                                   PublicProfileResponse, UserResponse)
from cardloom.services.user import UserService
from cardloom.utils.dependencies import get_current_user, get_user_service
from cardloom.utils.router import get_router

router = get_router("users")


@router.get("/profile", response_model=ApiResponse[UserResponse], summary="내 프로필 조회")
async def get_profile(
    service: Annotated[UserService, Depends(get_user_service)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.get_profile(current_user))


@router.put("/profile", response_model=ApiResponse[UserResponse], summary="내 프로필 수정")
async def update_profile(
    request: ProfileUpdateRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    프로필 부분 수정

    - **preferences**: 기존 설정과 병합됩니다 (중첩 키 포함)
    """
    user = await service.update_profile(db, current_user, request)
    return ApiResponse(data=user, message="Profile updated")


@router.put(
    "/password",
    response_model=MessageResponse,
    summary="비밀번호 변경",
    responses={400: {"model": ErrorResponse, "description": "현재 비밀번호 불일치"}},
)
async def change_password(
    request: ChangePasswordRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.change_password(db, current_user, request)
    return MessageResponse(message="Password changed successfully")


@router.delete("/profile", response_model=MessageResponse, summary="회원 탈퇴")
async def delete_account(
    service: Annotated[UserService, Depends(get_user_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete_account(db, current_user)
    return MessageResponse(message="Account deleted")


@router.get(
    "/{user_id}",
    response_model=ApiResponse[PublicProfileResponse],
    summary="공개 프로필 조회",
    responses={404: {"model": ErrorResponse, "description": "사용자를 찾을 수 없음"}},
)
async def get_public_profile(
    user_id: int,
    service: Annotated[UserService, Depends(get_user_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.get_public_profile(db, user_id))


@router.get("/{user_id}/reviews", response_model=ApiResponse[List[ReviewResponse]], summary="받은 리뷰 목록")
async def get_user_reviews(
    user_id: int,
    service: Annotated[UserService, Depends(get_user_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.get_reviews(db, user_id, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)

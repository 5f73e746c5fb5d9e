import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.user import User
from cardloom.repositories.marketplace import ReviewRepository
from cardloom.repositories.user import UserRepository
from cardloom.schemas.common import PagedResult, Pagination
from cardloom.schemas.marketplace import ReviewResponse
from cardloom.schemas.user import (ChangePasswordRequest, ProfileUpdateRequest,
                                   PublicProfileResponse, UserResponse)
from cardloom.services.auth import to_user_response

logger = logging.getLogger(__name__)


def to_public_profile(user: User) -> PublicProfileResponse:
    return PublicProfileResponse(
        user_id=user.user_id,
        username=user.username,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        location=user.location,
        is_verified=user.is_verified,
        trading_stats=user.trading_stats,
        member_since=user.created_at,
    )


def merge_preferences(current: dict, updates: dict) -> dict:
    """중첩 dict까지 병합한 새 dict 반환 (JSON 컬럼 변경 감지를 위해 새 객체로)"""
    merged = dict(current or {})
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_preferences(merged[key], value)
        else:
            merged[key] = value
    return merged


class UserService:
    """
    사용자 프로필 관련 비즈니스 로직을 담당하는 Service 클래스
    """

    def __init__(self):
        self.user_repo = UserRepository()
        self.review_repo = ReviewRepository()

    async def get_profile(self, user: User) -> UserResponse:
        return to_user_response(user)

    async def update_profile(self, db: AsyncSession, user: User, request: ProfileUpdateRequest) -> UserResponse:
        update_data = request.model_dump(exclude_unset=True)
        if "preferences" in update_data:
            update_data["preferences"] = merge_preferences(user.preferences, update_data["preferences"] or {})

        updated = await self.user_repo.update(db, user, update_data)
        if not updated:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Profile update failed")

        logger.info(f"프로필 수정: user={user.user_id}, fields={list(update_data.keys())}")
        return to_user_response(updated)

    async def change_password(self, db: AsyncSession, user: User, request: ChangePasswordRequest) -> None:
        if not user.verify_password(request.current_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

        await self.user_repo.update(db, user, {"password": request.new_password})
        logger.info(f"비밀번호 변경: user={user.user_id}")

    async def delete_account(self, db: AsyncSession, user: User) -> None:
        await self.user_repo.soft_delete(db, user)

    async def get_public_profile(self, db: AsyncSession, user_id: int) -> PublicProfileResponse:
        user = await self.user_repo.get_by_id(db, user_id)
        if not user or not user.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return to_public_profile(user)

    async def get_reviews(
        self, db: AsyncSession, user_id: int, limit: int, offset: int
    ) -> PagedResult[ReviewResponse]:
        user = await self.user_repo.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        reviews, total = await self.review_repo.list_for_user(db, user_id, limit, offset)
        return PagedResult[ReviewResponse](
            items=[ReviewResponse.model_validate(r) for r in reviews],
            pagination=Pagination.build(total, limit, offset),
        )

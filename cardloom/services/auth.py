import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.user import User
from cardloom.repositories.user import UserRepository
from cardloom.schemas.user import (AuthResponse, TokenPair, UserRegisterRequest,
                                   UserResponse)
from cardloom.utils.security import (create_access_token, create_refresh_token,
                                     create_reset_token, decode_token,
                                     subject_user_id)

logger = logging.getLogger(__name__)


def default_preferences(preferred_games: list) -> dict:
    """신규 가입자 기본 환경설정"""
    return {
        "theme": "system",
        "default_game": preferred_games[0] if preferred_games else None,
        "preferred_games": preferred_games,
        "currency": "USD",
        "notifications": {
            "offers": True,
            "price_drops": True,
            "followers": True,
            "events": True,
            "messages": True,
            "marketing": False,
        },
        "privacy": {
            "show_collection": True,
            "show_trades": True,
            "allow_messages": True,
        },
    }


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        user_id=user.user_id,
        username=user.username,
        display_name=user.display_name,
        email=user.email,
        avatar_url=user.avatar_url,
        bio=user.bio,
        location=user.location,
        is_verified=user.is_verified,
        role=getattr(user.role, "value", user.role),
        preferences=user.preferences,
        trading_stats=user.trading_stats,
        last_login_at=user.last_login_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class AuthService:
    """
    JWT 기반 인증 로직 담당
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository()

    def _issue_tokens(self, user: User) -> TokenPair:
        role = getattr(user.role, "value", user.role)
        return TokenPair(
            token=create_access_token(user.user_id, role),
            refresh_token=create_refresh_token(user.user_id),
        )

    async def register(self, request: UserRegisterRequest) -> AuthResponse:
        """
        회원가입 처리
        - 이메일 / 사용자명 중복 시 400
        """
        if await self.user_repo.exists_by_email(self.db, request.email):
            logger.warning(f"이메일 중복 가입 시도: {request.email}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists with this email",
            )
        if await self.user_repo.exists_by_username(self.db, request.username):
            logger.warning(f"사용자명 중복 가입 시도: {request.username}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username is already taken",
            )

        games = [g.value for g in request.preferred_games]
        user = await self.user_repo.create(self.db, {
            "username": request.username,
            "display_name": request.display_name,
            "email": request.email,
            "password": request.password,
            "preferences": default_preferences(games),
        })
        if not user:
            # 동시 가입 등으로 unique 제약 위반
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists",
            )

        tokens = self._issue_tokens(user)
        logger.info(f"회원가입 완료: {user.email}")
        return AuthResponse(user=to_user_response(user), **tokens.model_dump())

    async def login(self, email: str, password: str, ip: Optional[str] = None) -> AuthResponse:
        """
        로그인 처리 및 JWT 토큰 발급
        """
        user = await self.user_repo.get_by_email(self.db, email)
        if not user or not user.verify_password(password):
            logger.warning(f"Login failed: invalid credentials ({email})")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )

        if not user.is_active:
            logger.warning(f"Login failed: deactivated account ({email})")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated",
            )

        user = await self.user_repo.record_login(self.db, user, ip)
        tokens = self._issue_tokens(user)

        logger.info(f"User login success: {user.email}")
        return AuthResponse(user=to_user_response(user), **tokens.model_dump())

    async def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Refresh Token을 검증하고 새로운 Access/Refresh Token 발급
        """
        if not refresh_token:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Refresh token is required",
            )

        payload = decode_token(refresh_token, refresh=True)
        if not payload or payload.get("scope") != "refresh":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid refresh token",
            )

        user_id = subject_user_id(payload)
        user = await self.user_repo.get_by_id(self.db, user_id) if user_id else None
        if not user or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found or inactive",
            )

        logger.info(f"Token refreshed for {user.email}")
        return self._issue_tokens(user)

    async def forgot_password(self, email: str) -> None:
        """
        비밀번호 재설정 토큰 발급
        - 계정 존재 여부와 무관하게 같은 응답 (메일 발송은 범위 밖, 로그로 대체)
        """
        user = await self.user_repo.get_by_email(self.db, email)
        if not user or not user.is_active:
            logger.info(f"비밀번호 재설정 요청 (미가입 이메일): {email}")
            return

        token = create_reset_token(user.user_id, user.password_hash)
        logger.info(f"비밀번호 재설정 토큰 발급: user={user.user_id}")
        logger.debug(f"reset token for user {user.user_id}: {token}")

    async def reset_password(self, token: str, new_password: str) -> None:
        payload = decode_token(token)
        invalid = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )
        if not payload or payload.get("scope") != "reset":
            raise invalid

        user_id = subject_user_id(payload)
        user = await self.user_repo.get_by_id(self.db, user_id) if user_id else None
        # 이미 비밀번호가 바뀐 경우 토큰 무효
        if not user or payload.get("pwd") != user.password_hash[-10:]:
            raise invalid

        await self.user_repo.update(self.db, user, {"password": new_password})
        logger.info(f"비밀번호 재설정 완료: user={user.user_id}")

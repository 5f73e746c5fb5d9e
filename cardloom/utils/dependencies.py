# utils/dependencies.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.user import User, UserRole
from cardloom.repositories.user import UserRepository
from cardloom.services.auth import AuthService
from cardloom.services.card import CardService
from cardloom.services.collection import CollectionService, WatchlistService
from cardloom.services.deck import DeckService
from cardloom.services.event import EventService
from cardloom.services.marketplace import MarketplaceService
from cardloom.services.notification import NotificationService
from cardloom.services.social import SocialService
from cardloom.services.user import UserService
from cardloom.utils.security import decode_token, subject_user_id

# Swagger에서 Authorize → 토큰만 입력해도 Bearer 자동으로 붙음
# 토큰 누락도 401로 통일하기 위해 auto_error=False
auth_scheme = HTTPBearer(auto_error=False)


def get_user_service() -> UserService:
    """
    사용자 서비스 의존성 주입 (FastAPI Depends용)
    """
    return UserService()


async def get_auth_service(db: AsyncSession = Depends(get_session)) -> AuthService:
    """
    AuthService 의존성 주입용 팩토리 함수.
    """
    return AuthService(db)


def get_card_service() -> CardService:
    return CardService()


def get_collection_service() -> CollectionService:
    return CollectionService()


def get_watchlist_service() -> WatchlistService:
    return WatchlistService()


def get_marketplace_service() -> MarketplaceService:
    return MarketplaceService()


def get_deck_service() -> DeckService:
    return DeckService()


def get_social_service() -> SocialService:
    return SocialService()


def get_event_service() -> EventService:
    return EventService()


def get_notification_service() -> NotificationService:
    return NotificationService()


async def _resolve_user(token: str, db: AsyncSession) -> Optional[User]:
    payload = decode_token(token)
    if not payload or payload.get("scope") != "access":
        return None

    user_id = subject_user_id(payload)
    if user_id is None:
        return None

    user = await UserRepository().get_by_id(db, user_id)
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    JWT Access Token을 해독하고 현재 로그인한 사용자 반환
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await _resolve_user(credentials.credentials, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    db: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """
    토큰이 있으면 사용자, 없거나 잘못되었으면 None (익명)
    """
    if credentials is None:
        return None
    return await _resolve_user(credentials.credentials, db)


def require_roles(*roles: UserRole):
    """
    특정 권한이 필요한 엔드포인트용 의존성
    """
    allowed = {r.value for r in roles}

    async def checker(user: User = Depends(get_current_user)) -> User:
        role = getattr(user.role, "value", user.role)
        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return checker

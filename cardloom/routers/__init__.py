"""
라우터 모듈

API 엔드포인트들을 정의합니다.
요청을 받아 적절한 서비스로 라우팅합니다.
"""

from .auth import router as auth_router
from .cards import router as cards_router
from .collection import router as collection_router
from .collection import watchlist_router
from .decks import router as decks_router
from .events import router as events_router
from .marketplace import router as marketplace_router
from .notifications import router as notifications_router
from .social import router as social_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "users_router",
    "cards_router",
    "collection_router",
    "watchlist_router",
    "marketplace_router",
    "decks_router",
    "social_router",
    "events_router",
    "notifications_router",
]

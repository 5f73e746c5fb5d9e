"""
서비스 계층 모듈

비즈니스 로직을 담당합니다.
Repository와 Router 사이의 중간 계층입니다.
"""

from .auth import AuthService
from .card import CardService
from .collection import CollectionService, WatchlistService
from .deck import DeckService
from .event import EventService
from .marketplace import MarketplaceService
from .notification import NotificationService
from .social import SocialService
from .user import UserService

__all__ = [
    "AuthService",
    "CardService",
    "CollectionService",
    "WatchlistService",
    "DeckService",
    "EventService",
    "MarketplaceService",
    "NotificationService",
    "SocialService",
    "UserService",
]

"""
데이터 모델 모듈

SQLModel 테이블 모델들을 정의합니다.
데이터베이스 테이블 구조를 정의합니다.
"""
from cardloom.models.base import TCGGame
from cardloom.models.user import User, UserRole
from cardloom.models.card import Card, CardRarity, CardSet, SetType
from cardloom.models.listing import (CardCondition, Listing, ListingStatus,
                                     ListingType, Offer, OfferStatus, Review,
                                     Transaction, TransactionStatus)
from cardloom.models.deck import Deck, DeckCard
from cardloom.models.collection import CollectionItem, WatchlistItem
from cardloom.models.event import Event, EventRSVP, EventSource, EventType, RSVPStatus
from cardloom.models.social import Comment, Conversation, Follow, Message, Post
from cardloom.models.notification import Notification, NotificationType

__all__ = [
    "TCGGame",
    "User",
    "UserRole",
    "Card",
    "CardRarity",
    "CardSet",
    "SetType",
    "CardCondition",
    "Listing",
    "ListingStatus",
    "ListingType",
    "Offer",
    "OfferStatus",
    "Review",
    "Transaction",
    "TransactionStatus",
    "Deck",
    "DeckCard",
    "CollectionItem",
    "WatchlistItem",
    "Event",
    "EventRSVP",
    "EventSource",
    "EventType",
    "RSVPStatus",
    "Comment",
    "Conversation",
    "Follow",
    "Message",
    "Post",
    "Notification",
    "NotificationType",
]

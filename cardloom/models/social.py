from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, CheckConstraint, Column, String, UniqueConstraint
from sqlmodel import Field

from cardloom.models.base import BaseModel


class FollowStatus(str, Enum):
    ACTIVE = "active"


class Follow(BaseModel, table=True):
    """
    팔로우 관계 (follower -> following)
    """

    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )

    follow_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    follower_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    following_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    status: FollowStatus = Field(default=FollowStatus.ACTIVE, sa_type=String(20))


class Conversation(BaseModel, table=True):
    """
    1:1 대화방
    - 참여자 쌍은 (작은 ID, 큰 ID)로 정규화하여 저장
    """

    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("participant_low_id", "participant_high_id", name="uq_conversation_pair"),
    )

    conversation_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    participant_low_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    participant_high_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)

    @property
    def participants(self) -> List[int]:
        return [self.participant_low_id, self.participant_high_id]

    def other_participant(self, user_id: int) -> int:
        if user_id == self.participant_low_id:
            return self.participant_high_id
        return self.participant_low_id


class Message(BaseModel, table=True):
    __tablename__ = "messages"

    message_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    conversation_id: int = Field(foreign_key="conversations.conversation_id", nullable=False, index=True)
    sender_id: int = Field(foreign_key="users.user_id", nullable=False)
    recipient_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    content: str = Field(nullable=False)
    images: list = Field(default_factory=list, sa_column=Column(JSON))
    related_listing_id: Optional[int] = Field(default=None, foreign_key="listings.listing_id")
    is_read: bool = Field(default=False)


class Post(BaseModel, table=True):
    """
    소셜 피드 게시글
    - likes, comments는 카운터 컬럼
    """

    __tablename__ = "posts"

    post_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    author_id: int = Field(foreign_key="users.user_id", nullable=False, index=True)
    content: str = Field(nullable=False)
    images: list = Field(default_factory=list, sa_column=Column(JSON))
    related_deck_id: Optional[int] = Field(default=None, foreign_key="decks.deck_id")
    related_listing_id: Optional[int] = Field(default=None, foreign_key="listings.listing_id")
    related_event_id: Optional[int] = Field(default=None, foreign_key="events.event_id")
    likes: int = Field(default=0)
    comments: int = Field(default=0)


class Comment(BaseModel, table=True):
    __tablename__ = "comments"

    comment_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    post_id: int = Field(foreign_key="posts.post_id", nullable=False, index=True)
    author_id: int = Field(foreign_key="users.user_id", nullable=False)
    content: str = Field(nullable=False)
    parent_comment_id: Optional[int] = Field(default=None, foreign_key="comments.comment_id")
    likes: int = Field(default=0)

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cardloom.schemas.user import PublicProfileResponse


class PostCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    images: List[str] = Field(default_factory=list, max_length=10)
    related_deck_id: Optional[int] = None
    related_listing_id: Optional[int] = None
    related_event_id: Optional[int] = None


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: int
    author_id: int
    content: str
    images: List[str] = Field(default_factory=list)
    related_deck_id: Optional[int] = None
    related_listing_id: Optional[int] = None
    related_event_id: Optional[int] = None
    likes: int
    comments: int
    created_at: Optional[datetime] = None


class CommentCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    parent_comment_id: Optional[int] = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comment_id: int
    post_id: int
    author_id: int
    content: str
    parent_comment_id: Optional[int] = None
    likes: int
    created_at: Optional[datetime] = None


class FollowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    follow_id: int
    follower_id: int
    following_id: int
    status: str
    created_at: Optional[datetime] = None


class MessageCreateRequest(BaseModel):
    recipient_id: int
    content: str = Field(..., min_length=1, max_length=5000)
    images: List[str] = Field(default_factory=list, max_length=10)
    related_listing_id: Optional[int] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message_id: int
    conversation_id: int
    sender_id: int
    recipient_id: int
    content: str
    images: List[str] = Field(default_factory=list)
    related_listing_id: Optional[int] = None
    is_read: bool
    created_at: Optional[datetime] = None


class ConversationResponse(BaseModel):
    conversation_id: int
    participants: List[int]
    other_user: Optional[PublicProfileResponse] = None
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0
    updated_at: Optional[datetime] = None

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.models.notification import NotificationType
from cardloom.models.social import Conversation, Post
from cardloom.models.user import User
from cardloom.repositories.deck import DeckRepository
from cardloom.repositories.event import EventRepository
from cardloom.repositories.marketplace import ListingRepository
from cardloom.repositories.social import FollowRepository, MessageRepository, PostRepository
from cardloom.repositories.user import UserRepository
from cardloom.schemas.common import PagedResult, Pagination
from cardloom.schemas.social import (CommentCreateRequest, CommentResponse,
                                     ConversationResponse, FollowResponse,
                                     MessageCreateRequest, MessageResponse,
                                     PostCreateRequest, PostResponse)
from cardloom.schemas.user import PublicProfileResponse
from cardloom.services.notification import NotificationService
from cardloom.services.user import to_public_profile

logger = logging.getLogger(__name__)


class SocialService:
    """
    팔로우 / 피드 / 댓글 / 1:1 메시지 비즈니스 로직
    """

    def __init__(self):
        self.follow_repo = FollowRepository()
        self.post_repo = PostRepository()
        self.message_repo = MessageRepository()
        self.user_repo = UserRepository()
        self.deck_repo = DeckRepository()
        self.listing_repo = ListingRepository()
        self.event_repo = EventRepository()
        self.notification_service = NotificationService()

    async def _get_active_user(self, db: AsyncSession, user_id: int) -> User:
        user = await self.user_repo.get_by_id(db, user_id)
        if not user or not user.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    # -------------------- #
    # 팔로우
    # -------------------- #

    async def follow(self, db: AsyncSession, follower: User, following_id: int) -> FollowResponse:
        if follower.user_id == following_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot follow yourself")

        await self._get_active_user(db, following_id)
        if await self.follow_repo.get(db, follower.user_id, following_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already following this user")

        follow = await self.follow_repo.create(db, follower.user_id, following_id)
        if not follow:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already following this user")

        await self.notification_service.notify(
            db,
            following_id,
            NotificationType.NEW_FOLLOWER,
            "New follower",
            f"{follower.display_name} started following you",
            {"user_id": follower.user_id},
        )
        return FollowResponse.model_validate(follow)

    async def unfollow(self, db: AsyncSession, follower_id: int, following_id: int) -> None:
        follow = await self.follow_repo.get(db, follower_id, following_id)
        if not follow:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You are not following this user")
        await self.follow_repo.delete(db, follow)

    async def list_follow_profiles(
        self, db: AsyncSession, user_id: int, followers: bool, limit: int, offset: int
    ) -> PagedResult[PublicProfileResponse]:
        await self._get_active_user(db, user_id)
        ids, total = await self.follow_repo.list_user_ids(db, user_id, followers, limit, offset)
        users = await self.user_repo.get_by_ids(db, ids)
        # 탈퇴 사용자는 제외하되 팔로우 순서는 유지
        profiles = [to_public_profile(users[i]) for i in ids if i in users]
        return PagedResult[PublicProfileResponse](
            items=profiles, pagination=Pagination.build(total, limit, offset)
        )

    # -------------------- #
    # 게시글
    # -------------------- #

    def _paged_posts(self, posts: List[Post], total: int, limit: int, offset: int) -> PagedResult[PostResponse]:
        return PagedResult[PostResponse](
            items=[PostResponse.model_validate(p) for p in posts],
            pagination=Pagination.build(total, limit, offset),
        )

    async def get_feed(self, db: AsyncSession, user_id: int, limit: int, offset: int) -> PagedResult[PostResponse]:
        author_ids = await self.follow_repo.following_ids(db, user_id)
        author_ids.append(user_id)
        posts, total = await self.post_repo.list_posts(db, author_ids, limit, offset)
        return self._paged_posts(posts, total, limit, offset)

    async def list_posts(
        self, db: AsyncSession, author_id: Optional[int], limit: int, offset: int
    ) -> PagedResult[PostResponse]:
        author_ids = [author_id] if author_id is not None else None
        posts, total = await self.post_repo.list_posts(db, author_ids, limit, offset)
        return self._paged_posts(posts, total, limit, offset)

    async def _get_post(self, db: AsyncSession, post_id: int) -> Post:
        post = await self.post_repo.get_post(db, post_id)
        if not post:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
        return post

    async def create_post(self, db: AsyncSession, author_id: int, request: PostCreateRequest) -> PostResponse:
        if request.related_deck_id is not None and not await self.deck_repo.get_by_id(db, request.related_deck_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Related deck not found")
        if request.related_listing_id is not None and not await self.listing_repo.get_by_id(
                db, request.related_listing_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Related listing not found")
        if request.related_event_id is not None and not await self.event_repo.get_by_id(db, request.related_event_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Related event not found")

        post = await self.post_repo.create_post(db, author_id, request.model_dump())
        return PostResponse.model_validate(post)

    async def get_post(self, db: AsyncSession, post_id: int) -> PostResponse:
        return PostResponse.model_validate(await self._get_post(db, post_id))

    async def delete_post(self, db: AsyncSession, post_id: int, user_id: int) -> None:
        post = await self._get_post(db, post_id)
        if post.author_id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this post")
        await self.post_repo.soft_delete_post(db, post)

    async def like_post(self, db: AsyncSession, post_id: int) -> PostResponse:
        post = await self._get_post(db, post_id)
        post = await self.post_repo.like_post(db, post)
        return PostResponse.model_validate(post)

    # -------------------- #
    # 댓글
    # -------------------- #

    async def list_comments(self, db: AsyncSession, post_id: int) -> List[CommentResponse]:
        await self._get_post(db, post_id)
        comments = await self.post_repo.list_comments(db, post_id)
        return [CommentResponse.model_validate(c) for c in comments]

    async def create_comment(
        self, db: AsyncSession, post_id: int, author_id: int, request: CommentCreateRequest
    ) -> CommentResponse:
        post = await self._get_post(db, post_id)

        if request.parent_comment_id is not None:
            parent = await self.post_repo.get_comment(db, request.parent_comment_id)
            if not parent or parent.post_id != post.post_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Parent comment does not belong to this post",
                )

        comment = await self.post_repo.create_comment(db, post, author_id, request.model_dump())
        return CommentResponse.model_validate(comment)

    async def delete_comment(self, db: AsyncSession, comment_id: int, user_id: int) -> None:
        comment = await self.post_repo.get_comment(db, comment_id)
        if not comment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
        if comment.author_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this comment")

        post = await self.post_repo.get_post(db, comment.post_id)
        await self.post_repo.soft_delete_comment(db, comment, post)

    # -------------------- #
    # 메시지
    # -------------------- #

    async def send_message(self, db: AsyncSession, sender: User, request: MessageCreateRequest) -> MessageResponse:
        if sender.user_id == request.recipient_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot message yourself")

        await self._get_active_user(db, request.recipient_id)
        if request.related_listing_id is not None and not await self.listing_repo.get_by_id(
                db, request.related_listing_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Related listing not found")

        conversation = await self.message_repo.get_or_create_conversation(db, sender.user_id, request.recipient_id)
        message = await self.message_repo.create_message(db, conversation, {
            "sender_id": sender.user_id,
            "recipient_id": request.recipient_id,
            "content": request.content,
            "images": request.images,
            "related_listing_id": request.related_listing_id,
        })

        await self.notification_service.notify(
            db,
            request.recipient_id,
            NotificationType.NEW_MESSAGE,
            "New message",
            f"{sender.display_name} sent you a message",
            {"conversation_id": conversation.conversation_id, "message_id": message.message_id},
        )
        return MessageResponse.model_validate(message)

    async def list_conversations(self, db: AsyncSession, user_id: int) -> List[ConversationResponse]:
        conversations = await self.message_repo.list_conversations(db, user_id)
        others = await self.user_repo.get_by_ids(db, [c.other_participant(user_id) for c in conversations])

        responses = []
        for conversation in conversations:
            other = others.get(conversation.other_participant(user_id))
            last_message = await self.message_repo.last_message(db, conversation.conversation_id)
            responses.append(ConversationResponse(
                conversation_id=conversation.conversation_id,
                participants=conversation.participants,
                other_user=to_public_profile(other) if other else None,
                last_message=MessageResponse.model_validate(last_message) if last_message else None,
                unread_count=await self.message_repo.unread_count(db, conversation.conversation_id, user_id),
                updated_at=conversation.updated_at,
            ))
        return responses

    async def _get_participating(self, db: AsyncSession, conversation_id: int, user_id: int) -> Conversation:
        conversation = await self.message_repo.get_conversation(db, conversation_id)
        if not conversation or user_id not in conversation.participants:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
        return conversation

    async def list_messages(
        self, db: AsyncSession, conversation_id: int, user_id: int, limit: int, offset: int
    ) -> PagedResult[MessageResponse]:
        conversation = await self._get_participating(db, conversation_id, user_id)

        read = await self.message_repo.mark_read(db, conversation.conversation_id, user_id)
        if read:
            logger.debug(f"메시지 읽음 처리: conversation={conversation_id}, user={user_id}, {read}건")

        messages, total = await self.message_repo.list_messages(db, conversation.conversation_id, limit, offset)
        return PagedResult[MessageResponse](
            items=[MessageResponse.model_validate(m) for m in messages],
            pagination=Pagination.build(total, limit, offset),
        )

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.utils.datetime import utc_now
from cardloom.models.social import (Comment, Conversation, Follow, FollowStatus,
                                    Message, Post)

logger = logging.getLogger(__name__)


class FollowRepository:
    """
    팔로우 관계 Repository
    """

    async def get(self, db: AsyncSession, follower_id: int, following_id: int) -> Optional[Follow]:
        result = await db.execute(
            select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
        return result.scalars().first()

    async def create(self, db: AsyncSession, follower_id: int, following_id: int) -> Optional[Follow]:
        try:
            follow = Follow(follower_id=follower_id, following_id=following_id, status=FollowStatus.ACTIVE)
            db.add(follow)
            await db.commit()
            await db.refresh(follow)
            logger.info(f"팔로우: {follower_id} -> {following_id}")
            return follow
        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"팔로우 무결성 오류 ({follower_id} -> {following_id}): {ie}")
            return None

    async def delete(self, db: AsyncSession, follow: Follow) -> None:
        await db.delete(follow)
        await db.commit()
        logger.info(f"언팔로우: {follow.follower_id} -> {follow.following_id}")

    async def list_user_ids(
        self, db: AsyncSession, user_id: int, followers: bool, limit: int, offset: int
    ) -> Tuple[List[int], int]:
        """
        followers=True: user_id를 팔로우하는 사용자 ID 목록
        followers=False: user_id가 팔로우하는 사용자 ID 목록
        """
        if followers:
            target, column = Follow.following_id, Follow.follower_id
        else:
            target, column = Follow.follower_id, Follow.following_id

        conditions = [target == user_id, Follow.status == FollowStatus.ACTIVE]
        count_result = await db.execute(select(func.count()).select_from(Follow).where(*conditions))
        result = await db.execute(
            select(column)
            .where(*conditions)
            .order_by(Follow.created_at.desc(), Follow.follow_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [row[0] for row in result.all()], count_result.scalar() or 0

    async def following_ids(self, db: AsyncSession, user_id: int) -> List[int]:
        result = await db.execute(
            select(Follow.following_id).where(
                Follow.follower_id == user_id, Follow.status == FollowStatus.ACTIVE
            )
        )
        return [row[0] for row in result.all()]


class PostRepository:
    """
    게시글 / 댓글 Repository
    """

    async def list_posts(
        self, db: AsyncSession, author_ids: Optional[List[int]], limit: int, offset: int
    ) -> Tuple[List[Post], int]:
        conditions = [Post.is_deleted == False]  # noqa: E712
        if author_ids is not None:
            conditions.append(Post.author_id.in_(author_ids))

        count_result = await db.execute(select(func.count()).select_from(Post).where(*conditions))
        result = await db.execute(
            select(Post)
            .where(*conditions)
            .order_by(Post.created_at.desc(), Post.post_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def get_post(self, db: AsyncSession, post_id: int) -> Optional[Post]:
        result = await db.execute(
            select(Post).where(Post.post_id == post_id, Post.is_deleted == False)  # noqa: E712
        )
        return result.scalars().first()

    async def create_post(self, db: AsyncSession, author_id: int, data: Dict[str, Any]) -> Post:
        post = Post(author_id=author_id, **data)
        db.add(post)
        await db.commit()
        await db.refresh(post)
        logger.info(f"게시글 작성: post={post.post_id}, author={author_id}")
        return post

    async def soft_delete_post(self, db: AsyncSession, post: Post) -> None:
        post.is_deleted = True
        await db.commit()

    async def like_post(self, db: AsyncSession, post: Post) -> Post:
        await db.execute(
            update(Post).where(Post.post_id == post.post_id).values(likes=Post.likes + 1)
        )
        await db.commit()
        await db.refresh(post)
        return post

    async def list_comments(self, db: AsyncSession, post_id: int) -> List[Comment]:
        result = await db.execute(
            select(Comment)
            .where(Comment.post_id == post_id, Comment.is_deleted == False)  # noqa: E712
            .order_by(Comment.created_at.asc(), Comment.comment_id.asc())
        )
        return list(result.scalars().all())

    async def get_comment(self, db: AsyncSession, comment_id: int) -> Optional[Comment]:
        result = await db.execute(
            select(Comment).where(Comment.comment_id == comment_id, Comment.is_deleted == False)  # noqa: E712
        )
        return result.scalars().first()

    async def create_comment(self, db: AsyncSession, post: Post, author_id: int, data: Dict[str, Any]) -> Comment:
        """댓글 작성 + 게시글 댓글 수 증가"""
        comment = Comment(post_id=post.post_id, author_id=author_id, **data)
        db.add(comment)
        post.comments = (post.comments or 0) + 1
        await db.commit()
        await db.refresh(comment)
        await db.refresh(post)
        return comment

    async def soft_delete_comment(self, db: AsyncSession, comment: Comment, post: Optional[Post]) -> None:
        comment.is_deleted = True
        if post is not None:
            post.comments = max((post.comments or 0) - 1, 0)
        await db.commit()


class MessageRepository:
    """
    1:1 대화 / 메시지 Repository
    """

    async def get_conversation(self, db: AsyncSession, conversation_id: int) -> Optional[Conversation]:
        result = await db.execute(
            select(Conversation).where(
                Conversation.conversation_id == conversation_id,
                Conversation.is_deleted == False,  # noqa: E712
            )
        )
        return result.scalars().first()

    async def get_or_create_conversation(self, db: AsyncSession, user_a: int, user_b: int) -> Conversation:
        """
        순서 없는 참여자 쌍에 대한 대화방 조회, 없으면 생성
        """
        low, high = sorted((user_a, user_b))
        result = await db.execute(
            select(Conversation).where(
                Conversation.participant_low_id == low,
                Conversation.participant_high_id == high,
            )
        )
        conversation = result.scalars().first()
        if conversation:
            return conversation

        conversation = Conversation(participant_low_id=low, participant_high_id=high)
        db.add(conversation)
        await db.commit()
        await db.refresh(conversation)
        logger.info(f"대화방 생성: conversation={conversation.conversation_id} ({low}, {high})")
        return conversation

    async def create_message(self, db: AsyncSession, conversation: Conversation, data: Dict[str, Any]) -> Message:
        message = Message(conversation_id=conversation.conversation_id, **data)
        db.add(message)
        # 최근 대화 정렬용
        conversation.updated_at = utc_now()
        await db.commit()
        await db.refresh(message)
        return message

    async def list_conversations(self, db: AsyncSession, user_id: int) -> List[Conversation]:
        result = await db.execute(
            select(Conversation)
            .where(
                or_(Conversation.participant_low_id == user_id, Conversation.participant_high_id == user_id),
                Conversation.is_deleted == False,  # noqa: E712
            )
            .order_by(Conversation.updated_at.desc(), Conversation.conversation_id.desc())
        )
        return list(result.scalars().all())

    async def last_message(self, db: AsyncSession, conversation_id: int) -> Optional[Message]:
        result = await db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id, Message.is_deleted == False)  # noqa: E712
            .order_by(Message.created_at.desc(), Message.message_id.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def unread_count(self, db: AsyncSession, conversation_id: int, recipient_id: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(Message).where(
                Message.conversation_id == conversation_id,
                Message.recipient_id == recipient_id,
                Message.is_read == False,  # noqa: E712
                Message.is_deleted == False,  # noqa: E712
            )
        )
        return result.scalar() or 0

    async def list_messages(
        self, db: AsyncSession, conversation_id: int, limit: int, offset: int
    ) -> Tuple[List[Message], int]:
        conditions = [Message.conversation_id == conversation_id, Message.is_deleted == False]  # noqa: E712
        count_result = await db.execute(select(func.count()).select_from(Message).where(*conditions))
        result = await db.execute(
            select(Message)
            .where(*conditions)
            .order_by(Message.created_at.asc(), Message.message_id.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), count_result.scalar() or 0

    async def mark_read(self, db: AsyncSession, conversation_id: int, recipient_id: int) -> int:
        """받은 메시지 읽음 처리, 처리 건수 반환"""
        result = await db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.recipient_id == recipient_id,
                Message.is_read == False,  # noqa: E712
            )
            .values(is_read=True)
        )
        await db.commit()
        return result.rowcount or 0

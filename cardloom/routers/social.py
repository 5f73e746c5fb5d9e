# routers/social.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardloom.database import get_session
from cardloom.models.user import User
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.schemas.social import (CommentCreateRequest, CommentResponse,
                                     ConversationResponse, FollowResponse,
                                     MessageCreateRequest)
from cardloom.schemas.social import MessageResponse as ChatMessageResponse
from cardloom.schemas.social import PostCreateRequest, PostResponse
from cardloom.schemas.user import PublicProfileResponse
from cardloom.services.social import SocialService
from cardloom.utils.dependencies import get_current_user, get_social_service
from cardloom.utils.router import get_router

router = get_router("social")


# -------------------- #
# 팔로우
# -------------------- #

@router.post(
    "/follow/{user_id}",
    response_model=ApiResponse[FollowResponse],
    status_code=status.HTTP_201_CREATED,
    summary="팔로우",
    responses={400: {"model": ErrorResponse, "description": "자기 자신 또는 이미 팔로우 중"}},
)
async def follow_user(
    user_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    follow = await service.follow(db, current_user, user_id)
    return ApiResponse(data=follow, message="User followed")


@router.delete("/follow/{user_id}", response_model=MessageResponse, summary="언팔로우")
async def unfollow_user(
    user_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.unfollow(db, current_user.user_id, user_id)
    return MessageResponse(message="User unfollowed")


@router.get("/users/{user_id}/followers", response_model=ApiResponse[List[PublicProfileResponse]], summary="팔로워 목록")
async def list_followers(
    user_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_follow_profiles(db, user_id, True, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.get("/users/{user_id}/following", response_model=ApiResponse[List[PublicProfileResponse]], summary="팔로잉 목록")
async def list_following(
    user_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_follow_profiles(db, user_id, False, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)


# -------------------- #
# 피드 / 게시글
# -------------------- #

@router.get("/feed", response_model=ApiResponse[List[PostResponse]], summary="내 피드")
async def get_feed(
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """
    본인과 팔로우 중인 사용자의 게시글 (최신순)
    """
    result = await service.get_feed(db, current_user.user_id, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.get("/posts", response_model=ApiResponse[List[PostResponse]], summary="게시글 목록")
async def list_posts(
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    author_id: Optional[int] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await service.list_posts(db, author_id, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)


@router.post("/posts", response_model=ApiResponse[PostResponse], status_code=status.HTTP_201_CREATED, summary="게시글 작성")
async def create_post(
    request: PostCreateRequest,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    post = await service.create_post(db, current_user.user_id, request)
    return ApiResponse(data=post, message="Post created")


@router.get("/posts/{post_id}", response_model=ApiResponse[PostResponse], summary="게시글 상세")
async def get_post(
    post_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.get_post(db, post_id))


@router.delete("/posts/{post_id}", response_model=MessageResponse, summary="게시글 삭제")
async def delete_post(
    post_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete_post(db, post_id, current_user.user_id)
    return MessageResponse(message="Post deleted")


@router.post("/posts/{post_id}/like", response_model=ApiResponse[PostResponse], summary="게시글 좋아요")
async def like_post(
    post_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.like_post(db, post_id))


# -------------------- #
# 댓글
# -------------------- #

@router.get("/posts/{post_id}/comments", response_model=ApiResponse[List[CommentResponse]], summary="댓글 목록")
async def list_comments(
    post_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    return ApiResponse(data=await service.list_comments(db, post_id))


@router.post(
    "/posts/{post_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="댓글 작성",
)
async def create_comment(
    post_id: int,
    request: CommentCreateRequest,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    comment = await service.create_comment(db, post_id, current_user.user_id, request)
    return ApiResponse(data=comment, message="Comment added")


@router.delete("/comments/{comment_id}", response_model=MessageResponse, summary="댓글 삭제")
async def delete_comment(
    comment_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    await service.delete_comment(db, comment_id, current_user.user_id)
    return MessageResponse(message="Comment deleted")


# -------------------- #
# 메시지
# -------------------- #

@router.post(
    "/messages",
    response_model=ApiResponse[ChatMessageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="메시지 보내기",
)
async def send_message(
    request: MessageCreateRequest,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    message = await service.send_message(db, current_user, request)
    return ApiResponse(data=message, message="Message sent")


@router.get("/conversations", response_model=ApiResponse[List[ConversationResponse]], summary="대화 목록")
async def list_conversations(
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return ApiResponse(data=await service.list_conversations(db, current_user.user_id))


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=ApiResponse[List[ChatMessageResponse]],
    summary="대화 메시지 목록",
)
async def list_messages(
    conversation_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """
    오래된 순으로 반환하며, 내가 받은 메시지는 읽음 처리됩니다.
    """
    result = await service.list_messages(db, conversation_id, current_user.user_id, limit, offset)
    return ApiResponse(data=result.items, pagination=result.pagination)

# routers/auth.py
from typing import Annotated

from fastapi import Depends, Request, status

from cardloom.models.user import User
from cardloom.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from cardloom.schemas.user import (AuthResponse, ForgotPasswordRequest, LoginRequest,
                                   ResetPasswordRequest, TokenPair,
                                   TokenRefreshRequest, UserRegisterRequest,
                                   UserResponse)
from cardloom.services.auth import AuthService, to_user_response
from cardloom.utils.dependencies import get_auth_service, get_current_user
from cardloom.utils.router import get_router

router = get_router("auth")


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
    responses={400: {"model": ErrorResponse, "description": "이메일 또는 사용자명 중복"}},
)
async def register(
    request: UserRegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    새로운 사용자를 생성하고 토큰을 발급합니다.

    - **username**: 3-20자, 영문/숫자/밑줄
    - **email**: 이메일 주소
    - **password**: 최소 8자
    - **preferred_games**: 선호 게임 (1-5개)
    """
    auth = await service.register(request)
    return ApiResponse(data=auth, message="User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    summary="로그인",
    responses={401: {"model": ErrorResponse, "description": "잘못된 이메일/비밀번호"}},
)
async def login(
    request: LoginRequest,
    http_request: Request,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    client_ip = http_request.client.host if http_request.client else None
    auth = await service.login(email=request.email, password=request.password, ip=client_ip)
    return ApiResponse(data=auth, message="Login successful")


@router.post("/logout", response_model=MessageResponse, summary="로그아웃")
async def logout(current_user: Annotated[User, Depends(get_current_user)]):
    # 토큰은 stateless - 클라이언트가 폐기
    return MessageResponse(message="Logged out successfully")


@router.post("/refresh", response_model=ApiResponse[TokenPair], summary="토큰 재발급")
async def refresh(
    request: TokenRefreshRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    tokens = await service.refresh(request.refresh_token)
    return ApiResponse(data=tokens)


@router.post("/forgot-password", response_model=MessageResponse, summary="비밀번호 재설정 요청")
async def forgot_password(
    request: ForgotPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    await service.forgot_password(request.email)
    return MessageResponse(message="If an account exists for this email, a reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse, summary="비밀번호 재설정")
async def reset_password(
    request: ResetPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    await service.reset_password(request.token, request.password)
    return MessageResponse(message="Password has been reset")


@router.get("/me", response_model=ApiResponse[UserResponse], summary="내 정보")
async def me(current_user: Annotated[User, Depends(get_current_user)]):
    return ApiResponse(data=to_user_response(current_user))

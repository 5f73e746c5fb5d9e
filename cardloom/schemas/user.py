from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from cardloom.models.base import TCGGame


class TradingStats(BaseModel):
    total_trades: int = 0
    seller_rating: float = 0.0
    review_count: int = 0
    successful_trades: int = 0


class UserRegisterRequest(BaseModel):
    """
    회원가입 요청 스키마
    """
    username: str = Field(..., min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$",
                          description="사용자명 (영문/숫자/밑줄)")
    display_name: str = Field(..., min_length=1, max_length=50, description="표시 이름")
    email: EmailStr = Field(..., description="이메일 주소")
    password: str = Field(..., min_length=8, max_length=100, description="비밀번호 (최소 8자)")
    preferred_games: List[TCGGame] = Field(..., min_length=1, max_length=5, description="선호 게임")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "username": "ash_ketchum",
            "display_name": "Ash",
            "email": "ash@example.com",
            "password": "pikachu123",
            "preferred_games": ["pokemon"],
        }
    })

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class TokenRefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=100)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=100)


class ProfileUpdateRequest(BaseModel):
    """
    프로필 수정 요청 스키마 (부분 수정)
    - preferences는 기존 설정에 병합
    """
    display_name: Optional[str] = Field(None, min_length=1, max_length=50)
    bio: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=500)
    preferences: Optional[Dict[str, Any]] = None


class PublicProfileResponse(BaseModel):
    """
    다른 사용자에게 노출되는 공개 프로필
    """
    user_id: int
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    is_verified: bool = False
    trading_stats: TradingStats
    member_since: Optional[datetime] = None


class UserResponse(BaseModel):
    """
    본인 프로필 응답 스키마
    """
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    display_name: str
    email: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    is_verified: bool = False
    role: str
    preferences: Optional[Dict[str, Any]] = None
    trading_stats: TradingStats
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    refresh_token: str


class TokenPair(BaseModel):
    token: str
    refresh_token: str

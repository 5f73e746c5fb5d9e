from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column, String
from sqlalchemy.types import TIMESTAMP, Numeric
from sqlmodel import Field

from cardloom.models.base import BaseModel
from cardloom.utils.security import get_password_hash, verify_password as _verify


class UserRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
    STORE_OWNER = "store_owner"


class User(BaseModel, table=True):
    """
    사용자 정보를 저장하는 테이블
    - JWT 인증 및 권한 관리 기반
    - 비밀번호는 bcrypt 해시로 저장
    - 거래 통계(total_trades, seller_rating 등)는 거래/리뷰 처리 시 갱신
    """

    __tablename__ = "users"

    user_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="사용자 고유 ID",
        sa_column_kwargs={"autoincrement": True}
    )

    username: str = Field(
        max_length=50,
        nullable=False,
        index=True,
        description="로그인/프로필용 고유 사용자명",
        sa_column_kwargs={"unique": True}
    )

    display_name: str = Field(
        max_length=100,
        nullable=False,
        description="표시용 이름"
    )

    email: str = Field(
        max_length=255,
        nullable=False,
        description="이메일 (로그인용)",
        sa_column_kwargs={"unique": True}
    )

    password_hash: str = Field(
        max_length=255,
        nullable=False,
        description="bcrypt로 해시된 비밀번호"
    )

    avatar_url: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None, max_length=255)

    is_verified: bool = Field(default=False, description="인증된 판매자 여부")

    is_active: bool = Field(
        default=True,
        description="계정 활성화 여부 (False 시 로그인 불가)"
    )

    role: UserRole = Field(
        default=UserRole.USER,
        sa_type=String(20),
        description="권한 (user, moderator, admin, store_owner)"
    )

    total_trades: int = Field(default=0)
    successful_trades: int = Field(default=0)
    review_count: int = Field(default=0)
    seller_rating: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(3, 2), nullable=False, default=0),
    )

    preferences: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    last_login_at: Optional[datetime] = Field(
        default=None, sa_type=TIMESTAMP(timezone=True)
    )
    last_login_ip: Optional[str] = Field(default=None, max_length=45)

    # -------------------- #
    # 비밀번호 관련 유틸리티
    # -------------------- #

    @classmethod
    def hash_password(cls, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, password: str) -> bool:
        return _verify(password, self.password_hash)

    # -------------------- #
    # 헬퍼 메서드
    # -------------------- #

    @property
    def trading_stats(self) -> dict:
        return {
            "total_trades": self.total_trades,
            "seller_rating": float(self.seller_rating or 0),
            "review_count": self.review_count,
            "successful_trades": self.successful_trades,
        }

    def wants_notification(self, key: str) -> bool:
        """알림 환경설정 확인 (설정이 없으면 기본 허용)"""
        notifications = (self.preferences or {}).get("notifications") or {}
        return bool(notifications.get(key, True))

    def __repr__(self) -> str:
        return f"<User(id={self.user_id}, username='{self.username}', email='{self.email}')>"

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.utils.datetime import utc_now
from cardloom.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    사용자 데이터베이스 접근을 담당하는 Repository 클래스
    - 소프트 삭제된 사용자는 모든 조회에서 제외
    """

    async def create(self, db: AsyncSession, user_data: Dict[str, Any]) -> Optional[User]:
        """
        새로운 사용자를 생성합니다.

        Args:
            db: 데이터베이스 세션
            user_data: username, display_name, email, password, preferences

        Returns:
            생성된 사용자 객체 또는 None (중복 등 무결성 오류)
        """
        try:
            user = User(
                username=user_data["username"],
                display_name=user_data["display_name"],
                email=user_data["email"],
                password_hash=User.hash_password(user_data["password"]),
                preferences=user_data.get("preferences"),
            )

            db.add(user)
            await db.commit()
            await db.refresh(user)

            logger.info(f"사용자 생성 완료: {user.email}")
            return user

        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"사용자 생성 무결성 오류 (email={user_data.get('email')}): {ie}")
            return None

    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.user_id == user_id, User.is_deleted == False)  # noqa: E712
        )
        user = result.scalars().first()
        if not user:
            logger.warning(f"사용자 ID를 찾을 수 없음: {user_id}")
        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.email == email.lower(), User.is_deleted == False)  # noqa: E712
        )
        return result.scalars().first()

    async def exists_by_email(self, db: AsyncSession, email: str) -> bool:
        """
        이메일 사용 여부 (탈퇴 계정 포함, unique 제약과 동일 기준)
        """
        result = await db.execute(
            select(func.count()).select_from(User).where(User.email == email.lower())
        )
        return (result.scalar() or 0) > 0

    async def exists_by_username(self, db: AsyncSession, username: str) -> bool:
        result = await db.execute(
            select(func.count()).select_from(User).where(User.username == username)
        )
        return (result.scalar() or 0) > 0

    async def update(self, db: AsyncSession, user: User, update_data: Dict[str, Any]) -> Optional[User]:
        """
        사용자 정보를 수정합니다.
        - password가 오면 bcrypt 해시로 변환 저장
        """
        try:
            if update_data.get("password"):
                update_data["password_hash"] = User.hash_password(update_data.pop("password"))

            allowed_fields = {
                "display_name", "bio", "location", "avatar_url",
                "preferences", "password_hash",
            }
            for key, value in update_data.items():
                if key in allowed_fields:
                    setattr(user, key, value)

            await db.commit()
            await db.refresh(user)

            logger.info(f"사용자 정보 수정 완료: {user.user_id}")
            return user

        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"사용자 정보 수정 무결성 오류 (user_id={user.user_id}): {ie}")
            return None

    async def record_login(self, db: AsyncSession, user: User, ip: Optional[str]) -> User:
        user.last_login_at = utc_now()
        user.last_login_ip = ip
        await db.commit()
        await db.refresh(user)
        return user

    async def soft_delete(self, db: AsyncSession, user: User) -> None:
        """
        계정 탈퇴: 소프트 삭제 + 비활성화
        """
        user.is_deleted = True
        user.is_active = False
        await db.commit()
        logger.info(f"사용자 탈퇴 처리 완료: {user.user_id}")

    async def record_completed_trade(self, db: AsyncSession, user_ids: list) -> None:
        """거래 완료 시 양측 거래 통계 증가 (commit은 호출측에서)"""
        result = await db.execute(select(User).where(User.user_id.in_(user_ids)))
        for user in result.scalars().all():
            user.total_trades += 1
            user.successful_trades += 1

    async def get_by_ids(self, db: AsyncSession, user_ids: List[int]) -> Dict[int, User]:
        if not user_ids:
            return {}
        result = await db.execute(
            select(User).where(User.user_id.in_(set(user_ids)), User.is_deleted == False)  # noqa: E712
        )
        return {u.user_id: u for u in result.scalars().all()}

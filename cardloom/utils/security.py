from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt, JWTError

from cardloom.core.config import settings

ALGORITHM = settings.JWT_ALGORITHM


def _truncate_password(password: str) -> bytes:
    """
    bcrypt는 72바이트까지만 처리하므로, 초과하면 UTF-8 문자 경계를 고려하여 자름
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= 72:
        return password_bytes

    truncated = password
    while len(truncated.encode("utf-8")) > 72:
        truncated = truncated[:-1]
    return truncated.encode("utf-8")


def get_password_hash(password: str) -> str:
    """
    비밀번호를 bcrypt로 해시화합니다.
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(_truncate_password(password), salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_truncate_password(plain), hashed.encode("utf-8"))
    except ValueError:
        # 저장된 해시 형식이 잘못된 경우
        return False


def _create_token(claims: dict, secret: str, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def create_access_token(user_id: int, role: str) -> str:
    return _create_token(
        {"sub": str(user_id), "scope": "access", "role": role},
        settings.JWT_SECRET,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: int) -> str:
    return _create_token(
        {"sub": str(user_id), "scope": "refresh"},
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def create_reset_token(user_id: int, password_hash: str) -> str:
    # 비밀번호 해시 일부를 넣어 비밀번호 변경 후에는 재사용 불가
    return _create_token(
        {"sub": str(user_id), "scope": "reset", "pwd": password_hash[-10:]},
        settings.JWT_SECRET,
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str, refresh: bool = False) -> Optional[Dict[str, Any]]:
    secret = settings.JWT_REFRESH_SECRET if refresh else settings.JWT_SECRET
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None


def subject_user_id(payload: Dict[str, Any]) -> Optional[int]:
    """토큰 payload의 sub를 사용자 ID로 변환 (형식 오류 시 None)"""
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub.isdigit():
        return None
    return int(sub)

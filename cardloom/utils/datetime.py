"""
DateTime Utility Module
UTC 타임존 처리를 위한 유틸리티 함수들

DB에는 UTC 기준으로 저장합니다. SQLite처럼 타임존 정보를 보존하지 않는
드라이버에서 읽어온 naive datetime은 UTC로 간주합니다.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """
    UTC 타임존이 포함된 현재 시간을 반환

    Example:
        >>> now = utc_now()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def ensure_utc(dt: datetime) -> datetime:
    """
    datetime을 UTC 타임존으로 변환
    naive datetime인 경우 UTC로 간주하여 타임존 추가

    Example:
        >>> ensure_utc(datetime(2025, 1, 1, 12, 0, 0)).tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        logger.debug(f"Converting {dt.tzinfo} to UTC: {dt}")
        return dt.astimezone(timezone.utc)
    return dt


def optional_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    return ensure_utc(dt)


__all__ = [
    "utc_now",
    "utc_today",
    "ensure_utc",
    "optional_utc",
]

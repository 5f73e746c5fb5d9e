from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy.types import TIMESTAMP, Boolean
from sqlalchemy import func, text
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict

from cardloom.utils.datetime import utc_now


class TCGGame(str, Enum):
    POKEMON = "pokemon"
    MTG = "mtg"
    YUGIOH = "yugioh"
    LORCANA = "lorcana"
    ONE_PIECE = "one_piece"


class BaseModel(SQLModel):
    """
    모든 테이블에 공통으로 포함되는 기본 필드:
    - is_deleted: 소프트 삭제 여부
    - created_at: 생성 시각 (UTC)
    - updated_at: 수정 시각 (UTC)
    """
    __abstract__ = True  # 이 클래스로 테이블이 만들어지지 않도록

    model_config = ConfigDict(from_attributes=True)

    is_deleted: bool = Field(
        default=False,
        sa_type=Boolean,
        sa_column_kwargs={
            "nullable": False,
            "server_default": text("false"),
            "comment": "삭제 여부 (soft delete)",
        },
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=TIMESTAMP(timezone=True),
        sa_column_kwargs={
            "nullable": False,
            "server_default": func.now(),
            "comment": "레코드 생성일시 (UTC)",
        },
    )

    updated_at: Optional[datetime] = Field(
        default_factory=utc_now,
        sa_type=TIMESTAMP(timezone=True),
        sa_column_kwargs={
            "nullable": True,
            "server_default": func.now(),
            "onupdate": utc_now,
            "comment": "레코드 수정일시 (UTC)",
        },
    )

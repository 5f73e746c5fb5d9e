import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlmodel import SQLModel

from cardloom.core.config import settings
import cardloom.models  # noqa: F401  (테이블 메타데이터 등록)

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.SQL_ECHO,  # ORM 쿼리 로깅
)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def get_async_session_context():
    """비동기 DB 세션 컨텍스트 매니저"""
    async with async_session() as session:
        yield session


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """비동기 DB 세션 생성 - FastAPI Dependency Injection용"""
    session = async_session()
    try:
        yield session
    finally:
        await session.close()


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database models synchronized")

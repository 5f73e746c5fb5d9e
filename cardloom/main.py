"""
Main.py works as a main function for the application
Api app starts from here
"""

from contextlib import asynccontextmanager
from logging import getLogger
from logging.config import dictConfig

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardloom.core.config import settings
from cardloom.core.exceptions import setup_exception_handlers
from cardloom.database import get_async_session_context, init_db
from cardloom.routers import (auth_router, cards_router, collection_router,
                              decks_router, events_router, marketplace_router,
                              notifications_router, social_router, users_router,
                              watchlist_router)
from cardloom.utils.datetime import utc_now
from cardloom.utils.logger import cardloom_logger
from cardloom.utils.seed_data import init_seed_data

# ----------------------------------------------------------------------
# 로거 설정
# ----------------------------------------------------------------------
dictConfig(cardloom_logger)
logger = getLogger("cardloom.main")


# ----------------------------------------------------------------------
# Lifespan: 앱 시작 시 DB 초기화 및 시딩
# ----------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # 스키마 동기화 (create_all)
    await init_db()

    if settings.SEED_DATA:
        async with get_async_session_context() as session:
            try:
                await init_seed_data(session)
            except Exception as e:
                logger.error(f"데이터 시딩 중 오류 발생: {e}")

    logger.info(f"Cardloom API 시작 (phase={settings.DEPLOY_PHASE})")
    yield
    logger.info("Cardloom API 종료")


# ----------------------------------------------------------------------
# FastAPI 애플리케이션 생성
# ----------------------------------------------------------------------
app = FastAPI(
    title="Cardloom API",
    description="FastAPI 기반 TCG 마켓플레이스 백엔드 API",
    version="1.0.0",
    docs_url="/api/docs" if settings.docs_enabled else None,
    redoc_url=None,
    openapi_url="/api/openapi.json" if settings.docs_enabled else None,
    lifespan=lifespan,
)

# ----------------------------------------------------------------------
# 예외 핸들러
# ----------------------------------------------------------------------
setup_exception_handlers(app)

# ----------------------------------------------------------------------
# CORS 설정
# ----------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------------------------------------------------------
# 라우터 등록
# ----------------------------------------------------------------------
app.include_router(auth_router)  # 인증 (JWT)
app.include_router(users_router)  # 사용자 프로필
app.include_router(cards_router)  # 카드 카탈로그
app.include_router(collection_router)  # 보유 카드
app.include_router(watchlist_router)  # 관심 카드
app.include_router(marketplace_router)  # 판매 / 제안 / 거래
app.include_router(decks_router)  # 덱 빌더
app.include_router(social_router)  # 팔로우 / 피드 / 메시지
app.include_router(events_router)  # 오프라인 이벤트
app.include_router(notifications_router)  # 알림


# ----------------------------------------------------------------------
# 기본 라우트
# ----------------------------------------------------------------------
@app.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": utc_now().isoformat(),
        "environment": settings.DEPLOY_PHASE,
    }

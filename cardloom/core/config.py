# cardloom/core/config.py
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEPLOY_PHASE: str = "local"
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent

    # 개별 DB 항목 (DATABASE_URL이 없을 때 조합)
    DB_USER: str = "cardloom_user"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "cardloom"
    DATABASE_URL: str = ""
    SQL_ECHO: bool = False

    JWT_SECRET: str = "change-me-please"
    JWT_REFRESH_SECRET: str = "change-me-too"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    RESET_TOKEN_EXPIRE_MINUTES: int = 30

    CORS_ORIGINS: List[str] = [
        "http://localhost:8081",
        "http://localhost:3000",
        "http://localhost:19006",
    ]

    SEED_DATA: bool = True

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def docs_enabled(self) -> bool:
        return self.DEPLOY_PHASE in ("dev", "local")


settings = Settings()

"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./agency_cms.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = ""  # 비어 있으면 파일 로그를 남기지 않는다.

    # Content versioning
    VERSION_WRITE_RETRIES: int = 3
    VERSION_RETRY_BACKOFF_SECONDS: float = 0.05
    VERSION_HISTORY_PAGE_SIZE: int = 50

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()

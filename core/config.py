from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Quiz Settings
    QUIZ_STORAGE_NAMESPACE: str = Field("quiz", description="Prefix for persisted session keys (<namespace>:<key>)")
    QUESTIONS_PER_TAG: int = Field(1, description="Questions sampled per configured tag")

    # Redis
    REDIS_URL: str = Field("redis://localhost:6379/0")
    SNAPSHOT_TTL_SECONDS: int = 0  # 0 = keep forever

    # Database (optional SQL-backed store)
    DATABASE_URL: Optional[str] = Field(None, description="Async SQLAlchemy connection string (postgresql+asyncpg://...)")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Environment
    ENV: str = "production"  # development, staging, production
    DEBUG: bool = False

settings = Settings()

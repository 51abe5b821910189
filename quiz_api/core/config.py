"""
Application configuration loaded from the environment and `.env`.
"""
from typing import List, Optional
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore")

    # ============= Application Settings =============
    APP_NAME: str = "Quiz API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development")
    API_V1_PREFIX: str = "/v1"
    CORS_ORIGINS: List[str] = ["*"]

    # ============= Database Settings =============
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "quiz"
    POSTGRES_PASSWORD: str = "quiz"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "quiz"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_ECHO: bool = False

    # ============= Queue Settings =============
    REDIS_URL: str = "redis://localhost:6379/0"
    RQ_QUEUE: str = "maintenance"

    # ============= Session Settings =============
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_TTL_DAYS: int = 7
    SESSION_RETENTION_DAYS: int = 30
    SESSION_SWEEP_INTERVAL_SECONDS: int = 6 * 3600
    BCRYPT_ROUNDS: int = 12

    # ============= Logging Settings =============
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text

    def database_url(self) -> str:
        """Explicit DATABASE_URL, or one assembled from the POSTGRES_* parts."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

settings = get_settings()

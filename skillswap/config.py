from pydantic_settings import BaseSettings
from functools import lru_cache
import os

class Settings(BaseSettings):
    # API Keys
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"

    # Test Mode - canned provider responses, no network calls
    test_mode: bool = False

    # Database - hosted environments provide DATABASE_URL, fallback to SQLite for local
    database_url: str = None

    # App Settings
    app_name: str = "SkillSwap"
    app_version: str = "1.0.0"
    debug: bool = False

    # API Settings
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "8000"))
    allowed_origins: str = "http://localhost:3000"

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    rate_limit_enabled: bool = True

    # Provider gateway
    provider_timeout_seconds: float = 30.0
    provider_max_concurrent: int = 5
    provider_failure_threshold: int = 5
    provider_recovery_seconds: float = 30.0

    # Suggestions
    suggestion_ttl_days: int = 30
    suggestion_history_limit: int = 10
    mentors_per_skill: int = 3

    class Config:
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.database_url is None:
            self.database_url = "sqlite+aiosqlite:///./skillswap.db"
        # SQLAlchemy async needs postgresql+asyncpg://
        elif self.database_url.startswith("postgres://"):
            self.database_url = self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif self.database_url.startswith("postgresql://"):
            self.database_url = self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

@lru_cache()
def get_settings() -> Settings:
    return Settings()

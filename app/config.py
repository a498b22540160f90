from pydantic_settings import BaseSettings
from functools import lru_cache
import os

class Settings(BaseSettings):
    # Text generation (OpenAI). Extra keys come from OPENAI_API_KEY_1..N, see credential_pool
    openai_api_key: str = ""
    openai_api_keys: str = ""  # Comma-separated list
    ai_max_retries: int = 3
    ai_preferred_models: str = "gpt-4.1-mini,gpt-4o-mini,gpt-4.1,gpt-4o"
    ai_fallback_models: str = "gpt-4.1-mini,gpt-4o-mini,gpt-4o"

    # Database - DATABASE_URL wins, fallback to SQLite for local
    database_url: str = None

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24 * 7

    # App Settings
    app_name: str = "SkillGap"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    seed_job_roles: bool = True
    allowed_origins: str = "http://localhost:3000"
    rate_limit_enabled: bool = True

    # API Settings
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "8000"))

    class Config:
        env_file = ".env"
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.database_url is None:
            self.database_url = "sqlite+aiosqlite:///./skillgap.db"
        # Hosted Postgres hands out postgres:// URLs, SQLAlchemy async needs postgresql+asyncpg://
        if self.database_url.startswith("postgres://"):
            self.database_url = self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif self.database_url.startswith("postgresql://"):
            self.database_url = self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    @property
    def preferred_models(self) -> list[str]:
        return [m.strip() for m in self.ai_preferred_models.split(",") if m.strip()]

    @property
    def fallback_models(self) -> list[str]:
        return [m.strip() for m in self.ai_fallback_models.split(",") if m.strip()]

@lru_cache()
def get_settings() -> Settings:
    return Settings()

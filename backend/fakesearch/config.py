import logging
from pydantic_settings import BaseSettings
from pydantic import model_validator, ConfigDict
from functools import lru_cache

logger = logging.getLogger(__name__)

APP_NAME = "Fake Search Engine"
DISTRIBUTION_NAME = "fake-search-engine"


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment: "development" or "production"
    environment: str = "development"

    database_url: str = "postgresql+asyncpg://localhost/fake_search"

    @model_validator(mode="before")
    @classmethod
    def _fix_database_url_for_asyncpg(cls, values: dict) -> dict:
        """Hosted Postgres gives postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if not isinstance(values, dict):
            return values
        url = values.get("database_url") or ""
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            values["database_url"] = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return values

    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Generative-text provider for ad copy ("provider:model"; empty = first configured key)
    ai_model_id: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    ai_timeout_seconds: float = 15.0

    # Google Custom Search JSON API for organic results
    google_api_key: str = ""
    google_search_engine_id: str = ""
    search_timeout_seconds: float = 15.0
    search_results_per_query: int = 10

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":
        """Warn about development-only settings leaking into production."""
        if self.is_production:
            if not self.database_url or "localhost" in self.database_url:
                logger.warning("DATABASE_URL appears to point at localhost in production.")
            if self.database_url.startswith("sqlite"):
                logger.warning("DATABASE_URL uses SQLite in production; use PostgreSQL instead.")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def search_configured(self) -> bool:
        return bool(self.google_api_key and self.google_search_engine_id)

    @property
    def ai_configured(self) -> bool:
        return bool(self.openai_api_key or self.anthropic_api_key)

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins or ["http://localhost:3000", "http://localhost:5173"]


@lru_cache
def get_settings() -> Settings:
    return Settings()

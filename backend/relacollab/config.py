from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field
from functools import lru_cache
from typing import List
from pathlib import Path

# Get the path to the .env file (in project root, one level up from backend)
ENV_FILE_PATH = Path(__file__).resolve().parent.parent.parent / ".env"


def needs_ssl(url: str) -> bool:
    """Check whether the raw database URL asks for an SSL connection."""
    if "?" not in url:
        return False
    params = url.split("?", 1)[1].split("&")
    return any(p.startswith("sslmode=require") or p.startswith("ssl=require") for p in params)


def clean_database_url(url: str) -> str:
    """Clean database URL for asyncpg compatibility.

    Managed Postgres providers hand out URLs with sslmode=require, which asyncpg
    does not understand. SSL is configured on the engine instead (see
    core/database.py), so the libpq-only params are dropped here.
    """
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)

    if "?" in url:
        base_url, params = url.split("?", 1)
        param_pairs = params.split("&")
        supported_params = [
            p for p in param_pairs
            if not p.startswith("sslmode=")
            and not p.startswith("ssl=")
            and not p.startswith("channel_binding=")
        ]
        if supported_params:
            return base_url + "?" + "&".join(supported_params)
        return base_url
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - raw URL from environment
    database_url_raw: str = Field(
        default="postgresql://localhost:5432/relacollab",
        validation_alias="DATABASE_URL"
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """Return cleaned database URL for asyncpg."""
        return clean_database_url(self.database_url_raw)

    # OpenAI (optional AI match analysis)
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-2024-08-06", validation_alias="OPENAI_MODEL")
    openai_timeout_seconds: float = Field(default=60.0)

    # Visibility thresholds
    brand_match_min_score: int = Field(
        default=40,
        ge=0,
        le=100,
        validation_alias="BRAND_MATCH_MIN_SCORE"
    )
    opportunity_min_score: int = Field(
        default=50,
        ge=0,
        le=100,
        validation_alias="OPPORTUNITY_MIN_SCORE"
    )
    default_result_limit: int = Field(default=50, validation_alias="DEFAULT_RESULT_LIMIT")

    # App settings
    debug: bool = Field(default=False, validation_alias="DEBUG")
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:8080",
        validation_alias="CORS_ORIGINS"
    )
    # Vercel URL (auto-set by Vercel)
    vercel_url: str = Field(default="", validation_alias="VERCEL_URL")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string, plus Vercel URLs."""
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if self.vercel_url:
            origins.append(f"https://{self.vercel_url}")
        return origins

    @property
    def ai_analysis_enabled(self) -> bool:
        return bool(self.openai_api_key)

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

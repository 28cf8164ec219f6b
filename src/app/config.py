from __future__ import annotations

from typing import Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: AnyUrl
    SUPABASE_SERVICE_ROLE_KEY: str
    APP_ENV: str = "local"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
    )

    # Text generation
    GEMINI_API_KEY: str
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Image generation queue (checked when an image is requested)
    AI_HORDE_API_KEY: Optional[str] = None
    AI_HORDE_BASE_URL: str = "https://stablehorde.net/api/v2"
    HORDE_POLL_MAX_ATTEMPTS: int = Field(default=20, ge=1)
    HORDE_POLL_INTERVAL_SECONDS: float = Field(default=5.0, ge=0)

    # Media store
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # Entitlements
    FREE_USAGE_LIMIT: int = Field(default=10, ge=0)
    RESUME_MAX_BYTES: int = Field(default=5 * 1024 * 1024, ge=1)


settings = Settings()

# config.py
"""Configuration settings for the FutureLetter enhancement orchestrator.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

import structlog
from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = structlog.get_logger()


class FutureLetterSettings(BaseSettings):
    """Full configuration for the enhancement orchestrator."""

    # Hosted backend (serverless functions)
    SUPABASE_URL: str = "http://127.0.0.1:54321"
    SUPABASE_ANON_KEY: str = ""

    ENHANCE_LETTER_FUNCTION: str = "enhance-letter-complete"
    ENHANCE_FIELD_FUNCTION: str = "enhance-field"
    INFER_MILESTONES_FUNCTION: str = "infer-milestones"
    ENHANCEMENT_STATUS_FUNCTION: str = "enhancement-status"

    # Gateway call settings
    HTTPX_TIMEOUT: float = 60.0
    # 1 means a single attempt; transient failures are surfaced to the user
    ENHANCEMENT_RETRY_ATTEMPTS: int = Field(1, ge=1)
    ENHANCEMENT_RETRY_DELAY_SECONDS: float = 2.0

    # Caching
    ENHANCEMENT_CACHE_TTL_SECONDS: float = 3600.0

    # UX pacing for progressive application (0 disables)
    APPLY_FIELD_DELAY_SECONDS: float = 0.3
    APPLY_MILESTONES_DELAY_SECONDS: float = 0.5

    # Logging & UI
    LOG_LEVEL_STR: str = Field("INFO", alias="FUTURELETTER_LOG_LEVEL")
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str | None = None
    ENABLE_RICH_LOGGING: bool = True

    @model_validator(mode="after")
    def normalize_backend_settings(self) -> FutureLetterSettings:
        self.SUPABASE_URL = self.SUPABASE_URL.rstrip("/")
        if not self.SUPABASE_ANON_KEY:
            logger.warning(
                "SUPABASE_ANON_KEY is empty; enhancement requests will be sent unauthenticated.",
                supabase_url=self.SUPABASE_URL,
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", populate_by_name=True
    )


settings = FutureLetterSettings()

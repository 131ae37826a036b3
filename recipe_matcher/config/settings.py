# recipe_matcher/config/settings.py
"""
Application configuration using pydantic-settings (pydantic v2 style).

This centralizes environment-driven configuration. Prefer reading values
from environment variables; do not rely on os.getenv inline defaults which
can silently hide missing configuration.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application configuration loaded from environment.

    Relevant environment variables:
      - SUPABASE_URL
      - SUPABASE_SERVICE_ROLE_KEY
      - RECIPES_TABLE / PANTRY_TABLE / MATCHES_TABLE / INGREDIENTS_TABLE
      - DEFAULT_MATCH_LIMIT
      - SCAN_PAGE_SIZE
      - PARALLEL_SCORING_THRESHOLD / SCORING_CHUNK_SIZE
      - MATCH_RECORD_CONCURRENCY
      - HEALTH_CHECK_TIMEOUT / FAIL_ON_DB_STARTUP
      - LOG_LEVEL
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # Tables
    recipes_table: str = "recipe_items"
    pantry_table: str = "pantry_items"
    matches_table: str = "matches"
    ingredients_table: str = "ingredients"

    # Matching
    default_match_limit: int = Field(default=20, ge=1)
    scan_page_size: int = Field(default=1000, ge=1)
    parallel_scoring_threshold: int = Field(default=200, ge=1)
    scoring_chunk_size: int = Field(default=100, ge=1)
    match_record_concurrency: int = Field(default=8, ge=1)

    # Runtime
    health_check_timeout: float = 5.0
    fail_on_db_startup: bool = False
    log_level: str = "INFO"

    # --- validators / post-init checks ---
    @field_validator("supabase_url", "supabase_service_role_key")
    @classmethod
    def maybe_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    def model_post_init(self, __context) -> None:  # pydantic v2 hooks
        """
        Light-weight notice that runs after model is constructed.
        Uses logging (not print) so messages show up in server logs.
        """
        if not self.supabase_url or not self.supabase_service_role_key:
            logger.warning(
                "Supabase credentials are not configured. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to enable DB features."
            )


# single exporter
settings = Settings()

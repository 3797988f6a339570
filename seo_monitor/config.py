"""Configuration management using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL"
    )
    log_file: Optional[str] = Field(
        default=None,
        alias="LOG_FILE"
    )

    # Upstream APIs
    pagespeed_api_key: Optional[str] = Field(
        default=None,
        alias="PAGESPEED_API_KEY"
    )
    pagespeed_timeout_seconds: float = Field(
        default=60.0,
        alias="PAGESPEED_TIMEOUT_SECONDS"
    )

    # HTML fetching
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; SEOMonitorBot/1.0)",
        alias="USER_AGENT"
    )
    html_fetch_timeout_seconds: float = Field(
        default=10.0,
        alias="HTML_FETCH_TIMEOUT_SECONDS"
    )
    html_max_bytes: int = Field(
        default=500 * 1024,
        alias="HTML_MAX_BYTES"
    )

    # Public audit rate limiting
    public_audit_rate_limit: int = Field(
        default=5,
        alias="PUBLIC_AUDIT_RATE_LIMIT"
    )
    public_audit_rate_window_seconds: int = Field(
        default=3600,
        alias="PUBLIC_AUDIT_RATE_WINDOW_SECONDS"
    )
    rate_limit_sweep_seconds: int = Field(
        default=600,
        alias="RATE_LIMIT_SWEEP_SECONDS"
    )

    # Audits and alerts
    audit_top_recommendations: int = Field(
        default=3,
        alias="AUDIT_TOP_RECOMMENDATIONS"
    )
    alert_snapshot_offset: int = Field(
        default=28,
        alias="ALERT_SNAPSHOT_OFFSET"
    )
    sync_max_attempts: int = Field(
        default=3,
        alias="SYNC_MAX_ATTEMPTS"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()

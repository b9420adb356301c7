"""
Configuration settings for the review service.

Environment variables:
    WIKIREVIEW_API_URL            MediaWiki api.php endpoint
    WIKIREVIEW_SERVER_NAME        Host name used for XTools lookups
    WIKIREVIEW_USER_AGENT         User-Agent sent with every request
    WIKIREVIEW_REQUEST_TIMEOUT_S  HTTP timeout in seconds
    WIKIREVIEW_REFRESH_DELAY_S    Delay before the page refresh after a write
    WIKIREVIEW_XTOOLS_BASE_URL    XTools root URL
    WIKIREVIEW_EDIT_SUMMARY       Edit summary for appended reviews (localized default when unset)
    WIKIREVIEW_COOKIE             Session cookie supplied by the host
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Review service settings."""

    model_config = SettingsConfigDict(
        env_prefix="WIKIREVIEW_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    api_url: str = "https://zh.wikipedia.org/w/api.php"
    server_name: str = "zh.wikipedia.org"
    user_agent: str = "wikireview/0.1 (review composer)"
    request_timeout_s: float = 30.0
    refresh_delay_s: float = 2.0
    xtools_base_url: str = "https://xtools.wmcloud.org"
    edit_summary: str | None = None
    # Authentication is the host's business; we only forward its cookie.
    cookie: str | None = None


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

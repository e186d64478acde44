"""Configuration management for Inbox Triage.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SKIP_DOMAINS = ["gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "icloud.com"]


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the INBOX_TRIAGE_ prefix (e.g., INBOX_TRIAGE_BRIDGE_URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="INBOX_TRIAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Bridge Configuration
    bridge_url: str = Field(
        default="https://api.korabot.xyz",
        description="Base URL of the assistant bridge service",
    )
    bridge_secret: str = Field(
        default="",
        description="Bearer token sent to the bridge on every request",
    )
    bridge_timeout: float = Field(
        default=30.0,
        description="Timeout for bridge requests in seconds",
    )

    # Inbox Configuration
    account: str = Field(
        default="",
        description="Active account identity (email address) used for triage and replies",
    )
    inbox_query: str = Field(
        default="newer_than:14d",
        description="Search query used when refreshing the inbox",
    )
    inbox_max_results: int = Field(
        default=50,
        description="Maximum number of inbox items fetched per refresh",
    )
    similar_skip_domains: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_DOMAINS),
        description=(
            "Public webmail domains never offered as 'archive similar' batches; "
            "grouping by these domains is not useful."
        ),
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    max_retries: int = Field(
        default=3,
        description="Maximum number of retries for idempotent bridge reads",
    )
    retry_delay: float = Field(
        default=0.5,
        description="Initial delay between read retries in seconds",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()

"""
Application Settings
===================

Application settings and browser defaults using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Prerenderer settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="Route Prerenderer", description="Application name")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Browser Configuration
    headless: bool = Field(default=True, description="Run browser in headless mode")
    browser_channel: Optional[str] = Field(
        default=None, description="Chromium distribution channel, e.g. 'chrome'"
    )

    # Rendering Configuration
    max_concurrent_pages: int = Field(
        default=0, ge=0, description="Maximum simultaneous pages, 0 for unbounded"
    )
    element_poll_interval: int = Field(
        default=100, gt=0, description="Selector poll interval in milliseconds"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    def launch_defaults(self) -> dict:
        """Launch options applied when the caller does not set them."""
        defaults: dict = {"headless": self.headless}
        if self.browser_channel:
            defaults["channel"] = self.browser_channel
        return defaults

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="PRERENDER_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings

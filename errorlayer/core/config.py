"""
Application configuration.

Loads settings from environment variables and .env file.
The disclosure mode is derived here once and handed to the error
pipeline explicitly; nothing else reads the environment.
"""

from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict

BYTES_PER_MB = 1024 * 1024


class DisclosureMode(str, Enum):
    """How much diagnostic detail error responses may carry."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        environment: Deployment environment. Only "development" enables
            diagnostic detail in responses; any other value is treated
            as production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit applied per client address.
        max_request_size_bytes: Maximum allowed request body size.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "errorlayer"
    version: str = "0.1.0"
    environment: str = "production"
    log_level: str = "INFO"
    rate_limit_default: str = "120/minute"
    max_request_size_bytes: int = 20 * BYTES_PER_MB

    @property
    def disclosure_mode(self) -> DisclosureMode:
        if self.environment.strip().lower() == DisclosureMode.DEVELOPMENT.value:
            return DisclosureMode.DEVELOPMENT
        return DisclosureMode.PRODUCTION

    @property
    def debug(self) -> bool:
        return self.disclosure_mode is DisclosureMode.DEVELOPMENT


settings = Settings()

"""Application settings loaded from the environment."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for taskpilot.

    Values are read from environment variables (and an optional ``.env`` file).
    Credentials are never part of the settings: they travel with each request.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)

    PROJECT_NAME: str = "taskpilot"
    ENVIRONMENT: str = Field(default="local", description="local | dev | prd")
    LOCAL_DEVELOPMENT: bool = False
    LOG_LEVEL: str = "INFO"

    API_PREFIX: str = "/api/v1"

    ASANA_API_URL: str = "https://app.asana.com/api/1.0"
    ASANA_PAGE_SIZE: int = Field(default=100, gt=0, le=100)
    ASANA_HTTP_TIMEOUT: float = Field(default=30.0, gt=0)
    ASANA_USER_AGENT: Optional[str] = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("ASANA_API_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()

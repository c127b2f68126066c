"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Dict, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_UPLOAD_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/jpeg",
    "image/png",
]

DEFAULT_ROLE_LEVELS = {
    "viewer": 1,
    "editor": 2,
    "manager": 3,
    "admin": 4,
}


class SecuritySettings(BaseSettings):
    """Security layer settings loaded from environment variables.

    Every option can be overridden with a ``CATALOG_SECURITY_`` prefixed
    variable; list and dict options are read as JSON.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_SECURITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Tokens
    token_bytes: int = Field(default=32, ge=1)

    # Uploads
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    allowed_upload_types: List[str] = Field(default_factory=lambda: list(DEFAULT_UPLOAD_TYPES))

    # Role ordering (higher level = more privileged)
    role_levels: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_ROLE_LEVELS))

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def max_upload_megabytes(self) -> int:
        """Upload ceiling rounded down to whole MiB, for messages."""
        return self.max_upload_bytes // (1024 * 1024)


@lru_cache
def get_settings() -> SecuritySettings:
    """Get cached settings instance."""
    return SecuritySettings()


# Global settings instance
settings = get_settings()

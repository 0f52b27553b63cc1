"""Client configuration using Pydantic Settings"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional
import os

from apns_push.push.constants import APNS_PRODUCTION_HOST, APNS_SANDBOX_HOST


class Settings(BaseSettings):
    """Settings loaded from environment variables"""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # Rotating file output in addition to stderr

    # APNS provider token
    APNS_TEAM_ID: Optional[str] = None
    APNS_KEY_ID: Optional[str] = None
    APNS_KEY_FILE: Optional[str] = None  # Path to the .p8 auth key
    APNS_SIGNING_KEY: Optional[str] = None  # PEM contents, takes precedence over APNS_KEY_FILE

    # APNS delivery
    APNS_DEFAULT_TOPIC: Optional[str] = None  # Usually the app bundle id
    APNS_USE_SANDBOX: bool = False
    APNS_HOST: Optional[str] = None  # Overrides APNS_USE_SANDBOX
    APNS_REQUEST_TIMEOUT: Optional[float] = None
    APNS_KEEP_ALIVE: bool = True

    @field_validator('LOG_LEVEL', mode='after')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return v

    @field_validator('APNS_SIGNING_KEY', mode='after')
    @classmethod
    def unescape_signing_key(cls, v: Optional[str]) -> Optional[str]:
        """Allow PEM keys stored on one line with literal \\n separators."""
        if v is not None and "\\n" in v:
            return v.replace("\\n", "\n")
        return v

    @property
    def apns_host(self) -> str:
        """Host to deliver to, honouring APNS_HOST then APNS_USE_SANDBOX."""
        if self.APNS_HOST:
            return self.APNS_HOST
        return APNS_SANDBOX_HOST if self.APNS_USE_SANDBOX else APNS_PRODUCTION_HOST

    @property
    def apns_ready(self) -> bool:
        """Check if APNS is configured well enough to sign tokens."""
        has_key = bool(self.APNS_SIGNING_KEY) or (
            self.APNS_KEY_FILE is not None and os.path.exists(self.APNS_KEY_FILE)
        )
        return bool(self.APNS_TEAM_ID) and bool(self.APNS_KEY_ID) and has_key

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()

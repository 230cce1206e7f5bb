from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings read from RETRYHTTP_* environment variables"""

    retries: int = Field(default=3, ge=0)
    timeout: float = Field(default=30.0, gt=0)
    retry_delay: float = Field(default=0.0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="RETRYHTTP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging settings read from LOG_LEVEL and LOG_HANDLER"""

    log_level: str = "info"
    log_handler: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> ClientSettings:
    """Get client settings from the current environment"""
    return ClientSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings from the current environment"""
    return LoggingSettings()

"""Configuration management for the BeatSaver cacher with safe test defaults."""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment types."""
    TEST = "TEST"
    DEV = "DEV"
    PROD = "PROD"


class LogFormat(str, Enum):
    """Log renderer selection."""
    JSON = "json"
    TEXT = "text"
    STRUCTURED = "structured"


class AppSettings(BaseSettings):
    """Application settings with dotenv support.

    Environment variables can be set directly or via .env file.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    # ===================
    # Environment
    # ===================
    ENV: Environment = Field(
        default=Environment.TEST,
        description='Application environment: TEST, DEV, or PROD'
    )

    # ===================
    # Catalog client
    # ===================
    BEATSAVER_BASE_URL: str = Field(
        default='https://api.beatsaver.com',
        description='BeatSaver API base URL'
    )
    TIMEOUT_S: float = Field(default=15.0, description='HTTP request timeout in seconds')
    USER_AGENT: str = Field(
        default='beatsaver-cacher/0.1 (+https://github.com/beatsaver-cacher)',
        description='User agent for catalog requests'
    )

    # ===================
    # Harvest loop
    # ===================
    PAGE_SIZE: int = Field(default=100, ge=1, description='Maps requested per catalog page')
    PAGE_DELAY_S: float = Field(
        default=0.1,
        ge=0.0,
        description='Pause between successful pages'
    )
    RETRY_BACKOFF_S: float = Field(
        default=3.0,
        ge=0.0,
        description='Fixed backoff after a transient catalog failure'
    )
    MAX_PARSE_FAILURES: int = Field(
        default=5,
        ge=1,
        description='Consecutive unparseable pages tolerated before the run is aborted'
    )

    # ===================
    # Output
    # ===================
    OUTPUT_PATH: Path = Field(
        default=Path('mapData.proto.gz'),
        description='Destination of the compressed snapshot'
    )

    # ===================
    # Logging
    # ===================
    LOG_LEVEL: str = Field(default='INFO', description='Logging level')
    LOG_FORMAT: Optional[LogFormat] = Field(
        default=None,
        description='Log format: json, text, or structured (json in PROD, text elsewhere when unset)'
    )

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator('ENV', mode='before')
    @classmethod
    def validate_env(cls, v) -> Environment:
        """Validate and normalize environment value."""
        if isinstance(v, Environment):
            return v
        if isinstance(v, str):
            v_upper = v.upper()
            if v_upper in ('TEST', 'TESTING'):
                return Environment.TEST
            elif v_upper in ('DEV', 'DEVELOPMENT', 'LOCAL'):
                return Environment.DEV
            elif v_upper in ('PROD', 'PRODUCTION'):
                return Environment.PROD
        raise ValueError(f"ENV must be TEST, DEV, or PROD (got: {v})")

    def is_test(self) -> bool:
        return self.ENV == Environment.TEST

    def is_prod(self) -> bool:
        return self.ENV == Environment.PROD

    def effective_log_format(self) -> LogFormat:
        """Configured log format, falling back to the environment default."""
        if self.LOG_FORMAT is not None:
            return self.LOG_FORMAT
        return LogFormat.JSON if self.is_prod() else LogFormat.TEXT


@lru_cache()
def get_settings() -> AppSettings:
    """Get cached application settings.

    Loads settings from:
    1. Environment variables
    2. .env file (if exists)
    3. Default values

    Returns:
        AppSettings: Cached settings instance
    """
    return AppSettings()

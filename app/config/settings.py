import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    The KPI procedures only exist in the PostgreSQL deployment. SQLite is only
    useful for local work on the code generator and role tables.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url.split('@')[-1]}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "netperf.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(
        f"Using SQLite database (LOCAL DEV ONLY): {db_url}\n"
        "KPI stored procedures are not available on SQLite. "
        "Set DATABASE_URL to the PostgreSQL connection string to query metrics."
    )
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str = Field(default="", validation_alias="LOG_FILE")
    auth_secret_key: str = Field(default="", validation_alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field(default="HS256", validation_alias="AUTH_ALGORITHM")
    query_cache_ttl_seconds: float = Field(
        default=300.0,
        validation_alias="QUERY_CACHE_TTL_SECONDS",
        description="Freshness window for cached KPI procedure results",
    )
    default_metrics_days: int = Field(
        default=30,
        validation_alias="DEFAULT_METRICS_DAYS",
        description="Default look-back window for KPI queries",
    )
    default_trend_days: int = Field(
        default=90,
        validation_alias="DEFAULT_TREND_DAYS",
        description="Default look-back window for performance trends",
    )
    db_connect_timeout: int = Field(default=10, validation_alias="DB_CONNECT_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("query_cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, value: float) -> float:
        if value < 0:
            logger.warning(f"QUERY_CACHE_TTL_SECONDS must be >= 0, got {value}. Caching disabled.")
            return 0.0
        return value

    @field_validator("auth_secret_key")
    @classmethod
    def validate_auth_secret(cls, value: str) -> str:
        """Warn when tokens cannot be verified.

        Role lookups behind /me will reject every request until the key is set.
        """
        if not value:
            logger.warning("AUTH_SECRET_KEY is not set. Bearer tokens cannot be verified.")
        return value


settings = Settings()

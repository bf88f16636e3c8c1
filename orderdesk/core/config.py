"""
Centralized configuration management with Pydantic Settings.
All environment variables are validated and typed.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "OrderDesk API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production|test)$",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/orders"
    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_echo: bool = False

    # CORS - stored as comma-separated string to avoid JSON parsing issues
    allowed_origins_str: str = Field(default="*", alias="ALLOWED_ORIGINS")

    @property
    def allowed_origins(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    # Observability
    sentry_dsn: Optional[str] = None
    log_level: str = "INFO"

    # Payment simulator
    payment_amount_limit: float = 10000
    payment_delay_min: float = Field(default=1.0, ge=0)
    payment_delay_max: float = Field(default=3.0, ge=0)
    credit_card_failure_rate: float = Field(default=0.10, ge=0, le=1)
    paypal_failure_rate: float = Field(default=0.05, ge=0, le=1)

    # Pagination
    default_page_size: int = Field(default=10, ge=1)

    # Orders
    default_currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

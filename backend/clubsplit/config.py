"""Application configuration using Pydantic BaseSettings."""

import logging
from decimal import Decimal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("clubsplit.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Deployment
    ENVIRONMENT: str = "development"

    # CORS Configuration
    # Comma-separated list of allowed origins, or "*" for all origins
    CORS_ORIGINS: str = ""

    # Settlement
    CURRENCY_SYMBOL: str = "£"
    SETTLEMENT_EPSILON: Decimal = Decimal("0.01")
    UNKNOWN_USER_NAME: str = "Unknown User"

    # Application Metadata
    APP_VERSION: str = "1.0.0"

    @field_validator("SETTLEMENT_EPSILON")
    @classmethod
    def validate_epsilon(cls, v: Decimal) -> Decimal:
        """Reject non-positive epsilon values; a zero threshold would emit dust transfers."""
        if v <= 0:
            raise ValueError("SETTLEMENT_EPSILON must be greater than 0")
        if v > Decimal("1"):
            logger.warning(
                "SETTLEMENT_EPSILON is %s; balances below this amount "
                "will never be settled.",
                v,
            )
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Return list of allowed CORS origins.

        If CORS_ORIGINS is empty, allows the local front-end dev servers
        (localhost:3000, localhost:5173) but returns empty in production.

        Set CORS_ORIGINS environment variable to a comma-separated list
        of allowed origins, or "*" for all origins.
        """
        if self.CORS_ORIGINS:
            if self.CORS_ORIGINS == "*":
                return ["*"]
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

        if self.is_production:
            logger.warning(
                "CORS_ORIGINS not configured in production. "
                "Set CORS_ORIGINS environment variable."
            )
            return []

        # Development defaults
        return [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]


# Global settings instance
settings = Settings()

"""
Configuration management for the Storefront backend.

Loads settings from .env via pydantic-settings.

Security notes:
    - validate_production_settings() enforces strict CORS in production
    - JWT secret and Braintree credentials are mandatory in production
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/storefront.db"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    app_version: str = "1.0.0"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "storefront-api"
    jwt_access_ttl_minutes: int = 7 * 24 * 60  # 7 days

    # ── Braintree ───────────────────────────────────────────────────
    braintree_environment: str = "sandbox"     # sandbox | production
    braintree_merchant_id: str = ""
    braintree_public_key: str = ""
    braintree_private_key: str = ""

    # ── Catalog ─────────────────────────────────────────────────────
    photo_max_bytes: int = 1_000_000  # 1 MB

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def braintree_configured(self) -> bool:
        return bool(
            self.braintree_merchant_id
            and self.braintree_public_key
            and self.braintree_private_key
        )

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. Raises ValueError in production when a
        setting would leave the service open or unable to take payments.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to sign access tokens for signed-in users."
                )
            if not self.braintree_configured:
                raise ValueError(
                    "BRAINTREE_MERCHANT_ID, BRAINTREE_PUBLIC_KEY and BRAINTREE_PRIVATE_KEY "
                    "must be set in production."
                )
            if self.braintree_environment != "production":
                raise ValueError("BRAINTREE_ENVIRONMENT must be 'production' in production.")
            logger.info("Production settings validated")
        else:
            warnings = []
            if not self.jwt_secret:
                warnings.append("JWT_SECRET is empty (sign-in will fail)")
            if not self.braintree_configured:
                warnings.append("Braintree credentials missing (checkout disabled)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(w)


# Global settings instance
settings = Settings()

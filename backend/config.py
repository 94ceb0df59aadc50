"""
Configuration management for the Order Funnel backend.

Loads settings from .env via pydantic-settings.

Notes:
    - FUNCTIONS_BASE_URL points at the backend remote functions
      (check-domain, paypal-settings, subscription-addons, create-invoice, ...)
    - validate_production_settings() enforces strict CORS and a configured
      functions endpoint in production
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/order_funnel.db"

    # ── Remote Functions ────────────────────────────────────────────
    functions_base_url: str = "http://localhost:54321/functions/v1"
    functions_api_key: str = ""
    functions_timeout_seconds: float = 15.0

    # Function names (overridable per deployment)
    domain_check_function: str = "check-domain"
    paypal_settings_function: str = "paypal-settings"
    midtrans_settings_function: str = "midtrans-settings"
    subscription_addons_function: str = "subscription-addons"
    create_invoice_function: str = "create-invoice"

    # ── Domain Suggestions ──────────────────────────────────────────
    domain_suffixes: str = ".com,.id,.co.id"
    domain_max_candidates: int = 10
    domain_debounce_ms: int = 450

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    default_language: str = "en"

    # ── Session (read-only JWT) ─────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "order-funnel"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080"

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
    def domain_suffix_list(self) -> List[str]:
        """Ordered domain suffixes; each is normalized to start with a dot."""
        suffixes = []
        for raw in self.domain_suffixes.split(","):
            suffix = raw.strip().lower()
            if not suffix:
                continue
            suffixes.append(suffix if suffix.startswith(".") else f".{suffix}")
        return suffixes

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if "localhost" in self.functions_base_url or "127.0.0.1" in self.functions_base_url:
                raise ValueError(
                    "FUNCTIONS_BASE_URL points at a local address in production. "
                    "Set the deployed functions endpoint."
                )
            if not self.functions_api_key:
                raise ValueError(
                    "FUNCTIONS_API_KEY must be set in production. "
                    "It authorizes calls to the backend remote functions."
                )
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            if not self.functions_api_key:
                warnings.append("FUNCTIONS_API_KEY is empty (unauthenticated function calls)")
            if not self.jwt_secret:
                warnings.append("JWT_SECRET is empty (session user ids will not be read)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()

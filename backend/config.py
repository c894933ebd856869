"""
Configuration management for the AlgoSender backend.

Loads settings from .env via pydantic-settings.

Notes:
    - Mnemonics are never part of settings; they arrive per request only
    - validate_production_settings() enforces strict CORS in production
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Algorand TestNet ────────────────────────────────────────────
    algorand_algod_address: str = "https://testnet-api.algonode.cloud"
    algorand_algod_token: str = ""
    algorand_indexer_url: str = "https://testnet-idx.algonode.cloud"
    algorand_network: str = "Algorand TestNet"
    algorand_request_timeout_seconds: float = 5.0  # per node/indexer call

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/algosender.db"

    # ── Confirmation Poller ─────────────────────────────────────────
    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 5
    send_waits_for_confirmation: bool = False

    # ── Transaction list refresh ────────────────────────────────────
    list_refresh_pending: bool = True
    list_refresh_limit: int = 5

    # ── Rate limits ─────────────────────────────────────────────────
    send_rate_limit: int = 10
    send_rate_window_seconds: int = 60

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

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
    def async_database_url(self) -> str:
        """Convert sqlite:///... → sqlite+aiosqlite:///... for the async driver."""
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.database_url

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
            if self.poll_max_attempts < 1:
                raise ValueError("POLL_MAX_ATTEMPTS must be at least 1.")
            logger.info("Production settings validated")
        else:
            warnings = []
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            if self.database_url.startswith("sqlite"):
                warnings.append("DATABASE_URL uses SQLite (single-process only)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()

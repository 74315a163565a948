"""
Gasless DAO Configuration

Settings for the forwarder, the voting ledger and the relayer, loaded from
environment variables prefixed with GASLESS_DAO_ (or a .env file).

SECURITY NOTE: The relayer private key should come from a secrets manager in
production. Loading it from the environment outside development emits a
SecurityWarning.
"""

import logging
import os
import warnings
from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ONE_ETHER = 10**18


class SecurityWarning(UserWarning):
    """Warning for security-related issues (insecure configurations, etc.)."""

    pass


class DAOSettings(BaseSettings):
    """
    Settings for the gasless DAO stack.

    All settings can be overridden via environment variables prefixed with
    GASLESS_DAO_. For example, GASLESS_DAO_CHAIN_ID sets chain_id.
    """

    model_config = SettingsConfigDict(
        env_prefix="GASLESS_DAO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ═══════════════════════════════════════════════════════════════
    # APPLICATION
    # ═══════════════════════════════════════════════════════════════
    app_env: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=False, description="Render logs as JSON")

    # ═══════════════════════════════════════════════════════════════
    # LEDGER / FORWARDER
    # ═══════════════════════════════════════════════════════════════
    chain_id: int = Field(default=31337, ge=1, description="Network id mixed into every digest")
    forwarder_name: str = Field(
        default="MinimalForwarder", min_length=1, description="EIP-712 domain name"
    )
    forwarder_version: str = Field(
        default="0.0.1", min_length=1, description="EIP-712 domain version"
    )
    minimum_voting_balance: int = Field(
        default=ONE_ETHER // 100,
        ge=0,
        description="Minimum contribution (wei) required to vote",
    )

    # ═══════════════════════════════════════════════════════════════
    # RELAYER
    # ═══════════════════════════════════════════════════════════════
    default_request_gas: int = Field(
        default=300_000, ge=21_000, description="Gas allowance for signed requests"
    )
    relay_gas_limit: int = Field(
        default=3_000_000, ge=21_000, description="Gas limit of the relayer transaction"
    )
    relayer_private_key: str | None = Field(
        default=None,
        description="Private key of the relayer account (EVM hex). "
        "SECURITY: Use secrets manager in production!",
    )

    # ═══════════════════════════════════════════════════════════════
    # SEQUENCE STORE (Optional Redis)
    # ═══════════════════════════════════════════════════════════════
    redis_url: str | None = Field(default=None, description="Redis URL for sequence counters")
    redis_password: str | None = Field(default=None, description="Redis password")

    @field_validator("relayer_private_key")
    @classmethod
    def validate_private_key_security(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Warn about private keys loaded from the environment outside development."""
        if v is None:
            return v
        environment = os.environ.get("GASLESS_DAO_APP_ENV", "development")
        if environment == "production":
            logger.critical(
                f"SECURITY CRITICAL: {info.field_name} loaded from environment variable "
                "in production! Use a secrets manager."
            )
            warnings.warn(
                f"Private key '{info.field_name}' loaded from environment variable "
                "in production. This is insecure! Use a secrets manager.",
                SecurityWarning,
                stacklevel=2,
            )
        elif environment not in ("development", "testing"):
            logger.warning(
                f"Private key '{info.field_name}' loaded from environment variable. "
                "Consider using a secrets manager in non-development environments."
            )
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


# Singleton instance for global access
_settings: DAOSettings | None = None


def get_settings() -> DAOSettings:
    """Get the global settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = DAOSettings()
    return _settings


def configure_settings(settings: DAOSettings) -> None:
    """
    Set a custom settings instance.

    Useful for testing or when configuration comes from a non-standard source.
    """
    global _settings
    _settings = settings

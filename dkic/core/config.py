"""
Configuration Management

Centralized configuration using Pydantic Settings.
All settings loaded from DKIC_* environment variables with sensible defaults.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    """Signer settings loaded from environment variables."""

    # Ignore extra environment variables that aren't defined in the model
    model_config = ConfigDict(
        env_prefix="DKIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================================
    # Signing Key
    # ============================================================
    private_key: Optional[str] = Field(
        None,
        description="PEM-encoded Ed25519 private key, used when no --private-key file is given"
    )

    # ============================================================
    # DNS Publication
    # ============================================================
    domain: Optional[str] = Field(
        None,
        description="Domain the public key is published under (_dkic.<domain>); placeholder if unset"
    )
    doh_url: str = Field(
        "https://cloudflare-dns.com/dns-query",
        description="DNS-over-HTTPS JSON endpoint used for public key lookup"
    )
    doh_timeout: float = Field(10.0, description="DNS-over-HTTPS request timeout in seconds")

    # ============================================================
    # Logging Configuration
    # ============================================================
    log_level: str = Field("INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        "%(asctime)s - %(levelname)s - %(message)s",
        description="Log format string"
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get signer settings (singleton).

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings

"""
Quillpost Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py (app factory) and the credential validator.
When:  Loaded once at module import time; validated before app starts.

Scope:
    Only values that legitimately differ between deployments live here
    (secrets, log level, default tenant). The request-pipeline policy
    tables (excluded paths, reserved subdomains, feature flags) are fixed
    constants in quillpost/policy.py and are NOT environment-configurable.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEV_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST override JWT_SECRET_KEY and CORS_ORIGINS.
    """

    # ── Authentication ────────────────────────────────────────────────────
    # What: Shared secret and algorithm used to verify bearer tokens
    # Issuance happens elsewhere; this service only verifies.
    jwt_secret_key: str = Field(
        default=DEV_JWT_SECRET,
        description="Secret used to verify HS* signed access tokens",
    )
    jwt_algorithm: str = Field(default="HS256")

    # What: Clock skew tolerated when checking exp/nbf claims
    jwt_leeway_seconds: int = Field(default=0, ge=0, le=300)

    # ── Multi-tenancy ─────────────────────────────────────────────────────
    # What: Tenant used when neither the x-tenant-id header nor the
    #       hostname identifies one. Empty/unset means "no fallback".
    default_tenant_id: Optional[str] = Field(default=None)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    # Request bodies are only logged at DEBUG.
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("default_tenant_id")
    @classmethod
    def blank_tenant_is_none(cls, v: Optional[str]) -> Optional[str]:
        """DEFAULT_TENANT_ID="" behaves the same as leaving it unset."""
        return v or None

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # JWT_SECRET_KEY and jwt_secret_key both work
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Checks each required field and raises ValueError with guidance.
        """
        errors = []
        if not self.jwt_secret_key or self.jwt_secret_key == DEV_JWT_SECRET:
            errors.append(
                "JWT_SECRET_KEY is not set. "
                "Use the same secret as the service that issues access tokens."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()

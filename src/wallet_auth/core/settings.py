"""Application settings and configuration.

This module defines all configuration options for the wallet authentication
service. Settings are loaded from environment variables (or a `.env` file).
The signing secret has no default: a process started without `JWT_SECRET`
fails at import time instead of silently signing tokens with a known key.
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wallet_auth.services.tokens import parse_ttl

# Value shipped in the sample configuration; accepted only in debug mode.
WELL_KNOWN_DEV_SECRET = "your-secret-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Wallet Auth", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    port: int = Field(default=3001, alias="PORT")

    # Session tokens
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_expires_in: str = Field(default="7d", alias="JWT_EXPIRES_IN")
    require_token_ttl: bool = Field(default=True, alias="REQUIRE_TOKEN_TTL")

    # Challenge rendering and lifetime
    domain: str = Field(default="localhost:3000", alias="DOMAIN")
    challenge_ttl_seconds: int = Field(default=300, gt=0, alias="CHALLENGE_TTL_SECONDS")

    # Pending challenge storage
    nonce_store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        alias="NONCE_STORE_BACKEND",
    )
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _check_security_defaults(self) -> "Settings":
        if not self.jwt_secret:
            raise ValueError("JWT_SECRET must not be empty")
        if self.jwt_secret == WELL_KNOWN_DEV_SECRET and not self.debug:
            raise ValueError("JWT_SECRET is set to the sample value; configure a real secret")
        if self.require_token_ttl and parse_ttl(self.jwt_expires_in) is None:
            raise ValueError(
                f"JWT_EXPIRES_IN={self.jwt_expires_in!r} is not a duration like '15m' or '7d'"
            )
        return self

    @property
    def challenge_ttl_ms(self) -> int:
        """Challenge lifetime in milliseconds, the unit used for challenge timestamps."""
        return self.challenge_ttl_seconds * 1000


settings = Settings()  # type: ignore[call-arg]

"""Liveness and public configuration endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from wallet_auth.core.settings import settings
from wallet_auth.schemas.auth import HealthResponse
from wallet_auth.utils.time import now_ms

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint to verify the service is running."""
    return HealthResponse(status="ok", timestamp=now_ms())


@router.get("/system/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes the signing secret and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "auth": {
            "domain": settings.domain,
            "challenge_ttl_seconds": settings.challenge_ttl_seconds,
            "token_expires_in": settings.jwt_expires_in,
            "nonce_store_backend": settings.nonce_store_backend,
        },
    }

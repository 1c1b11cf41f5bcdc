# src/wallet_auth/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import (
    ChallengeResponse,
    ErrorResponse,
    HealthResponse,
    NonceRequest,
    SessionResponse,
    VerifyRequest,
    VerifyResponse,
)

__all__ = [
    "NonceRequest", "ChallengeResponse",
    "VerifyRequest", "VerifyResponse",
    "SessionResponse", "HealthResponse",
    "ErrorResponse",
]

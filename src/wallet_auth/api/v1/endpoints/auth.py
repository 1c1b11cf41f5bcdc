# src/wallet_auth/api/v1/endpoints/auth.py
"""Wallet sign-in endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from wallet_auth.api.v1.dependencies import AuthProtocolDep, CurrentAddressDep
from wallet_auth.schemas.auth import (
    ChallengeResponse,
    ErrorResponse,
    NonceRequest,
    SessionResponse,
    VerifyRequest,
    VerifyResponse,
)

router = APIRouter(prefix="/auth", tags=["authentication"])

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.post(
    "/nonce",
    summary="Issue a sign-in challenge for a wallet address",
    response_model=ChallengeResponse,
    responses=_ERROR_RESPONSES,
)
async def request_nonce(payload: NonceRequest, protocol: AuthProtocolDep) -> ChallengeResponse:
    """Return the message the wallet must sign, replacing any pending challenge."""
    grant = protocol.request_challenge(payload.address)
    return ChallengeResponse(
        message=grant.message,
        nonce=grant.nonce,
        timestamp=grant.issued_at,
        expires_at=grant.expires_at,
    )


@router.post(
    "/verify",
    summary="Exchange a signed challenge for a session token",
    response_model=VerifyResponse,
    responses=_ERROR_RESPONSES,
)
async def verify_signature(payload: VerifyRequest, protocol: AuthProtocolDep) -> VerifyResponse:
    """Check the signature over the issued message and return a bearer token."""
    result = await protocol.submit_proof(payload.address, payload.signature, payload.message)
    return VerifyResponse(
        success=True,
        token=result.token,
        address=result.identity,
        expires_in=result.expires_in,
    )


@router.get(
    "/me",
    summary="Resolve the wallet address behind a bearer token",
    response_model=SessionResponse,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
)
async def read_me(address: CurrentAddressDep) -> SessionResponse:
    return SessionResponse(address=address, message="Authenticated")

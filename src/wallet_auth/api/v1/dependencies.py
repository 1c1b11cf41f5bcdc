"""Shared API dependencies for authentication."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from wallet_auth.core.errors import TokenErrorKind, Unauthorized
from wallet_auth.core.settings import settings
from wallet_auth.services.auth_protocol import AuthProtocol
from wallet_auth.services.nonce_store import build_nonce_store
from wallet_auth.services.tokens import TokenIssuer

# Bearer scheme; missing credentials are reported by get_current_address
bearer_scheme = HTTPBearer(auto_error=False)

_protocol: AuthProtocol | None = None


def build_auth_protocol() -> AuthProtocol:
    """Construct the handshake service from process settings."""
    return AuthProtocol(
        store=build_nonce_store(settings.nonce_store_backend, settings.redis_url),
        tokens=TokenIssuer(settings.jwt_secret, require_ttl=settings.require_token_ttl),
        domain=settings.domain,
        token_ttl=settings.jwt_expires_in,
        challenge_ttl_ms=settings.challenge_ttl_ms,
    )


def get_auth_protocol() -> AuthProtocol:
    """Return the process-wide handshake service.

    The in-memory nonce store only works if every request sees the same
    instance, so it is built once and reused.
    """
    global _protocol
    if _protocol is None:
        _protocol = build_auth_protocol()
    return _protocol


AuthProtocolDep = Annotated[AuthProtocol, Depends(get_auth_protocol)]


def get_current_address(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    protocol: AuthProtocolDep,
) -> str:
    """Get the wallet address from the bearer session token.

    Raises:
        Unauthorized: If the header is missing or the token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized(TokenErrorKind.MALFORMED)
    return protocol.validate_session(credentials.credentials)


# Type alias for current address dependency
CurrentAddressDep = Annotated[str, Depends(get_current_address)]

"""Two-phase wallet sign-in handshake and session checks.

``request_challenge`` stores a fresh nonce for an address and returns the
message to sign. ``submit_proof`` checks the signed message against the
pending challenge and, only after the signature verifies, consumes the nonce
and issues a session token. ``validate_session`` turns a bearer token back
into the address it was issued for.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass

from wallet_auth.core.errors import (
    InternalError,
    ProtocolError,
    ProtocolErrorKind,
    TokenError,
    TokenErrorKind,
    Unauthorized,
    ValidationError,
    ValidationErrorKind,
)
from wallet_auth.core.logging import short_address
from wallet_auth.core.security import (
    EthereumSignatureVerifier,
    SignatureVerifier,
    is_valid_address,
    is_valid_signature,
    normalize_address,
)
from wallet_auth.services.challenge import (
    DEFAULT_CHALLENGE_TTL_MS,
    Challenge,
    extract_nonce,
    new_challenge,
    render_challenge_message,
)
from wallet_auth.services.nonce_store import NonceStore
from wallet_auth.services.tokens import TokenIssuer
from wallet_auth.utils.time import now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChallengeGrant:
    """What the client needs in order to sign in."""

    message: str
    nonce: str
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class ProofResult:
    """Outcome of a successful proof submission."""

    token: str
    identity: str
    expires_in: str


class AuthProtocol:
    """Orchestrates nonce storage, message rendering, signature checks and tokens."""

    def __init__(
        self,
        store: NonceStore,
        tokens: TokenIssuer,
        *,
        domain: str,
        token_ttl: str,
        verifier: SignatureVerifier | None = None,
        challenge_ttl_ms: int = DEFAULT_CHALLENGE_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.domain = domain
        self.token_ttl = token_ttl
        self.verifier: SignatureVerifier = verifier or EthereumSignatureVerifier()
        self.challenge_ttl_ms = challenge_ttl_ms
        self._clock = clock

    # --- request-challenge ----------------------------------------------------------
    def request_challenge(self, address: str | None) -> ChallengeGrant:
        """Issue a new challenge, replacing any pending one for the same address."""
        if address is None or not is_valid_address(address):
            raise ValidationError(ValidationErrorKind.INVALID_IDENTITY)
        identity = normalize_address(address)

        now = self._clock()
        challenge = new_challenge(identity, now, self.challenge_ttl_ms)
        try:
            self.store.put(identity, challenge)
            self.store.sweep_expired(now)
        except Exception as exc:
            logger.error("Nonce store failed while issuing a challenge", exc_info=True)
            raise InternalError() from exc

        message = render_challenge_message(challenge, self.domain, address=address)
        logger.info("Issued challenge for %s", short_address(identity))
        return ChallengeGrant(
            message=message,
            nonce=challenge.nonce,
            issued_at=challenge.issued_at,
            expires_at=challenge.expires_at,
        )

    # --- submit-proof ---------------------------------------------------------------
    async def submit_proof(
        self,
        address: str | None,
        signature: str | None,
        message: str | None,
    ) -> ProofResult:
        """Verify a signed challenge and exchange it for a session token."""
        if not address or not signature or not message:
            raise ValidationError(ValidationErrorKind.MISSING_FIELDS)
        if not is_valid_address(address):
            raise ValidationError(ValidationErrorKind.INVALID_IDENTITY)
        if not is_valid_signature(signature):
            raise ValidationError(ValidationErrorKind.INVALID_SIGNATURE_FORMAT)
        identity = normalize_address(address)

        pending = self._lookup(identity)
        if pending is None:
            raise self._reject(ProtocolErrorKind.CHALLENGE_NOT_FOUND, identity)

        if pending.is_expired(self._clock()):
            self._guarded(self.store.delete, identity)
            raise self._reject(ProtocolErrorKind.CHALLENGE_EXPIRED, identity)

        if pending.nonce not in message:
            logger.debug(
                "Nonce line in submitted message: %s",
                (extract_nonce(message) or "<none>")[:8],
            )
            raise self._reject(ProtocolErrorKind.NONCE_MISMATCH, identity)

        if not await self._verify_signature(address, message, signature):
            raise self._reject(ProtocolErrorKind.SIGNATURE_INVALID, identity)

        consumed = self._guarded(self.store.consume, identity, pending.nonce)
        if consumed is None:
            # Lost a race: another submission consumed it, or a new challenge replaced it.
            raise self._reject(ProtocolErrorKind.CHALLENGE_NOT_FOUND, identity)

        claims = {"address": identity, "iat": self._clock() // 1000}
        try:
            token = self.tokens.issue(claims, self.token_ttl)
        except Exception as exc:
            logger.error("Token issuance failed", exc_info=True)
            raise InternalError() from exc

        logger.info("Authenticated %s", short_address(identity))
        return ProofResult(token=token, identity=identity, expires_in=self.token_ttl)

    # --- validate-session -----------------------------------------------------------
    def validate_session(self, token: str | None) -> str:
        """Return the address embedded in a valid session token."""
        if not token:
            raise Unauthorized(TokenErrorKind.MALFORMED)
        try:
            claims = self.tokens.verify(token)
        except TokenError as err:
            logger.info("Rejected session token: %s", err.kind.value)
            raise Unauthorized(err.kind) from err

        identity = claims.get("address")
        if not isinstance(identity, str) or not is_valid_address(identity):
            logger.info("Rejected session token: missing address claim")
            raise Unauthorized(TokenErrorKind.MALFORMED)
        return normalize_address(identity)

    # --- helpers --------------------------------------------------------------------
    def _lookup(self, identity: str) -> Challenge | None:
        return self._guarded(self.store.get, identity)

    @staticmethod
    def _guarded(operation: Callable[..., Challenge | None], *args: str) -> Challenge | None:
        try:
            return operation(*args)
        except Exception as exc:
            logger.error("Nonce store operation %s failed", operation.__name__, exc_info=True)
            raise InternalError() from exc

    async def _verify_signature(self, address: str, message: str, signature: str) -> bool:
        try:
            if inspect.iscoroutinefunction(self.verifier.verify):
                result = await self.verifier.verify(address, message, signature)
            else:
                result = await asyncio.to_thread(self.verifier.verify, address, message, signature)
                if inspect.isawaitable(result):
                    result = await result
        except Exception as exc:
            logger.error("Signature verifier raised", exc_info=True)
            raise InternalError() from exc
        return bool(result)

    @staticmethod
    def _reject(kind: ProtocolErrorKind, identity: str) -> ProtocolError:
        logger.info("Proof rejected for %s: %s", short_address(identity), kind.value)
        return ProtocolError(kind)

"""Error taxonomy for the wallet authentication flow.

Every failure carries a closed ``kind`` enum so callers branch on the variant
instead of on message text.
"""

from __future__ import annotations

from enum import Enum


class ValidationErrorKind(str, Enum):
    """Malformed client input."""

    MISSING_FIELDS = "missing_fields"
    INVALID_IDENTITY = "invalid_identity"
    INVALID_SIGNATURE_FORMAT = "invalid_signature_format"


class ProtocolErrorKind(str, Enum):
    """Handshake failures; all surface as an authorization failure."""

    CHALLENGE_NOT_FOUND = "challenge_not_found"
    CHALLENGE_EXPIRED = "challenge_expired"
    NONCE_MISMATCH = "nonce_mismatch"
    SIGNATURE_INVALID = "signature_invalid"


class TokenErrorKind(str, Enum):
    """Reasons a session token is rejected."""

    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


_VALIDATION_MESSAGES = {
    ValidationErrorKind.MISSING_FIELDS: "Missing required parameters",
    ValidationErrorKind.INVALID_IDENTITY: "Invalid wallet address",
    ValidationErrorKind.INVALID_SIGNATURE_FORMAT: "Invalid signature format",
}

_PROTOCOL_MESSAGES = {
    ProtocolErrorKind.CHALLENGE_NOT_FOUND: "No pending challenge; request a new sign-in message",
    ProtocolErrorKind.CHALLENGE_EXPIRED: "Challenge expired; request a new sign-in message",
    ProtocolErrorKind.NONCE_MISMATCH: "Message verification failed: nonce mismatch",
    ProtocolErrorKind.SIGNATURE_INVALID: "Signature verification failed",
}


class AuthError(Exception):
    """Base class for every error raised by the authentication flow."""

    code: str = "auth_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    """The request itself is malformed (client's fault, 4xx)."""

    def __init__(self, kind: ValidationErrorKind, message: str | None = None) -> None:
        super().__init__(message or _VALIDATION_MESSAGES[kind])
        self.kind = kind
        self.code = kind.value


class ProtocolError(AuthError):
    """The handshake was well-formed but did not prove ownership."""

    def __init__(self, kind: ProtocolErrorKind, message: str | None = None) -> None:
        super().__init__(message or _PROTOCOL_MESSAGES[kind])
        self.kind = kind
        self.code = kind.value


class TokenError(AuthError):
    """A session token failed verification."""

    def __init__(self, kind: TokenErrorKind, message: str | None = None) -> None:
        super().__init__(message or f"Token rejected: {kind.value}")
        self.kind = kind
        self.code = kind.value


class Unauthorized(AuthError):
    """A session check failed; ``reason`` is kept for diagnostics only."""

    code = "unauthorized"

    def __init__(self, reason: TokenErrorKind) -> None:
        if reason is TokenErrorKind.EXPIRED:
            message = "Token expired"
        else:
            message = "Invalid token"
        super().__init__(message)
        self.reason = reason


class InternalError(AuthError):
    """Unexpected failure in a collaborator (store or signature verifier)."""

    code = "internal_error"

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)

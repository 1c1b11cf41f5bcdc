"""Compact signed session tokens.

A token is ``base64url(header).base64url(claims).base64url(mac)`` where the
MAC is HMAC-SHA256 over the first two segments keyed by the server secret.
The layout is the JWS compact form, so tokens also decode with ``jose.jwt``.
"""

from __future__ import annotations

import binascii
import json
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, Final

from jose import jwk
from jose.constants import ALGORITHMS
from jose.exceptions import JWKError
from jose.utils import base64url_decode, base64url_encode

from wallet_auth.core.errors import TokenError, TokenErrorKind
from wallet_auth.utils.time import now_seconds

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM: Final[str] = ALGORITHMS.HS256
TOKEN_HEADER: Final[dict[str, str]] = {"alg": TOKEN_ALGORITHM, "typ": "JWT"}

_TTL_PATTERN = re.compile(r"^(\d+)([smhd])$")
_TTL_MULTIPLIERS: Final[dict[str, int]] = {"s": 1, "m": 60, "h": 3600, "d": 86_400}
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def parse_ttl(expression: str | None) -> int | None:
    """Convert ``"30s"``, ``"15m"``, ``"12h"`` or ``"7d"`` into seconds.

    Returns None for anything else, which means "no expiry".
    """
    if not expression:
        return None
    match = _TTL_PATTERN.fullmatch(expression.strip())
    if match is None:
        return None
    return int(match.group(1)) * _TTL_MULTIPLIERS[match.group(2)]


def _encode_segment(data: Mapping[str, Any]) -> str:
    raw = json.dumps(dict(data), separators=(",", ":")).encode("utf-8")
    return base64url_encode(raw).decode("ascii")


def _check_segment(segment: str) -> None:
    if not _SEGMENT_PATTERN.fullmatch(segment):
        raise TokenError(TokenErrorKind.MALFORMED, "Token segment is not base64url")


def _decode_segment(segment: str) -> bytes:
    _check_segment(segment)
    try:
        return base64url_decode(segment.encode("ascii"))
    except (binascii.Error, ValueError) as err:
        raise TokenError(TokenErrorKind.MALFORMED, "Token segment has invalid padding") from err


def _decode_json_segment(segment: str) -> dict[str, Any]:
    raw = _decode_segment(segment)
    try:
        value = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as err:
        raise TokenError(TokenErrorKind.MALFORMED, "Token segment is not JSON") from err
    if not isinstance(value, dict):
        raise TokenError(TokenErrorKind.MALFORMED, "Token segment is not a JSON object")
    return value


def _split(token: str) -> tuple[str, str, str]:
    if not isinstance(token, str) or not token:
        raise TokenError(TokenErrorKind.MALFORMED, "Token is empty")
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenError(TokenErrorKind.MALFORMED, "Token must have three segments")
    header, payload, signature = parts
    return header, payload, signature


class TokenIssuer:
    """Issue and verify HS256 session tokens.

    Args:
        secret: Shared signing secret.
        require_ttl: When True, ``issue`` refuses a missing or unparseable TTL
            instead of minting a token that never expires.
        clock: Returns the current epoch time in seconds.
    """

    def __init__(
        self,
        secret: str,
        *,
        require_ttl: bool = True,
        clock: Callable[[], int] = now_seconds,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        try:
            self._key = jwk.construct(secret, TOKEN_ALGORITHM)
        except JWKError as err:
            raise ValueError(f"Unusable token signing secret: {err}") from err
        self._require_ttl = require_ttl
        self._clock = clock

    def _sign(self, signing_input: str) -> str:
        mac: bytes = self._key.sign(signing_input.encode("ascii"))
        return base64url_encode(mac).decode("ascii")

    def issue(self, claims: Mapping[str, Any], ttl: str | None = None) -> str:
        """Sign ``claims``, adding ``exp`` when ``ttl`` parses."""
        payload = dict(claims)
        lifetime = parse_ttl(ttl)
        if lifetime is None:
            if self._require_ttl:
                raise ValueError(f"Token TTL {ttl!r} is not a duration like '15m' or '7d'")
            logger.warning("Issuing a session token without expiry (ttl=%r)", ttl)
            payload.pop("exp", None)
        else:
            payload["exp"] = self._clock() + lifetime

        signing_input = f"{_encode_segment(TOKEN_HEADER)}.{_encode_segment(payload)}"
        return f"{signing_input}.{self._sign(signing_input)}"

    def verify(self, token: str) -> dict[str, Any]:
        """Return the claims of a valid token.

        Checks run in order: structure, signature, payload, expiry. A token
        that is correctly signed but expired is still rejected.

        Raises:
            TokenError: with kind MALFORMED, INVALID_SIGNATURE or EXPIRED.
        """
        header_segment, payload_segment, signature_segment = _split(token)

        header = _decode_json_segment(header_segment)
        if header.get("alg") != TOKEN_ALGORITHM:
            raise TokenError(TokenErrorKind.INVALID_SIGNATURE, "Unexpected token algorithm")

        _check_segment(payload_segment)

        # Header and payload are well-formed; any defect in the MAC segment is a bad signature.
        try:
            signature = _decode_segment(signature_segment)
        except TokenError as err:
            raise TokenError(TokenErrorKind.INVALID_SIGNATURE) from err
        # Only the canonical encoding of a MAC is accepted.
        if base64url_encode(signature).decode("ascii") != signature_segment:
            raise TokenError(TokenErrorKind.INVALID_SIGNATURE)
        signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
        if not self._key.verify(signing_input, signature):
            raise TokenError(TokenErrorKind.INVALID_SIGNATURE)

        claims = _decode_json_segment(payload_segment)
        expires_at = claims.get("exp")
        if expires_at is not None:
            if isinstance(expires_at, bool) or not isinstance(expires_at, int):
                raise TokenError(TokenErrorKind.MALFORMED, "Token 'exp' claim must be an integer")
            if self._clock() > expires_at:
                raise TokenError(TokenErrorKind.EXPIRED)
        return claims


def peek_claims(token: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Decode header and claims without checking the signature (diagnostics only)."""
    header_segment, payload_segment, _ = _split(token)
    return _decode_json_segment(header_segment), _decode_json_segment(payload_segment)

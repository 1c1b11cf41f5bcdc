"""Sign-in challenges and the canonical message clients are asked to sign."""

from __future__ import annotations

import re
import secrets
from dataclasses import asdict, dataclass
from typing import Any

from wallet_auth.utils.time import iso_from_ms

NONCE_BYTES = 32
DEFAULT_CHALLENGE_TTL_MS = 5 * 60 * 1000

_NONCE_LINE = re.compile(r"^Nonce: ([0-9a-fA-F]+)$", re.MULTILINE)


@dataclass(frozen=True)
class Challenge:
    """A pending nonce and its validity window (epoch milliseconds)."""

    identity: str
    nonce: str
    issued_at: int
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Challenge:
        return cls(
            identity=str(data["identity"]),
            nonce=str(data["nonce"]),
            issued_at=int(data["issued_at"]),
            expires_at=int(data["expires_at"]),
        )


def generate_nonce() -> str:
    """Return 256 random bits as 64 lowercase hex characters."""
    return secrets.token_hex(NONCE_BYTES)


def new_challenge(identity: str, now_ms: int, ttl_ms: int = DEFAULT_CHALLENGE_TTL_MS) -> Challenge:
    """Create a fresh challenge for ``identity`` valid for ``ttl_ms``."""
    return Challenge(
        identity=identity,
        nonce=generate_nonce(),
        issued_at=now_ms,
        expires_at=now_ms + ttl_ms,
    )


def render_challenge_message(challenge: Challenge, domain: str, address: str | None = None) -> str:
    """Render the EIP-4361 style sign-in message for ``challenge``.

    ``address`` overrides the identity line so the message can echo the
    address exactly as the wallet reported it; it defaults to the stored
    (normalized) identity. Output depends only on the arguments.
    """
    return (
        f"{domain} wants you to sign in with your Ethereum account:\n"
        f"{address or challenge.identity}\n"
        "\n"
        "Welcome to our DApp! Please sign this message to verify your identity.\n"
        "\n"
        f"URI: https://{domain}\n"
        "Version: 1\n"
        "Chain ID: 1\n"
        f"Nonce: {challenge.nonce}\n"
        f"Issued At: {iso_from_ms(challenge.issued_at)}\n"
        f"Expiration Time: {iso_from_ms(challenge.expires_at)}"
    )


def extract_nonce(message: str) -> str | None:
    """Return the value of the ``Nonce:`` line, if the message has one."""
    match = _NONCE_LINE.search(message)
    return match.group(1) if match else None

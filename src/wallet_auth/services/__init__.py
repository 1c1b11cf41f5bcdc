# src/wallet_auth/services/__init__.py
"""Authentication services: challenges, nonce storage, tokens and the handshake."""

from .auth_protocol import AuthProtocol, ChallengeGrant, ProofResult
from .challenge import Challenge, render_challenge_message
from .nonce_store import InMemoryNonceStore, NonceStore, RedisNonceStore, build_nonce_store
from .tokens import TokenIssuer, parse_ttl

__all__ = [
    "AuthProtocol",
    "ChallengeGrant",
    "ProofResult",
    "Challenge",
    "render_challenge_message",
    "InMemoryNonceStore",
    "NonceStore",
    "RedisNonceStore",
    "build_nonce_store",
    "TokenIssuer",
    "parse_ttl",
]

"""Signature utilities built on Ethereum personal-sign (EIP-191) recovery."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable
from typing import Protocol

from eth_account import Account
from eth_account.messages import encode_defunct

logger = logging.getLogger(__name__)

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
SIGNATURE_PATTERN = re.compile(r"^0x[a-fA-F0-9]{130}$")


def is_valid_address(address: str | None) -> bool:
    """Return True for ``0x`` followed by exactly 40 hex characters."""
    if not address:
        return False
    return ADDRESS_PATTERN.fullmatch(address) is not None


def is_valid_signature(signature: str | None) -> bool:
    """Return True for ``0x`` followed by exactly 130 hex characters (r, s, v)."""
    if not signature:
        return False
    return SIGNATURE_PATTERN.fullmatch(signature) is not None


def normalize_address(address: str) -> str:
    """Lowercase an address so it can be used as a store key."""
    return address.lower()


def verify_signature(address: str, message: str, signature: str) -> bool:
    """Verify an EIP-191 personal-sign signature.

    Args:
        address: Hex address expected to have produced the signature.
        message: Exact text that was signed on the client.
        signature: Hex-encoded 65-byte signature.

    Returns:
        True if the key recovered from ``signature`` over ``message`` controls
        ``address``; False otherwise.
    """
    try:
        recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as exc:
        logger.debug("Signature recovery failed: %s", exc)
        return False
    return str(recovered).lower() == address.lower()


class SignatureVerifier(Protocol):
    """Capability judging whether ``signature`` over ``message`` belongs to ``address``.

    Implementations may return the boolean directly or an awaitable of it.
    """

    def verify(self, address: str, message: str, signature: str) -> bool | Awaitable[bool]: ...


class EthereumSignatureVerifier:
    """Default verifier backed by ``eth_account``."""

    def verify(self, address: str, message: str, signature: str) -> bool:
        return verify_signature(address, message, signature)

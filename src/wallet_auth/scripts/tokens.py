# src/wallet_auth/scripts/tokens.py
"""
Developer helper for session tokens.

    python -m wallet_auth.scripts.tokens issue 0xabc... [--ttl 1h]
    python -m wallet_auth.scripts.tokens inspect <token>

Both commands sign/verify with the configured JWT_SECRET.
"""

from __future__ import annotations

import argparse
import json
import sys

from wallet_auth.core.errors import TokenError
from wallet_auth.core.security import is_valid_address, normalize_address
from wallet_auth.services.tokens import TokenIssuer, peek_claims
from wallet_auth.utils.time import now_seconds


def _issuer() -> tuple[TokenIssuer, str]:
    from wallet_auth.core.settings import settings

    issuer = TokenIssuer(settings.jwt_secret, require_ttl=settings.require_token_ttl)
    return issuer, settings.jwt_expires_in


def issue_token(address: str, ttl: str | None = None) -> str:
    """Mint a session token for ``address`` as if it had completed sign-in."""
    if not is_valid_address(address):
        raise ValueError(f"Invalid wallet address: {address}")
    issuer, default_ttl = _issuer()
    claims = {"address": normalize_address(address), "iat": now_seconds()}
    return issuer.issue(claims, ttl or default_ttl)


def inspect_token(token: str) -> dict[str, object]:
    """Decode a token and report whether it verifies."""
    issuer, _ = _issuer()
    try:
        header, claims = peek_claims(token)
    except TokenError as err:
        return {"valid": False, "reason": err.kind.value}
    report: dict[str, object] = {"header": header, "claims": claims}
    try:
        issuer.verify(token)
    except TokenError as err:
        report.update(valid=False, reason=err.kind.value)
    else:
        report["valid"] = True
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Issue or inspect wallet session tokens")
    sub = parser.add_subparsers(dest="command", required=True)

    issue_parser = sub.add_parser("issue", help="Mint a token for an address")
    issue_parser.add_argument("address")
    issue_parser.add_argument("--ttl", default=None, help="Lifetime such as 15m or 7d")

    inspect_parser = sub.add_parser("inspect", help="Decode and verify a token")
    inspect_parser.add_argument("token")

    args = parser.parse_args(argv)
    if args.command == "issue":
        try:
            print(issue_token(args.address, args.ttl))
        except ValueError as err:
            print(f"error: {err}", file=sys.stderr)
            return 2
        return 0

    report = inspect_token(args.token)
    print(json.dumps(report, indent=2, sort_keys=True))
    return 0 if report.get("valid") else 1


if __name__ == "__main__":
    sys.exit(main())

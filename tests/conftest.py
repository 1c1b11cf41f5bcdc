# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Iterator

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from fastapi import FastAPI
from fastapi.testclient import TestClient

TEST_SECRET = "test-secret-key-for-wallet-auth"
TEST_DOMAIN = "localhost:3000"
START_MS = 1_700_000_000_000

os.environ.setdefault("JWT_SECRET", TEST_SECRET)
os.environ.setdefault("JWT_EXPIRES_IN", "7d")
os.environ.setdefault("DOMAIN", TEST_DOMAIN)
os.environ.setdefault("NONCE_STORE_BACKEND", "memory")

from wallet_auth.api.v1.dependencies import get_auth_protocol
from wallet_auth.main import app as fastapi_app
from wallet_auth.services.auth_protocol import AuthProtocol
from wallet_auth.services.nonce_store import InMemoryNonceStore
from wallet_auth.services.tokens import TokenIssuer


class FakeClock:
    """Manually advanced clock; calling it returns epoch milliseconds."""

    def __init__(self, start_ms: int = START_MS) -> None:
        self.ms = start_ms

    def __call__(self) -> int:
        return self.ms

    def seconds(self) -> int:
        return self.ms // 1000

    def advance(self, *, ms: int = 0, seconds: int = 0) -> None:
        self.ms += ms + seconds * 1000


def sign_text(account: LocalAccount, message: str) -> str:
    """Personal-sign ``message`` and return the 0x-prefixed 65-byte hex signature."""
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> InMemoryNonceStore:
    return InMemoryNonceStore()


@pytest.fixture()
def issuer(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, clock=clock.seconds)


@pytest.fixture()
def protocol(store: InMemoryNonceStore, issuer: TokenIssuer, clock: FakeClock) -> AuthProtocol:
    return AuthProtocol(
        store,
        issuer,
        domain=TEST_DOMAIN,
        token_ttl="7d",
        clock=clock,
    )


@pytest.fixture()
def wallet() -> LocalAccount:
    return Account.create()


@pytest.fixture()
def other_wallet() -> LocalAccount:
    return Account.create()


@pytest.fixture()
def signer() -> Callable[[LocalAccount, str], str]:
    return sign_text


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, protocol: AuthProtocol) -> Iterator[TestClient]:
    app.dependency_overrides[get_auth_protocol] = lambda: protocol
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_auth_protocol, None)

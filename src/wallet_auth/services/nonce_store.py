"""Storage for pending sign-in challenges.

One live challenge per identity. ``put`` overwrites, ``consume`` is an atomic
check-and-delete so that two concurrent proof submissions cannot both use the
same nonce. Expired entries may linger until the next sweep; callers always
re-check ``expires_at`` on lookup.
"""

from __future__ import annotations

import json
import logging
from threading import Lock
from typing import Any, Final, Protocol

import redis

from wallet_auth.services.challenge import Challenge

logger = logging.getLogger(__name__)

_REDIS_KEY_PREFIX: Final[str] = "nonce:"
# Redis keeps entries slightly past expiry so lookups report "expired" rather than "not found".
_REDIS_EXPIRY_GRACE_MS: Final[int] = 60_000


class NonceStore(Protocol):
    """Narrow storage interface the protocol depends on."""

    def put(self, identity: str, challenge: Challenge) -> None: ...

    def get(self, identity: str) -> Challenge | None: ...

    def consume(self, identity: str, nonce: str | None = None) -> Challenge | None: ...

    def delete(self, identity: str) -> None: ...

    def sweep_expired(self, now_ms: int) -> int: ...


class InMemoryNonceStore:
    """Process-local store guarded by a single lock."""

    def __init__(self) -> None:
        self._entries: dict[str, Challenge] = {}
        self._lock = Lock()

    def put(self, identity: str, challenge: Challenge) -> None:
        with self._lock:
            self._entries[identity] = challenge

    def get(self, identity: str) -> Challenge | None:
        with self._lock:
            return self._entries.get(identity)

    def consume(self, identity: str, nonce: str | None = None) -> Challenge | None:
        """Remove and return the entry for ``identity`` in one step.

        With ``nonce`` given, the entry is only removed if it still carries that nonce.
        """
        with self._lock:
            entry = self._entries.get(identity)
            if entry is None or (nonce is not None and entry.nonce != nonce):
                return None
            del self._entries[identity]
            return entry

    def delete(self, identity: str) -> None:
        with self._lock:
            self._entries.pop(identity, None)

    def sweep_expired(self, now_ms: int) -> int:
        """Drop every entry whose ``expires_at`` is before ``now_ms``."""
        with self._lock:
            stale = [key for key, entry in self._entries.items() if entry.expires_at < now_ms]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Swept %d expired challenges", len(stale))
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisNonceStore:
    """Redis-backed store for deployments running several workers.

    Keys expire on their own, so ``sweep_expired`` has nothing to do.
    """

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisNonceStore:
        return cls(redis.from_url(url, decode_responses=True))  # type: ignore[no-untyped-call]

    @staticmethod
    def _key(identity: str) -> str:
        return f"{_REDIS_KEY_PREFIX}{identity}"

    @staticmethod
    def _load(raw: Any) -> Challenge | None:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return Challenge.from_dict(json.loads(raw))

    def put(self, identity: str, challenge: Challenge) -> None:
        ttl_ms = max(1, challenge.expires_at - challenge.issued_at) + _REDIS_EXPIRY_GRACE_MS
        self._redis.set(self._key(identity), json.dumps(challenge.to_dict()), px=ttl_ms)

    def get(self, identity: str) -> Challenge | None:
        return self._load(self._redis.get(self._key(identity)))

    def consume(self, identity: str, nonce: str | None = None) -> Challenge | None:
        """WATCH the key, check it, then DEL inside MULTI/EXEC.

        A concurrent write between the check and EXEC aborts the transaction
        and the caller sees None.
        """
        key = self._key(identity)
        with self._redis.pipeline() as pipe:
            try:
                pipe.watch(key)
                challenge = self._load(pipe.get(key))
                if challenge is None or (nonce is not None and challenge.nonce != nonce):
                    pipe.unwatch()
                    return None
                pipe.multi()
                pipe.delete(key)
                pipe.execute()
            except redis.WatchError:
                logger.debug("Concurrent update while consuming challenge; giving up")
                return None
        return challenge

    def delete(self, identity: str) -> None:
        self._redis.delete(self._key(identity))

    def sweep_expired(self, now_ms: int) -> int:
        return 0


def build_nonce_store(backend: str, redis_url: str | None = None) -> NonceStore:
    """Return the store selected by configuration."""
    if backend == "redis":
        if not redis_url:
            raise ValueError("REDIS_URL is required for the redis nonce store")
        logger.info("Using Redis nonce store")
        return RedisNonceStore.from_url(redis_url)
    if backend == "memory":
        return InMemoryNonceStore()
    raise ValueError(f"Unknown nonce store backend: {backend}")

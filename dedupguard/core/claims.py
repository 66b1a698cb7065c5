"""Claim stores: atomic "claim this token for N ms, was I first?".

RedisClaimStore is the shared backend used in production. MemoryClaimStore
serves a single process (tests, local development).
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol

from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from dedupguard.exceptions import (
    ClaimBackendTimeout,
    ClaimBackendUnavailable,
    GuardConfigurationError,
)
from dedupguard.storage.redis import RedisStorage

logger = logging.getLogger(__name__)


class ClaimStore(Protocol):
    """Protocol for claim backends."""

    async def try_claim(self, token: str, ttl_ms: int) -> bool:
        """Claim a token for ttl_ms milliseconds.

        Args:
            token: Claim token (digest of the fingerprint)
            ttl_ms: Claim lifetime in milliseconds

        Returns:
            True if this call created the claim, False if a live claim existed

        Raises:
            ClaimBackendError: If the backend failed or timed out
        """
        ...


def _check_ttl(ttl_ms: int) -> None:
    if ttl_ms <= 0:
        raise GuardConfigurationError(f"ttl_ms must be > 0, got {ttl_ms}")


class RedisClaimStore:
    """Claim store on Redis SET NX PX.

    No retries: if a SET succeeded but its reply was lost, a retry would
    report the first claimant as a duplicate.
    """

    def __init__(self, storage: RedisStorage, key_prefix: str = "dedup", timeout_seconds: float = 2.0) -> None:
        self._storage = storage
        self.key_prefix = key_prefix
        self.timeout_seconds = timeout_seconds

    def get_key(self, token: str) -> str:
        """Get Redis key for a claim token."""
        return f"{self.key_prefix}:{token}"

    async def try_claim(self, token: str, ttl_ms: int) -> bool:
        _check_ttl(ttl_ms)
        key = self.get_key(token)
        try:
            # Stored value is not meaningful; only presence matters
            return await asyncio.wait_for(
                self._storage.setnx(key, token, px=ttl_ms),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, RedisTimeoutError) as e:
            logger.error(f"[RedisClaimStore] claim timed out after {self.timeout_seconds}s for key={key}")
            raise ClaimBackendTimeout(f"Claim store timed out after {self.timeout_seconds}s") from e
        except (RedisError, OSError, RuntimeError) as e:
            logger.error(f"[RedisClaimStore] claim failed for key={key}: {type(e).__name__}: {e}")
            raise ClaimBackendUnavailable(f"Claim store unavailable: {e}") from e


class MemoryClaimStore:
    """Thread-safe in-process claim store.

    Expiry is checked against ``clock`` (seconds, monotonic by default).
    Expired claims are swept at most once per ``purge_interval`` seconds.
    Not shared between processes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, purge_interval: float = 1.0) -> None:
        self._clock = clock
        self._claims: dict[str, float] = {}
        self._lock = threading.Lock()
        self.purge_interval = purge_interval
        self._last_purge = clock()

    async def try_claim(self, token: str, ttl_ms: int) -> bool:
        _check_ttl(ttl_ms)
        with self._lock:
            now = self._clock()
            if now - self._last_purge >= self.purge_interval:
                self._purge_locked(now)
            expires_at = self._claims.get(token)
            if expires_at is not None and expires_at > now:
                return False
            self._claims[token] = now + ttl_ms / 1000
            return True

    def purge_expired(self) -> int:
        """Drop expired claims. Returns the number removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        expired = [token for token, expires_at in self._claims.items() if expires_at <= now]
        for token in expired:
            del self._claims[token]
        self._last_purge = now
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._claims)

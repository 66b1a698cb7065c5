"""Unit tests for claim stores."""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from dedupguard.core.claims import MemoryClaimStore, RedisClaimStore
from dedupguard.exceptions import (
    ClaimBackendError,
    ClaimBackendTimeout,
    ClaimBackendUnavailable,
    GuardConfigurationError,
)
from dedupguard.storage.redis import RedisStorage


class TestMemoryClaimStore:
    """Tests for MemoryClaimStore."""

    async def test_first_claim_wins(self, store):
        assert await store.try_claim("tok", 1000) is True
        assert await store.try_claim("tok", 1000) is False

    async def test_distinct_tokens_are_independent(self, store):
        assert await store.try_claim("a", 1000) is True
        assert await store.try_claim("b", 1000) is True

    async def test_claim_live_until_ttl(self, store, clock):
        await store.try_claim("tok", 40_000)
        clock.advance(39.999)
        assert await store.try_claim("tok", 40_000) is False

    async def test_claim_expires_after_ttl(self, store, clock):
        await store.try_claim("tok", 40_000)
        clock.advance(40)
        assert await store.try_claim("tok", 40_000) is True

    async def test_rejected_claim_does_not_extend_ttl(self, store, clock):
        await store.try_claim("tok", 1000)
        clock.advance(0.5)
        assert await store.try_claim("tok", 1000) is False
        clock.advance(0.5)
        assert await store.try_claim("tok", 1000) is True

    @pytest.mark.parametrize("ttl_ms", [0, -5])
    async def test_non_positive_ttl_rejected(self, store, ttl_ms):
        with pytest.raises(GuardConfigurationError):
            await store.try_claim("tok", ttl_ms)

    async def test_concurrent_tasks_exactly_one_wins(self, store):
        results = await asyncio.gather(*(store.try_claim("tok", 5000) for _ in range(25)))
        assert results.count(True) == 1

    def test_concurrent_threads_exactly_one_wins(self):
        store = MemoryClaimStore()
        results: list[bool] = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(16)

        def worker():
            barrier.wait()
            result = asyncio.run(store.try_claim("tok", 5000))
            with results_lock:
                results.append(result)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(results) == 16
        assert results.count(True) == 1

    async def test_expired_claims_swept_on_later_claim(self, store, clock):
        for i in range(1000):
            await store.try_claim(f"tok-{i}", 10)
        assert len(store) == 1000

        clock.advance(60)
        await store.try_claim("fresh", 10)

        assert len(store) == 1

    async def test_live_claims_survive_sweep(self, store, clock):
        await store.try_claim("live", 120_000)
        await store.try_claim("short", 10)
        clock.advance(60)

        assert await store.try_claim("other", 10) is True
        assert await store.try_claim("live", 120_000) is False
        assert len(store) == 2

    async def test_purge_expired(self, store, clock):
        await store.try_claim("short", 1000)
        await store.try_claim("long", 60_000)
        clock.advance(2)
        assert store.purge_expired() == 1
        assert len(store) == 1


class TestRedisClaimStore:
    """Tests for RedisClaimStore against a mocked storage."""

    def make_store(self, setnx, timeout_seconds: float = 2.0) -> tuple[RedisClaimStore, MagicMock]:
        storage = MagicMock(spec=RedisStorage)
        storage.setnx = setnx
        return RedisClaimStore(storage, key_prefix="dedup", timeout_seconds=timeout_seconds), storage

    async def test_issues_single_set_nx_px(self):
        store, storage = self.make_store(AsyncMock(return_value=True))
        assert await store.try_claim("abc123", 40_000) is True
        storage.setnx.assert_awaited_once_with("dedup:abc123", "abc123", px=40_000)

    async def test_existing_key_is_not_first(self):
        store, _ = self.make_store(AsyncMock(return_value=False))
        assert await store.try_claim("abc123", 40_000) is False

    async def test_connection_error_is_backend_unavailable(self):
        store, _ = self.make_store(AsyncMock(side_effect=RedisConnectionError("refused")))
        with pytest.raises(ClaimBackendUnavailable):
            await store.try_claim("abc123", 40_000)

    async def test_not_connected_is_backend_unavailable(self):
        store = RedisClaimStore(RedisStorage())
        with pytest.raises(ClaimBackendUnavailable):
            await store.try_claim("abc123", 40_000)

    async def test_slow_backend_is_backend_timeout(self):
        async def slow_setnx(*args, **kwargs):
            await asyncio.sleep(1)
            return True

        store, _ = self.make_store(slow_setnx, timeout_seconds=0.01)
        with pytest.raises(ClaimBackendTimeout) as exc_info:
            await store.try_claim("abc123", 40_000)
        assert isinstance(exc_info.value, ClaimBackendError)

    async def test_non_positive_ttl_never_reaches_backend(self):
        store, storage = self.make_store(AsyncMock(return_value=True))
        with pytest.raises(GuardConfigurationError):
            await store.try_claim("abc123", 0)
        storage.setnx.assert_not_awaited()


class TestRedisStorageSetnx:
    """Tests for RedisStorage.setnx command shape."""

    async def test_set_nx_px_created(self):
        storage = RedisStorage()
        storage._client = AsyncMock()
        storage._client.set.return_value = True

        assert await storage.setnx("k", "v", px=500) is True
        storage._client.set.assert_awaited_once_with("k", "v", nx=True, px=500)

    async def test_set_nx_px_existing(self):
        storage = RedisStorage()
        storage._client = AsyncMock()
        storage._client.set.return_value = None

        assert await storage.setnx("k", "v", px=500) is False

    async def test_health_check_not_connected(self):
        assert await RedisStorage().health_check() is False

"""Shared fixtures."""

import pytest

from dedupguard.config import get_settings
from dedupguard.core.claims import MemoryClaimStore
from dedupguard.core.digest import KeyDigest
from dedupguard.core.guard import DuplicateGuard, get_duplicate_guard
from dedupguard.models import GuardSpec
from dedupguard.services.products import get_product_service


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_caches(monkeypatch):
    """Run against the in-memory backend with fresh cached singletons."""
    monkeypatch.setenv("CLAIM_BACKEND", "memory")
    get_settings.cache_clear()
    get_duplicate_guard.cache_clear()
    get_product_service.cache_clear()
    yield
    get_settings.cache_clear()
    get_duplicate_guard.cache_clear()
    get_product_service.cache_clear()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock) -> MemoryClaimStore:
    return MemoryClaimStore(clock=clock)


@pytest.fixture()
def guard(store) -> DuplicateGuard:
    return DuplicateGuard(store=store, digest=KeyDigest("sha256"), default_ttl_ms=10_000)


@pytest.fixture()
def product_spec() -> GuardSpec:
    return GuardSpec.of(
        fields=["productId", "transactionId"],
        tags=["CAFEINCODE"],
        ttl_ms=40_000,
    )

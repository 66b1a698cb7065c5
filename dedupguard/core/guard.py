"""Duplicate request guard.

fingerprint -> digest -> atomic claim. First claimant proceeds, repeats within
the TTL are rejected with CF_275. Backend failures are reported as such and
never folded into allow or reject.
"""

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from dedupguard.config import get_settings
from dedupguard.core.claims import ClaimStore, MemoryClaimStore, RedisClaimStore
from dedupguard.core.digest import KeyDigest
from dedupguard.core.fingerprint import build_fingerprint
from dedupguard.exceptions import ClaimBackendError, DuplicateRequestError
from dedupguard.models import Allow, BackendError, Decision, Duplicate, ErrorCode, GuardSpec
from dedupguard.storage.redis import redis_storage

logger = logging.getLogger(__name__)


class DuplicateGuard:
    """Stateless orchestrator; all persistent state lives in the claim store."""

    def __init__(
        self,
        store: ClaimStore,
        digest: KeyDigest | None = None,
        default_ttl_ms: int = 10_000,
    ) -> None:
        self.store = store
        self.digest = digest or KeyDigest()
        self.default_ttl_ms = default_ttl_ms

    async def evaluate(self, spec: GuardSpec, payload: Mapping[str, Any] | None) -> Decision:
        """Decide whether a request may proceed.

        Args:
            spec: Call-site guard configuration
            payload: Field view of the request body, None if unavailable

        Returns:
            Allow, Duplicate or BackendError
        """
        if not spec.is_active:
            logger.warning("[DuplicateGuard] ignore because no include fields are configured")
            return Allow(reason="no_fields")

        if payload is None:
            logger.warning("[DuplicateGuard] ignore because request payload is unavailable")
            return Allow(reason="no_payload")

        fingerprint = build_fingerprint(spec, payload)
        token = self.digest.digest(fingerprint)
        ttl_ms = spec.ttl_ms or self.default_ttl_ms
        logger.debug(f"[DuplicateGuard] rawKey: [{fingerprint}] and generated token: [{token}]")

        try:
            is_first = await self.store.try_claim(token, ttl_ms)
        except ClaimBackendError as e:
            logger.error(f"[DuplicateGuard] claim backend failed for token {token}: {e}")
            return BackendError(cause=e)

        if is_first:
            logger.info(f"[DuplicateGuard] token: {token} has been claimed for {ttl_ms}ms")
            return Allow(reason="claimed")

        logger.warning(f"[DuplicateGuard] token: {token} has already been claimed")
        return Duplicate(
            code=ErrorCode.ERROR_DUPLICATE.code,
            message=ErrorCode.ERROR_DUPLICATE.message,
            token=token,
        )

    async def ensure_unique(self, spec: GuardSpec, payload: Mapping[str, Any] | None) -> Allow:
        """Like evaluate(), but raise on anything other than Allow.

        Raises:
            DuplicateRequestError: If a live claim exists
            ClaimBackendError: If the claim store failed
        """
        decision = await self.evaluate(spec, payload)
        if isinstance(decision, Duplicate):
            raise DuplicateRequestError(decision.code, decision.message, token=decision.token)
        if isinstance(decision, BackendError):
            raise decision.cause
        return decision


@lru_cache()
def get_duplicate_guard() -> DuplicateGuard:
    """Get duplicate guard instance (lazy init)."""
    settings = get_settings()
    store: ClaimStore
    if settings.claim_backend == "memory":
        store = MemoryClaimStore()
    else:
        store = RedisClaimStore(
            redis_storage,
            key_prefix=settings.claim_key_prefix,
            timeout_seconds=settings.claim_timeout_seconds,
        )
    return DuplicateGuard(
        store=store,
        digest=KeyDigest(settings.hash_algorithm),
        default_ttl_ms=settings.default_ttl_ms,
    )

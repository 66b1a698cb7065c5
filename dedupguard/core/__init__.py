"""Duplicate request guard core."""

from dedupguard.core.claims import ClaimStore, MemoryClaimStore, RedisClaimStore
from dedupguard.core.digest import KeyDigest
from dedupguard.core.fingerprint import build_fingerprint, canonical_str, to_payload_view
from dedupguard.core.guard import DuplicateGuard, get_duplicate_guard

__all__ = [
    "ClaimStore",
    "DuplicateGuard",
    "KeyDigest",
    "MemoryClaimStore",
    "RedisClaimStore",
    "build_fingerprint",
    "canonical_str",
    "get_duplicate_guard",
    "to_payload_view",
]

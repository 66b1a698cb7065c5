"""Redis connection pool and utilities.

Redis holds the dedup claims: one key per claim token, expired by Redis itself.
"""

from redis.asyncio import ConnectionPool, Redis

from dedupguard.config import get_settings


class RedisStorage:
    """Redis storage with connection pool."""

    def __init__(self) -> None:
        """Initialize Redis connection pool."""
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None

    async def connect(self) -> None:
        """Create connection pool and connect to Redis."""
        settings = get_settings()
        self._pool = ConnectionPool.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.claim_timeout_seconds,
            socket_connect_timeout=settings.claim_timeout_seconds,
        )
        self._client = Redis(connection_pool=self._pool)

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._client:
            await self._client.aclose()
        if self._pool:
            await self._pool.disconnect()
        self._client = None
        self._pool = None

    @property
    def client(self) -> Redis:
        """Get Redis client. Raises if not connected."""
        if self._client is None:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._client

    async def setnx(self, key: str, value: str, px: int | None = None) -> bool:
        """Set if not exists with optional expiration in milliseconds.

        Single SET ... NX PX command, so check and write are one atomic step.
        """
        return bool(await self.client.set(key, value, nx=True, px=px))

    async def health_check(self) -> bool:
        """Check Redis connection health."""
        try:
            await self.client.ping()
            return True
        except Exception:
            return False


# Global Redis storage instance
redis_storage = RedisStorage()

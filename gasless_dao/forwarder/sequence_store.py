"""
Sequence Store for Forwarder Replay Protection

Holds the per-user sequence numbers (nonces) of a forwarder. A signed
request is only valid for the sender's current sequence number, and each
successful verification advances it by exactly one, so no signature is ever
accepted twice.

Counters live outside the ledger's rollback snapshot: once advanced they stay
advanced even when the relayed call later fails. Redis is supported as a
durable backend; the in-memory map is the default. INCR makes each single
increment atomic, but reading a counter and advancing it are two steps, so
callers compare the value returned by `increment` with the one they checked.

Each forwarder owns its own counters. `scoped` derives a store for one
forwarder deployment that shares the backend connection but not the keys.

SECURITY: Unlike a cache, counters never expire and backend errors are not
masked by falling back to memory. Either would let an old signature become
valid again.
"""

from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class SequenceStore:
    """
    Per-address monotonic counters starting at 0.

    Addresses are matched case-insensitively.
    """

    DEFAULT_PREFIX = "gasless_dao:forwarder:nonce:"

    def __init__(
        self,
        redis_client: Any | None = None,
        prefix: str = DEFAULT_PREFIX,
    ):
        """
        Initialize the sequence store.

        Args:
            redis_client: Synchronous Redis client (optional, memory if None)
            prefix: Redis key prefix; use one prefix per forwarder deployment
        """
        self._redis = redis_client
        self._prefix = prefix
        self._memory: dict[str, int] = {}

    def _make_key(self, address: str) -> str:
        return f"{self._prefix}{address.lower()}"

    @property
    def backend(self) -> str:
        return "redis" if self._redis is not None else "memory"

    @property
    def prefix(self) -> str:
        return self._prefix

    def scoped(self, namespace: str) -> "SequenceStore":
        """
        Store for one forwarder deployment, e.g. `"31337:0xabc..."`.

        Shares the Redis client; memory counters start empty.
        """
        return SequenceStore(
            redis_client=self._redis,
            prefix=f"{self._prefix}{namespace.lower()}:",
        )

    def current(self, address: str) -> int:
        """Current sequence number for an address (0 if never seen)."""
        if self._redis is not None:
            value = self._redis.get(self._make_key(address))
            return int(value) if value is not None else 0
        return self._memory.get(address.lower(), 0)

    def increment(self, address: str) -> int:
        """Advance the counter by one and return the new value."""
        if self._redis is not None:
            new_value = int(self._redis.incr(self._make_key(address)))
        else:
            key = address.lower()
            new_value = self._memory.get(key, 0) + 1
            self._memory[key] = new_value

        logger.debug(
            "sequence_advanced",
            address=address,
            sequence=new_value,
            backend=self.backend,
        )
        return new_value

    def get_stats(self) -> dict[str, Any]:
        """Number of tracked addresses per backend."""
        if self._redis is not None:
            cursor = 0
            total_keys = 0
            while True:
                cursor, batch = self._redis.scan(cursor, match=f"{self._prefix}*", count=100)
                total_keys += len(batch)
                if cursor == 0:
                    break
            return {"tracked_addresses": total_keys, "backend": "redis"}

        return {"tracked_addresses": len(self._memory), "backend": "memory"}


# Global sequence store instance
_sequence_store: SequenceStore | None = None


def init_sequence_store(
    redis_url: str | None = None,
    redis_password: str | None = None,
    prefix: str = SequenceStore.DEFAULT_PREFIX,
) -> SequenceStore:
    """
    Initialize the global sequence store.

    Unlike a cache, a configured Redis that cannot be reached is an error:
    starting with empty in-memory counters would re-enable spent signatures.
    """
    global _sequence_store

    if _sequence_store is not None:
        return _sequence_store

    redis_client = None
    if redis_url:
        import redis

        redis_client = redis.Redis.from_url(
            redis_url,
            password=redis_password,
            decode_responses=True,
        )
        redis_client.ping()
        logger.info("sequence_store_initialized", backend="redis")
    else:
        logger.info("sequence_store_initialized", backend="memory")

    _sequence_store = SequenceStore(redis_client=redis_client, prefix=prefix)
    return _sequence_store


def get_sequence_store() -> SequenceStore | None:
    """Get the global sequence store instance."""
    return _sequence_store


def close_sequence_store() -> None:
    """Close the sequence store and release resources."""
    global _sequence_store

    if _sequence_store is None:
        return

    if _sequence_store._redis is not None:
        _sequence_store._redis.close()

    _sequence_store = None
    logger.info("sequence_store_closed")

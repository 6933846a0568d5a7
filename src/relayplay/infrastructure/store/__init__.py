"""Key-value store backends."""

from .diskcache_store import DiskcacheStore
from .factory import StoreBackend, create_store
from .redis_store import RedisStore

__all__ = ["DiskcacheStore", "RedisStore", "StoreBackend", "create_store"]

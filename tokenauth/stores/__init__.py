from tokenauth.stores.memory_store import MemoryRateLimiter, MemorySessionStore, MemoryUserStore
from tokenauth.stores.sql_store import SQLSessionStore, SQLUserStore

__all__ = [
    "MemoryRateLimiter",
    "MemorySessionStore",
    "MemoryUserStore",
    "SQLSessionStore",
    "SQLUserStore",
]

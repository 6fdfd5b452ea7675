"""
Storage layer: explicit (type, id) -> value stores.

Main components:
- StorageBackend: Protocol the inference layer depends on
- MemoryStore: in-memory store with an optional fallback store
- chain_stores: helper that links stores front to back
"""

from implicate.storage.memory import MemoryStore, chain_stores
from implicate.storage.protocols import StorageBackend

__all__ = [
    "MemoryStore",
    "StorageBackend",
    "chain_stores",
]

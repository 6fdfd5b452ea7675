# implicate/storage/memory.py

"""
In-memory explicit value store with delegation chain.

A MemoryStore answers from its own table and forwards misses to an
optional fallback store. Stacking stores this way lets a deployment put a
fast layer in front of a slower (or empty) one without the inference layer
knowing the difference.
"""

import logging
from threading import RLock
from typing import Any, Dict, Hashable, Optional

from implicate.storage.protocols import StorageBackend

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Mapping from (type, id) to an opaque value.

    Attributes:
        name: Label used in logs and repr
        fallback: Store consulted when this layer has no value
    """

    def __init__(
        self,
        fallback: Optional[StorageBackend] = None,
        name: Optional[str] = None,
    ):
        self.name = name or self.__class__.__name__
        self.fallback = fallback
        self._values: Dict[Hashable, Dict[Hashable, Any]] = {}
        self._lock = RLock()

    async def get(self, type: Hashable, id: Hashable) -> Optional[Any]:
        """
        Get the stored value for (type, id).

        Falls through to the fallback store on a miss.

        Returns:
            The value, or None when no layer has one
        """
        with self._lock:
            all_of_type = self._values.get(type)
            if all_of_type is not None and id in all_of_type:
                return all_of_type[id]

        if self.fallback is None:
            return None

        logger.debug(f"[{self.name}] Miss for {type}/{id}, delegating to fallback")
        return await self.fallback.get(type, id)

    async def put(self, type: Hashable, id: Hashable, value: Any) -> None:
        """Store a value in this layer; never forwarded to the fallback."""
        with self._lock:
            self._values.setdefault(type, {})[id] = value

    def has(self, type: Hashable, id: Hashable) -> bool:
        """Check whether this layer (not the fallback) holds the key."""
        with self._lock:
            return id in self._values.get(type, {})

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(ids) for ids in self._values.values())

    def __repr__(self) -> str:
        fallback = getattr(self.fallback, "name", type(self.fallback).__name__) if self.fallback else None
        return f"MemoryStore(name={self.name!r}, keys={len(self)}, fallback={fallback!r})"


def chain_stores(*stores: MemoryStore) -> MemoryStore:
    """
    Link stores into a delegation chain.

    The first store is tried first; each store's fallback becomes the next
    one. The last store keeps whatever fallback it already had.

    Returns:
        The head of the chain

    Raises:
        ValueError: If no store is given
    """
    if not stores:
        raise ValueError("chain_stores() needs at least one store")

    for store, fallback in zip(stores, stores[1:]):
        store.fallback = fallback
    return stores[0]

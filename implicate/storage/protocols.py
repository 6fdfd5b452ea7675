# implicate/storage/protocols.py

"""
Protocols defining the contract for storage backends.

The inference layer only depends on this contract, so any store exposing
awaitable get/put can sit under a Registry.
"""

from typing import Any, Hashable, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """
    Contract for explicit-value stores.

    get() returns None for a missing key and never raises for it.
    put() stores unconditionally, overwriting any previous value.
    """

    async def get(self, type: Hashable, id: Hashable) -> Optional[Any]:
        ...

    async def put(self, type: Hashable, id: Hashable, value: Any) -> None:
        ...

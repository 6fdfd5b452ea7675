"""
Shared pytest fixtures for implicate tests.

Provides fixtures for:
- Fresh stores and registries
- A recording tracer wired into a registry
- A registry pre-seeded with a file path value
"""

import pytest
import pytest_asyncio

from implicate.inference.registry import Registry
from implicate.storage import MemoryStore
from implicate.tracing import RecordingTracer


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def tracer():
    return RecordingTracer()


@pytest.fixture
def registry(store, tracer):
    return Registry(store=store, tracer=tracer)


@pytest_asyncio.fixture
async def file_registry(registry):
    """Registry with FilePath/test = name.json5 stored explicitly."""
    await registry.put("FilePath", "test", "name.json5")
    return registry

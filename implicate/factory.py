# implicate/factory.py

"""
Composition root: builds a Registry from settings.

    from implicate.factory import create_registry

    registry = create_registry()
"""

import logging
from typing import Optional

from implicate.inference.registry import Registry
from implicate.settings import DotDict, get_settings, validate_settings
from implicate.storage import MemoryStore, StorageBackend, chain_stores
from implicate.tracing import DebugTracer, NullTracer, RecordingTracer, Tracer

logger = logging.getLogger(__name__)


def create_tracer(settings: DotDict) -> Tracer:
    """
    Build the tracer named by tracing.tracer.

    Raises:
        ValueError: For an unknown tracer kind
    """
    kind = settings.get_nested("tracing.tracer", "null")
    if kind == "null":
        return NullTracer()
    if kind == "debug":
        return DebugTracer(log_values=bool(settings.get_nested("tracing.log_values", True)))
    if kind == "recording":
        return RecordingTracer(history_size=settings.get_nested("tracing.history_size", 1000))
    raise ValueError(f"Unknown tracer '{kind}'")


def create_store(settings: DotDict) -> MemoryStore:
    """Build storage.layers memory stores chained front to back."""
    layers = settings.get_nested("storage.layers", 1)
    stores = [MemoryStore(name=f"layer{index}") for index in range(layers)]
    return chain_stores(*stores)


def create_registry(
    settings: Optional[DotDict] = None,
    store: Optional[StorageBackend] = None,
    tracer: Optional[Tracer] = None,
) -> Registry:
    """
    Create a Registry wired according to settings.

    Args:
        settings: Settings to use (defaults to the global settings)
        store: Storage backend overriding storage.layers
        tracer: Tracer overriding tracing.tracer

    Raises:
        ValueError: If the settings are invalid
    """
    settings = settings if settings is not None else get_settings()
    errors = validate_settings(settings)
    if errors:
        raise ValueError(f"Invalid settings: {'; '.join(errors)}")

    registry = Registry(
        store=store if store is not None else create_store(settings),
        tracer=tracer if tracer is not None else create_tracer(settings),
    )
    logger.debug(f"Created {registry!r}")
    return registry

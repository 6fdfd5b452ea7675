"""
implicate - typed attribute store with lazy, rule-based derivation.

Callers ask a Registry for the value of a (type, id) pair. Explicitly
stored values win; otherwise registered implicators derive the value from
other attributes of the same id, resolving their inputs recursively.

Main components:
- Registry: get/put/imply
- Implicator, ImplicatorContext: rules and the context they run in
- MemoryStore, chain_stores: explicit value storage with delegation
- NullTracer, DebugTracer, RecordingTracer: resolution event sinks
- create_registry: settings-driven composition root
"""

from implicate.factory import create_registry
from implicate.inference import (
    Implicator,
    ImplicatorContext,
    ImplicatorNotApplicableError,
    ImplicatorUsageError,
    Registry,
)
from implicate.storage import MemoryStore, StorageBackend, chain_stores
from implicate.tracing import (
    DebugTracer,
    NullTracer,
    RecordingTracer,
    TraceEvent,
    TraceEvents,
    Tracer,
)

__version__ = "0.1.0"

__all__ = [
    "DebugTracer",
    "Implicator",
    "ImplicatorContext",
    "ImplicatorNotApplicableError",
    "ImplicatorUsageError",
    "MemoryStore",
    "NullTracer",
    "RecordingTracer",
    "Registry",
    "StorageBackend",
    "TraceEvent",
    "TraceEvents",
    "Tracer",
    "chain_stores",
    "create_registry",
]

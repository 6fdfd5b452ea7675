"""
Inference layer: implicators and the registry that runs them.

Main components:
- Implicator: immutable rule deriving output types from input types
- ImplicatorContext: capability object given to conditions and producers
- Registry: get/put/imply over a storage backend
- ImplicatorNotApplicableError / ImplicatorUsageError
"""

from implicate.inference.context import ImplicatorContext
from implicate.inference.errors import (
    ImplicatorNotApplicableError,
    ImplicatorUsageError,
)
from implicate.inference.implicator import Implicator, ResolutionState
from implicate.inference.registry import Registry

__all__ = [
    "Implicator",
    "ImplicatorContext",
    "ImplicatorNotApplicableError",
    "ImplicatorUsageError",
    "Registry",
    "ResolutionState",
]

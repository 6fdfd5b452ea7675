# implicate/inference/context.py

"""
Per-attempt context handed to implicator conditions and producers.

Rule bodies read their declared inputs and write outputs through it:

    def producer(ctx):
        ctx.put("FileExt", ctx.get("FilePath").rsplit(".", 1)[-1])

or, with attribute access:

    def producer(ctx):
        ctx.FileExt = ctx.FilePath.rsplit(".", 1)[-1]
"""

import logging
from typing import Any, Hashable, TYPE_CHECKING

from implicate.inference.errors import ImplicatorNotApplicableError
from implicate.tracing import TraceEvents

if TYPE_CHECKING:
    from implicate.inference.implicator import Implicator, ResolutionState

logger = logging.getLogger(__name__)

_OWN_ATTRIBUTES = frozenset({
    "implicator", "values", "output_values", "registry", "id", "still_valid",
})


class ImplicatorContext:
    """
    Scratchpad for a single implicator attempt.

    Attributes:
        implicator: The implicator being attempted
        values: Working copy of the resolution values, updated by put()
        output_values: Values written by this attempt only
        registry: Root resolver (lets producers put() explicit values)
        id: Entity under resolution
        still_valid: False once a condition cancelled the attempt
    """

    def __init__(self, implicator: "Implicator", state: "ResolutionState"):
        object.__setattr__(self, "implicator", implicator)
        object.__setattr__(self, "values", dict(state.values))
        object.__setattr__(self, "output_values", {})
        object.__setattr__(self, "registry", state.resolver)
        object.__setattr__(self, "id", state.id)
        object.__setattr__(self, "still_valid", True)

    def get(self, type: Hashable) -> Any:
        """
        Read a declared input.

        Raises:
            ImplicatorNotApplicableError: If type is not one of the
                implicator's input types
        """
        if type not in self.implicator.input_types:
            raise ImplicatorNotApplicableError(f"'{type}' is not a declared input")
        return self.values.get(type)

    def put(self, type: Hashable, value: Any) -> None:
        """Record an output; later conditions and the producer see it too."""
        self.registry.trace(TraceEvents.IMPLICATOR_PUT, {
            "type": type, "id": self.id, "value": value,
            "implicator": self.implicator,
        })
        self.values[type] = value
        self.output_values[type] = value

    def cancel(self) -> None:
        """Abandon this attempt; the producer will not run."""
        object.__setattr__(self, "still_valid", False)

    def __getattr__(self, name: str) -> Any:
        # Only called for names not found the normal way
        # Private and dunder names are never attribute types
        if name.startswith("_"):
            raise AttributeError(name)
        if name == "set":
            logger.warning('getting "ctx.set"; did you mean "ctx.put"?')
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _OWN_ATTRIBUTES:
            object.__setattr__(self, name, value)
            return
        self.put(name, value)

    def __repr__(self) -> str:
        return (
            f"ImplicatorContext(implicator={self.implicator.name!r}, "
            f"id={self.id!r}, still_valid={self.still_valid})"
        )

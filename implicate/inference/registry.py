# implicate/inference/registry.py

"""
Registry: explicit attribute values plus lazy rule-based derivation.

    registry = Registry()
    await registry.put("FilePath", "doc", "name.json5")

    registry.imply(["FilePath"], ["FileExt"], lambda ctx: ctx.put(
        "FileExt", ctx.get("FilePath").rsplit(".", 1)[-1]))

    await registry.get("FileExt", "doc")   # -> "json5"

get() returns an explicitly stored value when there is one. Otherwise it
tries the implicators registered for the type, in registration order, and
returns what the first successful one produced. Derived values are kept
only for the duration of that get() call.
"""

import logging
import uuid
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional

from implicate.inference.errors import ImplicatorUsageError
from implicate.inference.implicator import Implicator, ResolutionState, RuleFunction
from implicate.logger import logger as structured_logger
from implicate.storage import MemoryStore, StorageBackend
from implicate.tracing import NullTracer, TraceEvents, Tracer

logger = logging.getLogger(__name__)


def _is_type_list(obj: Any) -> bool:
    return isinstance(obj, (list, tuple))


class Registry:
    """
    Typed attribute store with implicator-based derivation.

    Attributes:
        store: Storage backend holding explicit values
        tracer: Sink for resolution lifecycle events
    """

    def __init__(
        self,
        store: Optional[StorageBackend] = None,
        tracer: Optional[Tracer] = None,
    ):
        self.store = store if store is not None else MemoryStore()
        self.tracer = tracer if tracer is not None else NullTracer()
        self._implicators: Dict[Hashable, List[Implicator]] = {}
        self._registered: List[Implicator] = []

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    async def put(self, type: Hashable, id: Hashable, value: Any) -> None:
        """Store an explicit value; it shadows every implicator for the key."""
        await self.store.put(type, id, value)

    async def get(self, type: Hashable, id: Hashable) -> Optional[Any]:
        """
        Get the value of (type, id), deriving it if needed.

        Returns:
            The explicit or derived value, or None when nothing provides one
        """
        state = ResolutionState(id=id, resolver=self)
        token = structured_logger.set_resolution(f"res_{uuid.uuid4().hex[:8]}")
        try:
            return await self.resolve(type, state)
        finally:
            structured_logger.reset_resolution(token)

    async def resolve(self, type: Hashable, state: ResolutionState) -> Optional[Any]:
        """
        Resolve a type inside an ongoing resolution.

        The store is always asked first, so an explicit value wins even over
        a value some multi-output implicator derived earlier in the same
        resolution. After that, values already known to the resolution are
        reused; nested inputs share state.values, so a multi-output
        implicator runs at most once per resolution for a given set of inputs.
        """
        id = state.id
        self.trace(TraceEvents.GET_INVOKED, {"type": type, "id": id})

        value = await self.store.get(type, id)
        if value is not None:
            self.trace(TraceEvents.GET_RETURNED, {
                "type": type, "id": id, "value": value, "source": "explicit",
            })
            return value

        known = state.values.get(type)
        if known is not None:
            self.trace(TraceEvents.GET_RETURNED, {
                "type": type, "id": id, "value": known, "source": "resolution",
            })
            return known

        if type in state.in_flight:
            logger.debug(f"Cycle while resolving {type}/{id}; treating as absent")
            self.trace(TraceEvents.GET_CYCLE, {"type": type, "id": id})
            return None

        state.in_flight.add(type)
        try:
            for implicator in self._implicators.get(type, []):
                self.trace(TraceEvents.IMPLICATOR_ATTEMPTED, {
                    "type": type, "id": id, "implicator": implicator,
                })
                if await implicator.attempt(state):
                    value = state.values.get(type)
                    self.trace(TraceEvents.GET_RETURNED, {
                        "type": type, "id": id, "value": value,
                        "source": "implicator", "implicator": implicator,
                    })
                    return value
        finally:
            state.in_flight.discard(type)

        self.trace(TraceEvents.GET_RETURNED, {
            "type": type, "id": id, "value": None, "source": "absent",
        })
        return None

    # -------------------------------------------------------------------------
    # Implicators
    # -------------------------------------------------------------------------

    def imply(self, *args: Any) -> Implicator:
        """
        Register an implicator.

        Usage:
            registry.imply(input_types, output_types, *conditions, producer)

        Returns:
            The registered Implicator

        Raises:
            ImplicatorUsageError: If the arguments are malformed
        """
        if len(args) < 3:
            raise ImplicatorUsageError(f"expected at least 3 arguments, got {len(args)}")
        input_types, output_types, *functions = args
        return self.register(Implicator(
            input_types=self._check_types("input_types", input_types),
            output_types=self._check_types("output_types", output_types),
            functions=self._check_functions(functions),
        ))

    def implicator(
        self,
        input_types: Iterable[Hashable],
        output_types: Iterable[Hashable],
        conditions: Iterable[RuleFunction] = (),
        name: Optional[str] = None,
    ) -> Callable[[RuleFunction], RuleFunction]:
        """
        Decorator form of imply(); the decorated function is the producer.

        Example:
            @registry.implicator(["FilePath"], ["FileExt"], conditions=[has_dot])
            def file_ext(ctx):
                ctx.FileExt = ctx.FilePath.rsplit(".", 1)[-1]
        """
        input_types = self._check_types("input_types", input_types)
        output_types = self._check_types("output_types", output_types)
        conditions = list(conditions)

        def decorator(producer: RuleFunction) -> RuleFunction:
            self.register(Implicator(
                input_types=input_types,
                output_types=output_types,
                functions=self._check_functions(conditions + [producer]),
                name=name,
            ))
            return producer

        return decorator

    def register(self, implicator: Implicator) -> Implicator:
        """Index a pre-built implicator under each of its output types."""
        if not isinstance(implicator, Implicator):
            raise ImplicatorUsageError(f"{implicator!r} is not an Implicator")
        if not implicator.output_types:
            raise ImplicatorUsageError("output_types must not be empty")
        self._check_functions(implicator.functions)

        for output_type in implicator.output_types:
            self._implicators.setdefault(output_type, []).append(implicator)
        self._registered.append(implicator)

        logger.debug(f"Registered {implicator!r}")
        return implicator

    @staticmethod
    def _check_types(label: str, types: Any) -> List[Hashable]:
        if not _is_type_list(types):
            raise ImplicatorUsageError(f"{label} must be a list or tuple")
        if label == "output_types" and not types:
            raise ImplicatorUsageError("output_types must not be empty")
        return list(types)

    @staticmethod
    def _check_functions(functions: Iterable[Any]) -> List[RuleFunction]:
        functions = list(functions)
        if not functions:
            raise ImplicatorUsageError("a producer function is required")
        for function in functions:
            if not callable(function):
                raise ImplicatorUsageError(f"{function!r} is not callable")
        return functions

    # -------------------------------------------------------------------------
    # Tracing
    # -------------------------------------------------------------------------

    def trace(self, event_name: str, attributes: Dict[str, Any]) -> None:
        """Forward an event to the tracer; tracer errors are logged, not raised."""
        try:
            self.tracer.log(event_name, attributes)
        except Exception as e:
            logger.error(f"Error in tracer for {event_name}: {e}")

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def implicators_for(self, type: Hashable) -> List[Implicator]:
        """Implicators producing type, in lookup order."""
        return list(self._implicators.get(type, []))

    def all_implicators(self) -> List[Implicator]:
        """Every registered implicator once, in registration order."""
        return list(self._registered)

    def get_documentation(self) -> str:
        """
        Generate Markdown documentation of the registered implicators.

        Returns:
            One section per output type, listing its implicators in lookup order
        """
        lines = ["# Implicators\n"]
        lines.append(f"Total implicators: {len(self)}\n")

        for output_type in sorted(self._implicators, key=str):
            lines.append(f"\n## {output_type}\n")
            for index, implicator in enumerate(self._implicators[output_type], 1):
                inputs = ", ".join(map(str, implicator.input_types)) or "(none)"
                lines.append(f"{index}. `{implicator.name}`")
                lines.append(f"   - **Inputs:** {inputs}")
                if len(implicator.output_types) > 1:
                    outputs = ", ".join(map(str, implicator.output_types))
                    lines.append(f"   - **Outputs:** {outputs}")
                if implicator.conditions:
                    lines.append(f"   - **Conditions:** {len(implicator.conditions)}")
            lines.append("")

        return "\n".join(lines)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "store": type(self.store).__name__,
            "tracer": type(self.tracer).__name__,
            "total_implicators": len(self),
            "total_output_types": len(self._implicators),
            "implicators_by_type": {
                str(t): len(implicators) for t, implicators in self._implicators.items()
            },
        }

    def __len__(self) -> int:
        """Number of distinct registered implicators."""
        return len(self._registered)

    def __contains__(self, type: Hashable) -> bool:
        """Check whether any implicator produces type."""
        return bool(self._implicators.get(type))

    def __repr__(self) -> str:
        return (
            f"Registry(store={type(self.store).__name__}, "
            f"tracer={type(self.tracer).__name__}, "
            f"implicators={len(self)})"
        )

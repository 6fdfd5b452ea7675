# implicate/inference/implicator.py

"""
Implicator: a rule deriving output types from input types of the same id.

An implicator holds one or more functions. All but the last are
conditions: they run in order and may cancel the attempt. The last one is
the producer, which writes outputs. Any of them may be a coroutine
function.
"""

from dataclasses import dataclass, field
import inspect
from typing import (
    Any, Callable, Dict, Hashable, Optional, Set, Tuple, TYPE_CHECKING
)

from implicate.inference.context import ImplicatorContext
from implicate.inference.errors import ImplicatorNotApplicableError
from implicate.tracing import TraceEvents

if TYPE_CHECKING:
    from implicate.inference.registry import Registry


RuleFunction = Callable[[ImplicatorContext], Any]


@dataclass
class ResolutionState:
    """
    Call state shared by everything inside one top-level Registry.get().

    Attributes:
        id: Entity under resolution
        resolver: Registry resolving nested inputs
        values: Values known so far in this resolution (mutated in place)
        in_flight: Types currently being derived, for cycle detection
    """
    id: Hashable
    resolver: "Registry"
    values: Dict[Hashable, Any] = field(default_factory=dict)
    in_flight: Set[Hashable] = field(default_factory=set)


async def _call(function: RuleFunction, ctx: ImplicatorContext) -> None:
    result = function(ctx)
    if inspect.isawaitable(result):
        await result


@dataclass(frozen=True, eq=False)
class Implicator:
    """
    Immutable derivation rule.

    Attributes:
        input_types: Types that must resolve before the rule runs, in order
        output_types: Types the rule may produce
        functions: Conditions followed by the producer
        name: Label for traces and docs (defaults to the producer's name)
    """
    input_types: Tuple[Hashable, ...]
    output_types: Tuple[Hashable, ...]
    functions: Tuple[RuleFunction, ...]
    name: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_types", tuple(self.input_types))
        object.__setattr__(self, "output_types", tuple(self.output_types))
        object.__setattr__(self, "functions", tuple(self.functions))
        if not self.name and self.functions:
            object.__setattr__(
                self, "name", getattr(self.producer, "__name__", "implicator")
            )

    @property
    def conditions(self) -> Tuple[RuleFunction, ...]:
        return self.functions[:-1]

    @property
    def producer(self) -> RuleFunction:
        return self.functions[-1]

    async def attempt(self, state: ResolutionState) -> bool:
        """
        Try to run this implicator for state.id.

        Inputs are resolved through state.resolver first. On success
        the outputs written by the producer are merged into state.values.

        Returns:
            True if the producer ran, False if the implicator was not
            applicable (unresolved input, cancelled condition, or a read of
            an undeclared input)
        """
        resolver = state.resolver
        values = state.values

        # Every input goes through the resolver: stored values shadow
        # anything derived into `values` earlier in this resolution
        for input_type in self.input_types:
            value = await resolver.resolve(input_type, state)
            if value is None:
                resolver.trace(TraceEvents.IMPLICATOR_NOT_APPLICABLE, {
                    "id": state.id, "implicator": self,
                    "reason": f"input '{input_type}' unresolved",
                })
                return False
            values[input_type] = value

        ctx = ImplicatorContext(self, state)

        try:
            for condition in self.conditions:
                await _call(condition, ctx)
                if not ctx.still_valid:
                    break

            if not ctx.still_valid:
                resolver.trace(TraceEvents.IMPLICATOR_CANCELLED, {
                    "id": state.id, "implicator": self,
                })
                return False

            await _call(self.producer, ctx)
        except ImplicatorNotApplicableError as e:
            resolver.trace(TraceEvents.IMPLICATOR_NOT_APPLICABLE, {
                "id": state.id, "implicator": self, "reason": e.reason,
            })
            return False

        values.update(ctx.output_values)
        return True

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "input_types": list(self.input_types),
            "output_types": list(self.output_types),
            "conditions": len(self.conditions),
        }

    def __repr__(self) -> str:
        inputs = ", ".join(map(str, self.input_types))
        outputs = ", ".join(map(str, self.output_types))
        return f"Implicator({self.name!r}: [{inputs}] -> [{outputs}])"

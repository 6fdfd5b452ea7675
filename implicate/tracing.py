# implicate/tracing.py

"""
Tracers: sinks for structured resolution lifecycle events.

The registry calls tracer.log(event_name, attributes) at each step of a
resolution. Tracers must not return anything meaningful, and a failing
tracer never fails a resolution (the registry guards every call).
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from implicate.logger import StructuredLogger, logger as default_logger


class TraceEvents:
    """Event names emitted by the registry and implicators."""
    GET_INVOKED = "registry.get.invoked"
    GET_RETURNED = "registry.get.returned"
    GET_CYCLE = "registry.get.cycle"
    IMPLICATOR_ATTEMPTED = "implicator.attempted"
    IMPLICATOR_PUT = "implicator.put"
    IMPLICATOR_CANCELLED = "implicator.cancelled"
    IMPLICATOR_NOT_APPLICABLE = "implicator.not_applicable"


@runtime_checkable
class Tracer(Protocol):
    """Contract for trace sinks."""

    def log(self, event_name: str, attributes: Dict[str, Any]) -> None:
        ...


class NullTracer:
    """Tracer that drops every event. Default for a Registry."""

    def log(self, event_name: str, attributes: Dict[str, Any]) -> None:
        pass


def _summarize_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return f"Class::{type(value).__name__}"


class DebugTracer:
    """
    Tracer that writes every event through the structured logger.

    Implicators are shown as [input_types, output_types]; values that are
    not plain scalars are shown as their class name.
    """

    def __init__(
        self,
        structured_logger: Optional[StructuredLogger] = None,
        log_values: bool = True,
        level: int = logging.DEBUG,
    ):
        self._logger = structured_logger or default_logger
        self._log_values = log_values
        self._level = level

    def log(self, event_name: str, attributes: Dict[str, Any]) -> None:
        attributes = dict(attributes)
        implicator = attributes.get("implicator")
        if implicator is not None:
            attributes["implicator"] = [
                list(implicator.input_types),
                list(implicator.output_types),
            ]
        if "value" in attributes:
            if self._log_values:
                attributes["value"] = _summarize_value(attributes["value"])
            else:
                del attributes["value"]
        self._logger.event(event_name, level=self._level, **attributes)


@dataclass
class TraceEvent:
    """
    A recorded trace event.

    Attributes:
        name: Event name (see TraceEvents)
        attributes: Event attributes as passed by the emitter
        timestamp: When the event was recorded
    """
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        attributes = dict(self.attributes)
        implicator = attributes.get("implicator")
        if implicator is not None and hasattr(implicator, "describe"):
            attributes["implicator"] = implicator.describe()
        return {
            "name": self.name,
            "timestamp": self.timestamp.isoformat(),
            "attributes": attributes,
        }


class RecordingTracer:
    """
    Tracer that keeps a bounded history of events.

    Useful in tests and for post-mortem inspection of a resolution.
    """

    def __init__(self, history_size: int = 1000):
        self._history: List[TraceEvent] = []
        self._history_size = history_size

    def log(self, event_name: str, attributes: Dict[str, Any]) -> None:
        self._history.append(TraceEvent(name=event_name, attributes=dict(attributes)))
        if len(self._history) > self._history_size:
            self._history.pop(0)

    def get_history(
        self,
        event_name: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[TraceEvent]:
        """
        Get recorded events, oldest first.

        Args:
            event_name: Only return events with this name
            limit: Only return the most recent `limit` events
        """
        events = self._history
        if event_name:
            events = [e for e in events if e.name == event_name]
        if limit is not None:
            events = events[-limit:]
        return list(events)

    def event_names(self) -> List[str]:
        return [e.name for e in self._history]

    def clear_history(self) -> None:
        self._history.clear()

    def __len__(self) -> int:
        return len(self._history)

    def __repr__(self) -> str:
        return f"RecordingTracer(events={len(self._history)})"

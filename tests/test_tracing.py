"""
Tests for tracers (NullTracer, DebugTracer, RecordingTracer).

Run with: pytest tests/test_tracing.py -v
"""

import logging

from implicate.inference.implicator import Implicator
from implicate.tracing import (
    DebugTracer,
    NullTracer,
    RecordingTracer,
    TraceEvent,
    TraceEvents,
    Tracer,
)


class CapturingLogger:
    """Stand-in for StructuredLogger.event()."""

    def __init__(self):
        self.events = []

    def event(self, event_type, level=logging.INFO, **kwargs):
        self.events.append((event_type, level, kwargs))


def make_implicator():
    return Implicator(input_types=["a"], output_types=["b", "c"], functions=[lambda ctx: None], name="rule")


class TestNullTracer:

    def test_log_returns_none(self):
        assert NullTracer().log(TraceEvents.GET_INVOKED, {"type": "a", "id": 1}) is None

    def test_satisfies_protocol(self):
        assert isinstance(NullTracer(), Tracer)
        assert isinstance(RecordingTracer(), Tracer)
        assert isinstance(DebugTracer(structured_logger=CapturingLogger()), Tracer)


class TestDebugTracer:

    def test_implicator_is_summarized(self):
        captured = CapturingLogger()
        tracer = DebugTracer(structured_logger=captured)

        tracer.log(TraceEvents.IMPLICATOR_ATTEMPTED, {"type": "b", "id": 1, "implicator": make_implicator()})

        name, level, attributes = captured.events[0]
        assert name == "implicator.attempted"
        assert level == logging.DEBUG
        assert attributes["implicator"] == [["a"], ["b", "c"]]

    def test_object_values_show_class_name(self):
        captured = CapturingLogger()
        tracer = DebugTracer(structured_logger=captured)

        tracer.log(TraceEvents.GET_RETURNED, {"type": "b", "id": 1, "value": {"k": 1}})
        tracer.log(TraceEvents.GET_RETURNED, {"type": "b", "id": 1, "value": "plain"})

        assert captured.events[0][2]["value"] == "Class::dict"
        assert captured.events[1][2]["value"] == "plain"

    def test_values_can_be_omitted(self):
        captured = CapturingLogger()
        tracer = DebugTracer(structured_logger=captured, log_values=False)

        tracer.log(TraceEvents.IMPLICATOR_PUT, {"type": "b", "id": 1, "value": "secret"})

        assert "value" not in captured.events[0][2]

    def test_does_not_mutate_attributes(self):
        tracer = DebugTracer(structured_logger=CapturingLogger())
        implicator = make_implicator()
        attributes = {"implicator": implicator, "value": [1]}

        tracer.log(TraceEvents.GET_RETURNED, attributes)

        assert attributes["implicator"] is implicator
        assert attributes["value"] == [1]

    def test_custom_level(self):
        captured = CapturingLogger()
        DebugTracer(structured_logger=captured, level=logging.INFO).log("x", {})
        assert captured.events[0][1] == logging.INFO


class TestRecordingTracer:

    def test_records_events_in_order(self):
        tracer = RecordingTracer()
        tracer.log(TraceEvents.GET_INVOKED, {"type": "a"})
        tracer.log(TraceEvents.GET_RETURNED, {"type": "a", "value": 1})

        assert tracer.event_names() == ["registry.get.invoked", "registry.get.returned"]
        assert len(tracer) == 2

    def test_filter_and_limit(self):
        tracer = RecordingTracer()
        for i in range(5):
            tracer.log(TraceEvents.GET_INVOKED, {"i": i})
            tracer.log(TraceEvents.GET_RETURNED, {"i": i})

        invoked = tracer.get_history(TraceEvents.GET_INVOKED)
        latest = tracer.get_history(TraceEvents.GET_RETURNED, limit=2)

        assert [e.attributes["i"] for e in invoked] == [0, 1, 2, 3, 4]
        assert [e.attributes["i"] for e in latest] == [3, 4]

    def test_history_is_bounded(self):
        tracer = RecordingTracer(history_size=3)
        for i in range(10):
            tracer.log("event", {"i": i})

        assert [e.attributes["i"] for e in tracer.get_history()] == [7, 8, 9]

    def test_clear_history(self):
        tracer = RecordingTracer()
        tracer.log("event", {})
        tracer.clear_history()
        assert tracer.get_history() == []
        assert repr(tracer) == "RecordingTracer(events=0)"

    def test_recorded_attributes_are_copied(self):
        tracer = RecordingTracer()
        attributes = {"type": "a"}
        tracer.log("event", attributes)
        attributes["type"] = "changed"

        assert tracer.get_history()[0].attributes == {"type": "a"}


class TestTraceEvent:

    def test_to_dict_describes_implicator(self):
        event = TraceEvent(name=TraceEvents.GET_RETURNED, attributes={"implicator": make_implicator(), "value": 1})

        data = event.to_dict()

        assert data["name"] == "registry.get.returned"
        assert data["attributes"]["implicator"]["name"] == "rule"
        assert data["attributes"]["value"] == 1
        assert "timestamp" in data

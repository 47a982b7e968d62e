"""Tests for routetrace.core.activity.models - spans and contexts."""

import pytest
from pydantic import ValidationError

from routetrace.core.activity.models import (
    ActivityOperation,
    ActivitySpan,
    FinishReason,
    RouteContext,
    SpanSource,
    StartContext,
)


def _span(**overrides) -> ActivitySpan:
    kwargs = {"operation": ActivityOperation.navigation, "route_name": "/", "start_time": 100.0}
    kwargs.update(overrides)
    return ActivitySpan(**kwargs)


class TestActivitySpanConstruction:

    def test_defaults(self):
        span = _span()
        assert span.end_time is None
        assert span.finish_reason is None
        assert span.child_count == 0
        assert span.sampled is True
        assert span.finished is False
        assert span.duration is None

    def test_ids_are_unique(self):
        assert _span().id != _span().id

    def test_negative_child_count_rejected(self):
        span = _span()
        with pytest.raises(ValidationError):
            span.child_count = -1

    @pytest.mark.parametrize(
        "field,value",
        [
            ("id", "x" * 32),
            ("operation", ActivityOperation.pageload),
            ("route_name", "/hijacked"),
            ("source", SpanSource.custom),
            ("start_time", 0.0),
            ("sampled", False),
            ("context", StartContext(name="/other")),
        ],
    )
    def test_identity_fields_read_only_while_active(self, field, value):
        span = _span()
        before = getattr(span, field)
        with pytest.raises(ValidationError):
            setattr(span, field, value)
        assert getattr(span, field) == before

    def test_child_count_writable_while_active(self):
        span = _span()
        span.child_count = 2
        assert span.child_count == 2

    def test_finish_reason_wire_values(self):
        assert [r.value for r in FinishReason] == [
            "idleTimeout",
            "finalTimeout",
            "heartbeatFailed",
            "external",
            "interactionInterrupted",
            "cancelled",
        ]


class TestActivitySpanFinish:

    def test_finish_sets_end_time_and_reason(self):
        span = _span()
        assert span.finish(FinishReason.idle_timeout, 1100.0) is True
        assert span.end_time == 1100.0
        assert span.finish_reason == FinishReason.idle_timeout
        assert span.duration == 1000.0

    def test_finish_only_once(self):
        span = _span()
        span.finish(FinishReason.external, 200.0)
        assert span.finish(FinishReason.final_timeout, 900.0) is False
        assert span.finish_reason == FinishReason.external
        assert span.end_time == 200.0

    def test_end_time_never_before_start(self):
        span = _span()
        span.finish(FinishReason.cancelled, 50.0)
        assert span.end_time == 100.0

    def test_finished_span_is_read_only(self):
        span = _span()
        span.finish(FinishReason.external, 200.0)
        with pytest.raises(AttributeError):
            span.child_count = 3
        with pytest.raises(AttributeError):
            span.route_name = "/other"


class TestContexts:

    def test_start_context_is_frozen(self):
        context = StartContext(name="/a")
        with pytest.raises(ValidationError):
            context.name = "/b"

    def test_start_context_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            StartContext(name="/a", metadata={"x": 1})

    def test_route_context_holds_value_snapshot(self):
        context = StartContext(name="/a", source=SpanSource.route)
        route = RouteContext(route_name="/a", source=SpanSource.route, context=context)
        updated = context.model_copy(update={"name": "/b"})
        assert route.context.name == "/a"
        assert updated.name == "/b"

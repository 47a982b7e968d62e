"""Activity spans and the idle tracker that finishes them."""

from routetrace.core.activity.exporters import (
    ActivityExporter,
    ConsoleExporter,
    InMemoryExporter,
    NoOpExporter,
)
from routetrace.core.activity.models import (
    ActivityOperation,
    ActivitySpan,
    FinishReason,
    RouteContext,
    SpanSource,
    StartContext,
)
from routetrace.core.activity.tracker import HEARTBEAT_MISS_LIMIT, IdleActivityTracker

__all__ = [
    "ActivityExporter",
    "ActivityOperation",
    "ActivitySpan",
    "ConsoleExporter",
    "FinishReason",
    "HEARTBEAT_MISS_LIMIT",
    "IdleActivityTracker",
    "InMemoryExporter",
    "NoOpExporter",
    "RouteContext",
    "SpanSource",
    "StartContext",
]

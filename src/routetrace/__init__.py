"""routetrace: idle-detected activity spans and interaction-to-route correlation."""

from routetrace.core.activity import (
    ActivityExporter,
    ActivityOperation,
    ActivitySpan,
    ConsoleExporter,
    FinishReason,
    IdleActivityTracker,
    InMemoryExporter,
    NoOpExporter,
    RouteContext,
    SpanSource,
    StartContext,
)
from routetrace.core.clock import AsyncioScheduler, Scheduler, VirtualScheduler
from routetrace.core.errors import ConfigurationError, RouteTraceError
from routetrace.core.interaction import (
    EntryKind,
    InteractionAnnotations,
    InteractionCorrelationCache,
    InteractionEntry,
    InteractionRecord,
)
from routetrace.core.monitor import ActivityMonitor
from routetrace.infrastructure.config import TrackerConfig, load_config

__all__ = [
    "ActivityExporter",
    "ActivityMonitor",
    "ActivityOperation",
    "ActivitySpan",
    "AsyncioScheduler",
    "ConfigurationError",
    "ConsoleExporter",
    "EntryKind",
    "FinishReason",
    "IdleActivityTracker",
    "InMemoryExporter",
    "InteractionAnnotations",
    "InteractionCorrelationCache",
    "InteractionEntry",
    "InteractionRecord",
    "NoOpExporter",
    "RouteContext",
    "RouteTraceError",
    "Scheduler",
    "SpanSource",
    "StartContext",
    "TrackerConfig",
    "VirtualScheduler",
    "load_config",
]

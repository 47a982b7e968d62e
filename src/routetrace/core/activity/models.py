"""Activity span data models."""

from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ActivityOperation(StrEnum):
    pageload = "pageload"
    navigation = "navigation"
    interaction = "interaction"


class FinishReason(StrEnum):
    idle_timeout = "idleTimeout"
    final_timeout = "finalTimeout"
    heartbeat_failed = "heartbeatFailed"
    external = "external"
    interaction_interrupted = "interactionInterrupted"
    cancelled = "cancelled"


class SpanSource(StrEnum):
    url = "url"
    route = "route"
    view = "view"
    component = "component"
    task = "task"
    custom = "custom"


class StartContext(BaseModel):
    """Typed options a collaborator passes when starting an activity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = None
    source: SpanSource = SpanSource.url
    origin: str | None = None
    sampled: bool = True
    start_time: float | None = None
    trace_id: str | None = None
    parent_span_id: str | None = None
    action: str | None = None
    url: str | None = None


class RouteContext(BaseModel):
    """Snapshot of the route that was active when it was read."""

    model_config = ConfigDict(frozen=True)

    route_name: str
    source: SpanSource
    context: StartContext


class ActivitySpan(BaseModel):
    """A timed page load, route change or interaction.

    Only ``child_count``, ``end_time`` and ``finish_reason`` change while the
    span is active. ``end_time`` and ``finish_reason`` are written together by
    ``finish()``; after that the span rejects any further assignment.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: uuid4().hex, frozen=True)
    operation: ActivityOperation = Field(frozen=True)
    route_name: str = Field(frozen=True)
    source: SpanSource = Field(default=SpanSource.url, frozen=True)
    start_time: float = Field(frozen=True)
    end_time: float | None = None
    sampled: bool = Field(default=True, frozen=True)
    finish_reason: FinishReason | None = None
    child_count: int = Field(default=0, ge=0)
    context: StartContext = Field(default_factory=StartContext, frozen=True)

    def __setattr__(self, name, value):
        if self.end_time is not None:
            raise AttributeError(f"ActivitySpan {self.id[:8]} is finished and cannot be modified")
        super().__setattr__(name, value)

    @property
    def finished(self) -> bool:
        return self.end_time is not None

    @property
    def duration(self) -> float | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def finish(self, reason: FinishReason, end_time: float) -> bool:
        """Set the terminal state. Returns False if the span was already finished."""
        if self.finished:
            return False
        # finish_reason first: assigning end_time freezes the span
        self.finish_reason = reason
        self.end_time = max(end_time, self.start_time)
        return True

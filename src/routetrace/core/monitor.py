"""ActivityMonitor: the surface the browser instrumentation layer talks to.

One monitor wires together:

- a route tracker for pageload / navigation spans
- an interaction tracker for ``ui.action.*`` spans
- an interaction cache that stamps performance entries with the route
  published by the route tracker

Every method returns synchronously and none of them raise for out-of-order
input.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from routetrace.core.activity.exporters import ActivityExporter
from routetrace.core.activity.models import (
    ActivityOperation,
    ActivitySpan,
    FinishReason,
    RouteContext,
    StartContext,
)
from routetrace.core.activity.tracker import (
    BeforeFinishCallback,
    BeforeStartHook,
    IdleActivityTracker,
)
from routetrace.core.clock.scheduler import AsyncioScheduler, Scheduler
from routetrace.core.interaction.cache import InteractionCorrelationCache
from routetrace.core.interaction.models import (
    InteractionAnnotations,
    InteractionEntry,
    InteractionRecord,
)
from routetrace.infrastructure.config import TrackerConfig
from routetrace.infrastructure.logging import get_logger
from routetrace.infrastructure.utility.pydantic_validation import format_validation_error

logger = get_logger(__name__)

DEFAULT_INTERACTION_ACTION = "ui.action.click"
ROUTE_OPERATIONS = (ActivityOperation.pageload, ActivityOperation.navigation)

AnnotationProvider = Callable[[], InteractionAnnotations | None]


class ActivityMonitor:
    def __init__(
        self,
        config: TrackerConfig | None = None,
        scheduler: Scheduler | None = None,
        exporter: ActivityExporter | None = None,
        before_start: BeforeStartHook | None = None,
        annotation_provider: AnnotationProvider | None = None,
    ):
        self._config = config or TrackerConfig()
        scheduler = scheduler or AsyncioScheduler()
        self._routes = IdleActivityTracker(self._config, scheduler, exporter, before_start)
        self._interactions = IdleActivityTracker(self._config, scheduler, exporter)
        self._cache = InteractionCorrelationCache(self._routes, self._config.max_interactions)
        self._annotation_provider = annotation_provider

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def route_tracker(self) -> IdleActivityTracker:
        return self._routes

    @property
    def interaction_tracker(self) -> IdleActivityTracker:
        return self._interactions

    @property
    def interaction_cache(self) -> InteractionCorrelationCache:
        return self._cache

    # ------------------------------------------------------------------
    # Inbound signals
    # ------------------------------------------------------------------

    def start_activity(
        self,
        kind: ActivityOperation | str,
        route_name: str,
        context: StartContext | None = None,
    ) -> ActivitySpan | None:
        try:
            kind = ActivityOperation(kind)
        except ValueError:
            logger.warning(f"start_activity with unknown kind {kind!r}, ignoring")
            return None
        if kind not in ROUTE_OPERATIONS:
            logger.warning(f"start_activity only handles pageload and navigation, got {kind}")
            return None
        if self._interactions.is_active:
            self._interactions.request_finish(FinishReason.interaction_interrupted)
        return self._routes.start(kind, route_name, context)

    def start_interaction(
        self,
        action: str = DEFAULT_INTERACTION_ACTION,
        sampled: bool = True,
    ) -> ActivitySpan | None:
        if not self._config.enable_interactions:
            logger.debug(f"Interaction spans disabled, not creating {action} span")
            return None

        route_span = self._routes.current_span()
        if route_span is not None:
            logger.warning(
                f"Did not create {action} span because a {route_span.operation} span is in progress."
            )
            return None

        if self._interactions.is_active:
            self._interactions.request_finish(FinishReason.interaction_interrupted)

        route = self._routes.current_route_context()
        if route is None:
            logger.warning(f"Did not create {action} span because no route has been established.")
            return None

        context = StartContext(source=route.source, action=action, sampled=sampled)
        return self._interactions.start(ActivityOperation.interaction, route.route_name, context)

    def child_started(self) -> str | None:
        tracker = self._active_tracker()
        if tracker is None:
            logger.debug("Child started with no active span, ignoring")
            return None
        return tracker.notify_child_started()

    def child_ended(self, span_id: str | None = None) -> None:
        if span_id is None:
            tracker = self._active_tracker()
        else:
            tracker = next(
                (t for t in (self._routes, self._interactions) if _owns(t, span_id)),
                None,
            )
        if tracker is None:
            logger.debug("Child ended for a span that is no longer active, ignoring")
            return
        tracker.notify_child_ended(span_id)

    def force_finish(self, reason: FinishReason | str = FinishReason.external) -> ActivitySpan | None:
        tracker = self._active_tracker()
        if tracker is None:
            logger.debug(f"force_finish({reason}) with no active span, ignoring")
            return None
        return tracker.request_finish(reason)

    def observe_interaction_entries(
        self,
        entries: Iterable[InteractionEntry | Mapping[str, Any]],
    ) -> int:
        """Feed a batch of event / first-input entries. Returns how many changed the cache."""
        if not self._config.enable_inp:
            return 0

        annotations = self._collect_annotations()
        changed = 0
        for raw in entries:
            entry = _coerce_entry(raw)
            if entry is not None and self._cache.observe(entry, annotations):
                changed += 1
        return changed

    def document_ready(self) -> None:
        """The document reached 'interactive' or 'complete'."""
        self._routes.send_auto_finish_signal()

    def document_hidden(self) -> list[ActivitySpan]:
        """The tab moved to the background. Active spans are cancelled."""
        if not self._config.mark_background_span:
            return []
        cancelled = []
        for tracker in (self._interactions, self._routes):
            span = tracker.current_span()
            if span is None:
                continue
            logger.debug(f"Document hidden, cancelling {span.operation} span '{span.route_name}'")
            cancelled.append(tracker.request_finish(FinishReason.cancelled))
        return cancelled

    def register_before_finish(self, callback: BeforeFinishCallback) -> None:
        self._routes.register_before_finish(callback)
        self._interactions.register_before_finish(callback)

    # ------------------------------------------------------------------
    # Outbound queries
    # ------------------------------------------------------------------

    def current_span(self) -> ActivitySpan | None:
        tracker = self._active_tracker()
        return tracker.current_span() if tracker else None

    def current_route_context(self) -> RouteContext | None:
        return self._routes.current_route_context()

    def snapshot_interactions(self) -> tuple[InteractionRecord, ...]:
        return self._cache.peek_all()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _active_tracker(self) -> IdleActivityTracker | None:
        if self._routes.is_active:
            return self._routes
        if self._interactions.is_active:
            return self._interactions
        return None

    def _collect_annotations(self) -> InteractionAnnotations:
        annotations = None
        if self._annotation_provider is not None:
            try:
                annotations = self._annotation_provider()
            except Exception as e:
                logger.error(f"Annotation provider failed: {e}")
        annotations = annotations or InteractionAnnotations()
        active = self.current_span()
        return annotations.model_copy(update={"active_span_id": active.id if active else None})


def _owns(tracker: IdleActivityTracker, span_id: str) -> bool:
    span = tracker.current_span()
    return span is not None and span.id == span_id


def _coerce_entry(raw: InteractionEntry | Mapping[str, Any]) -> InteractionEntry | None:
    if isinstance(raw, InteractionEntry):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning(f"Ignoring interaction entry of type {type(raw).__name__}")
        return None
    try:
        return InteractionEntry.model_validate(raw)
    except ValidationError as e:
        logger.warning(format_validation_error(e, "interaction entry"))
        return None

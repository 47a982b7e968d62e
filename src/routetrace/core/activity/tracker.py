"""Idle-detected activity spans.

An IdleActivityTracker owns at most one ActivitySpan at a time and decides
when it ends:

- idle timeout: no open child operations for ``idle_timeout_ms``
- final timeout: ``final_timeout_ms`` after start, regardless of activity
- heartbeat: no forward progress across three consecutive heartbeat ticks
- explicit: ``request_finish()`` or supersession by a new ``start()``

Whichever fires first wins. Out-of-order and duplicate signals are absorbed
and logged at debug level; the only exception the tracker raises is
ConfigurationError at construction.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial

from routetrace.core.activity.exporters import ActivityExporter, NoOpExporter
from routetrace.core.activity.models import (
    ActivityOperation,
    ActivitySpan,
    FinishReason,
    RouteContext,
    SpanSource,
    StartContext,
)
from routetrace.core.clock.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from routetrace.infrastructure.config import TrackerConfig
from routetrace.infrastructure.logging import describe_span, get_logger

logger = get_logger(__name__)

HEARTBEAT_MISS_LIMIT = 3

BeforeStartHook = Callable[[StartContext], StartContext]
BeforeFinishCallback = Callable[[ActivitySpan], None]


@dataclass
class TrackerClock:
    """Timer state for the active span. Discarded when the span finishes."""

    last_activity_timestamp: float
    previous_progress: float = 0.0
    heartbeat_miss_count: int = 0
    auto_finish_allowed: bool = True
    idle_timer: TimerHandle | None = None
    heartbeat_timer: TimerHandle | None = None
    final_timeout_timer: TimerHandle | None = None

    def cancel_idle(self) -> None:
        if self.idle_timer is not None:
            self.idle_timer.cancel()
            self.idle_timer = None

    def cancel_all(self) -> None:
        self.cancel_idle()
        for timer in (self.heartbeat_timer, self.final_timeout_timer):
            if timer is not None:
                timer.cancel()
        self.heartbeat_timer = None
        self.final_timeout_timer = None


class IdleActivityTracker:
    """Owns the lifecycle of one idle-detected activity span at a time.

    Args:
        config: Timeouts. Defaults to ``TrackerConfig()``.
        scheduler: Timer source. Defaults to the running asyncio loop.
        exporter: Receives every finished span.
        before_start: Hook that may rewrite the StartContext (including the
            route name) before the span is created.
        **options: Overrides applied on top of ``config``, validated the same way.

    Raises:
        ConfigurationError: If a timeout is not a positive number.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        scheduler: Scheduler | None = None,
        exporter: ActivityExporter | None = None,
        before_start: BeforeStartHook | None = None,
        **options,
    ):
        config = config or TrackerConfig()
        if options:
            config = TrackerConfig(**{**config.model_dump(), **options})
        self._config = config
        self._scheduler = scheduler or AsyncioScheduler()
        self._exporter = exporter or NoOpExporter()
        self._before_start = before_start
        self._before_finish: list[BeforeFinishCallback] = []
        self._wait_for_signal: set[ActivityOperation] = (
            {ActivityOperation.pageload} if config.wait_for_pageload_finish_signal else set()
        )

        self._span: ActivitySpan | None = None
        self._clock: TrackerClock | None = None
        self._route: RouteContext | None = None

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def is_active(self) -> bool:
        return self._span is not None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_span(self) -> ActivitySpan | None:
        return self._span

    def current_route_context(self) -> RouteContext | None:
        return self._route

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(
        self,
        operation: ActivityOperation | str,
        route_name: str,
        start_context: StartContext | None = None,
    ) -> ActivitySpan:
        """Start a new span, finishing the active one with ``external`` first.

        A ``name`` set on ``start_context`` takes precedence over ``route_name``.

        Raises:
            ValueError: If ``operation`` is not an ActivityOperation value.
        """
        operation = ActivityOperation(operation)
        if self._span is not None:
            logger.debug(f"Finishing current span before starting {operation}: {describe_span(self._span)}")
            self._finish(FinishReason.external)

        context = start_context or StartContext()
        context = context.model_copy(update={"name": context.name or route_name})
        context = self._apply_before_start(context)
        route_name = context.name

        if not context.sampled:
            logger.info(f"Will not send {operation} span for '{route_name}': sampled=False")

        now = self._scheduler.now()
        start_time = context.start_time if context.start_time is not None else now

        self._route = RouteContext(route_name=route_name, source=context.source, context=context)
        span = ActivitySpan(
            operation=operation,
            route_name=route_name,
            source=context.source,
            start_time=start_time,
            sampled=context.sampled,
            context=context,
        )
        self._span = span
        self._clock = TrackerClock(
            last_activity_timestamp=start_time,
            auto_finish_allowed=operation not in self._wait_for_signal,
        )
        self._clock.final_timeout_timer = self._scheduler.call_later(
            self._config.final_timeout_ms, partial(self._on_final_timeout, span.id)
        )
        self._arm_idle()
        self._schedule_heartbeat()

        logger.info(f"Started {operation} span '{route_name}' [{span.id[:8]}]")
        return span

    def request_finish(self, reason: FinishReason | str = FinishReason.external) -> ActivitySpan | None:
        """Finish the active span now. Returns the finished span, or None if idle."""
        try:
            reason = FinishReason(reason)
        except ValueError:
            logger.warning(f"request_finish with unknown reason {reason!r}, ignoring")
            return None
        if self._span is None:
            logger.debug(f"request_finish({reason}) with no active span, ignoring")
            return None
        return self._finish(reason)

    def send_auto_finish_signal(self) -> None:
        """Allow a span that waits for a finish signal to end on idle."""
        if self._span is None or self._clock is None:
            return
        if self._clock.auto_finish_allowed:
            return
        self._clock.auto_finish_allowed = True
        logger.debug(f"Auto finish signal received for {describe_span(self._span)}")
        if self._span.child_count == 0:
            self._arm_idle()

    def register_before_finish(self, callback: BeforeFinishCallback) -> None:
        self._before_finish.append(callback)

    # ------------------------------------------------------------------
    # Child activity
    # ------------------------------------------------------------------

    def notify_child_started(self, span_id: str | None = None) -> str | None:
        """Attribute a new child operation to the active span.

        Returns the id of the span the child was attributed to, or None if
        the signal was ignored.
        """
        span = self._accept_signal("started", span_id)
        if span is None:
            return None
        span.child_count += 1
        self._touch()
        self._clock.cancel_idle()
        return span.id

    def notify_child_ended(self, span_id: str | None = None) -> None:
        span = self._accept_signal("ended", span_id)
        if span is None:
            return
        if span.child_count == 0:
            logger.debug(f"Child ended with no open children on {describe_span(span)}, ignoring")
            return
        span.child_count -= 1
        self._touch()
        if span.child_count == 0:
            self._arm_idle()

    @contextmanager
    def child_activity(self) -> Iterator[str | None]:
        span_id = self.notify_child_started()
        try:
            yield span_id
        finally:
            if span_id is not None:
                self.notify_child_ended(span_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _accept_signal(self, kind: str, span_id: str | None) -> ActivitySpan | None:
        span = self._span
        if span is None:
            logger.debug(f"Child {kind} with no active span, ignoring")
            return None
        if span_id is not None and span_id != span.id:
            logger.debug(f"Child {kind} for stale span [{span_id[:8]}], ignoring")
            return None
        return span

    def _apply_before_start(self, context: StartContext) -> StartContext:
        if self._before_start is None:
            return context
        try:
            updated = self._before_start(context)
        except Exception as e:
            logger.error(f"before_start hook failed for '{context.name}': {e}")
            return context
        if not isinstance(updated, StartContext) or not updated.name:
            logger.error(f"before_start hook returned an invalid context for '{context.name}', ignoring it")
            return context
        if updated.name != context.name:
            updated = updated.model_copy(update={"source": SpanSource.custom})
        return updated

    def _touch(self) -> None:
        self._clock.last_activity_timestamp = self._scheduler.now()

    def _arm_idle(self) -> None:
        self._clock.cancel_idle()
        self._clock.idle_timer = self._scheduler.call_later(
            self._config.idle_timeout_ms, partial(self._on_idle_timeout, self._span.id)
        )

    def _schedule_heartbeat(self) -> None:
        self._clock.heartbeat_timer = self._scheduler.call_later(
            self._config.heartbeat_interval_ms, partial(self._on_heartbeat, self._span.id)
        )

    def _is_current(self, span_id: str) -> bool:
        return self._span is not None and self._span.id == span_id

    def _on_idle_timeout(self, span_id: str) -> None:
        if not self._is_current(span_id):
            return
        self._clock.idle_timer = None
        if self._span.child_count > 0:
            return
        if not self._clock.auto_finish_allowed:
            logger.debug(f"Idle deadline reached, waiting for finish signal: {describe_span(self._span)}")
            return
        self._finish(FinishReason.idle_timeout)

    def _on_final_timeout(self, span_id: str) -> None:
        if self._is_current(span_id):
            self._finish(FinishReason.final_timeout)

    def _on_heartbeat(self, span_id: str) -> None:
        if not self._is_current(span_id):
            return
        clock = self._clock
        progress = clock.last_activity_timestamp - self._span.start_time
        if progress == clock.previous_progress:
            clock.heartbeat_miss_count += 1
        else:
            clock.heartbeat_miss_count = 0
            clock.previous_progress = progress

        if clock.heartbeat_miss_count >= HEARTBEAT_MISS_LIMIT:
            logger.debug(f"No progress for {HEARTBEAT_MISS_LIMIT} heartbeats: {describe_span(self._span)}")
            self._finish(FinishReason.heartbeat_failed)
            return
        self._schedule_heartbeat()

    def _finish(self, reason: FinishReason) -> ActivitySpan:
        span, clock = self._span, self._clock
        clock.cancel_all()
        self._span = None
        self._clock = None
        span.finish(reason, self._scheduler.now())
        logger.info(f"Finished {describe_span(span)}")

        for callback in self._before_finish:
            try:
                callback(span)
            except Exception as e:
                logger.error(f"before_finish callback failed for [{span.id[:8]}]: {e}")
        try:
            self._exporter.export(span)
        except Exception as e:
            logger.error(f"Failed to export span [{span.id[:8]}]: {e}")
        return span

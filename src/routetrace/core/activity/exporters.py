"""Exporters receive finished activity spans.

Serialization and transport belong to the host; exporters here only hand
spans over. Failures are logged and never propagated into the tracker.
"""

from abc import ABC, abstractmethod

from routetrace.core.activity.models import ActivitySpan
from routetrace.infrastructure.logging import describe_span, get_logger

logger = get_logger(__name__)


class ActivityExporter(ABC):
    @abstractmethod
    def export(self, span: ActivitySpan) -> None: ...

    @abstractmethod
    def shutdown(self) -> None: ...


class NoOpExporter(ActivityExporter):
    def export(self, span: ActivitySpan) -> None:
        pass

    def shutdown(self) -> None:
        pass


class ConsoleExporter(ActivityExporter):
    def __init__(self, include_unsampled: bool = False):
        self._include_unsampled = include_unsampled

    def export(self, span: ActivitySpan) -> None:
        if not span.sampled and not self._include_unsampled:
            return
        marker = "v" if span.finish_reason in ("idleTimeout", "external") else "x"
        print(f"[{marker}] {describe_span(span)}")

    def shutdown(self) -> None:
        pass


class InMemoryExporter(ActivityExporter):
    """Keeps finished spans in a list, in finish order."""

    def __init__(self):
        self.spans: list[ActivitySpan] = []
        self._closed = False

    def export(self, span: ActivitySpan) -> None:
        if self._closed:
            logger.debug(f"Exporter closed, dropping {describe_span(span)}")
            return
        self.spans.append(span)

    def clear(self) -> None:
        self.spans.clear()

    def shutdown(self) -> None:
        self._closed = True

"""
Pytest configuration and shared fixtures.

Fixtures provided:
- scheduler: VirtualScheduler starting at t=0
- exporter: InMemoryExporter collecting finished spans
- config: TrackerConfig with short timeouts (idle=1000, final=30000, heartbeat=5000)
- tracker: IdleActivityTracker wired to scheduler + exporter
- route_provider: settable RouteContextProvider stub
- make_entry: factory for InteractionEntry
"""

import sys
from pathlib import Path

import pytest

# Add src to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from routetrace.core.activity.exporters import InMemoryExporter
from routetrace.core.activity.models import RouteContext, SpanSource, StartContext
from routetrace.core.activity.tracker import IdleActivityTracker
from routetrace.core.clock.scheduler import VirtualScheduler
from routetrace.core.interaction.models import EntryKind, InteractionEntry
from routetrace.infrastructure.config import TrackerConfig


# ============================================================================
# Clock & tracker fixtures
# ============================================================================

@pytest.fixture
def scheduler():
    """Provides a deterministic scheduler at t=0."""
    return VirtualScheduler()


@pytest.fixture
def exporter():
    """Provides an exporter that keeps finished spans in memory."""
    return InMemoryExporter()


@pytest.fixture
def config():
    """Provides the default timeouts."""
    return TrackerConfig(idle_timeout_ms=1000, final_timeout_ms=30000, heartbeat_interval_ms=5000)


@pytest.fixture
def tracker(config, scheduler, exporter):
    """Provides a tracker on the virtual clock."""
    return IdleActivityTracker(config, scheduler, exporter)


# ============================================================================
# Interaction fixtures
# ============================================================================

class StubRouteProvider:
    """RouteContextProvider whose route is set directly by the test."""

    def __init__(self):
        self.route: RouteContext | None = None

    def set_route(self, name: str, source: SpanSource = SpanSource.route) -> RouteContext:
        self.route = RouteContext(
            route_name=name,
            source=source,
            context=StartContext(name=name, source=source),
        )
        return self.route

    def current_route_context(self) -> RouteContext | None:
        return self.route


@pytest.fixture
def route_provider():
    """Provides a route provider with '/home' already established."""
    provider = StubRouteProvider()
    provider.set_route("/home")
    return provider


@pytest.fixture
def make_entry():
    """Factory for interaction entries (defaults to an 'event' entry)."""

    def _make(interaction_id: int, duration: float, start_time: float = 0.0, kind: EntryKind = EntryKind.event):
        return InteractionEntry(
            entry_kind=kind,
            interaction_id=interaction_id,
            duration=duration,
            start_time=start_time,
        )

    return _make

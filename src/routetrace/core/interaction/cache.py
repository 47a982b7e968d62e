"""Bounded correlation of interaction ids to the route active at the time.

At most ``max_interactions`` records are kept. When full, a new interaction
only gets in by evicting the shortest retained one, and only if it is
strictly longer. Among equally short records the oldest insertion goes
first. Records never expire by time.
"""

from collections.abc import Iterable

from routetrace.core.errors import ConfigurationError
from routetrace.core.interaction.models import (
    NO_INTERACTION_ID,
    EntryKind,
    InteractionAnnotations,
    InteractionEntry,
    InteractionRecord,
)
from routetrace.infrastructure.config import DEFAULT_MAX_INTERACTIONS
from routetrace.infrastructure.logging import get_logger
from routetrace.ports.outbound.route_context import RouteContextProvider

logger = get_logger(__name__)


class InteractionCorrelationCache:
    def __init__(
        self,
        route_provider: RouteContextProvider,
        max_interactions: int = DEFAULT_MAX_INTERACTIONS,
    ):
        if isinstance(max_interactions, bool) or not isinstance(max_interactions, int) or max_interactions <= 0:
            raise ConfigurationError(f"max_interactions must be a positive integer, got {max_interactions!r}")
        self._route_provider = route_provider
        self._max_interactions = max_interactions
        # dict keeps insertion order, used as the eviction tie-break
        self._records: dict[int, InteractionRecord] = {}

    @property
    def max_interactions(self) -> int:
        return self._max_interactions

    def __len__(self) -> int:
        return len(self._records)

    def get(self, interaction_id: int) -> InteractionRecord | None:
        return self._records.get(interaction_id)

    def peek_all(self) -> tuple[InteractionRecord, ...]:
        return tuple(self._records.values())

    def observe(
        self,
        entry: InteractionEntry,
        annotations: InteractionAnnotations | None = None,
    ) -> bool:
        """Fold one entry into the cache. Returns True if the cache changed."""
        interaction_id = entry.interaction_id
        if interaction_id == NO_INTERACTION_ID:
            return False

        if entry.entry_kind == EntryKind.first_input and self._has_matching_timing(entry):
            logger.debug(f"Duplicate first-input entry for interaction {interaction_id}, ignoring")
            return False

        existing = self._records.get(interaction_id)
        if existing is not None:
            merged = existing.merged(entry.duration)
            if merged is existing:
                return False
            self._records[interaction_id] = merged
            return True

        route = self._route_provider.current_route_context()
        if route is None:
            logger.debug(f"No route established, dropping interaction {interaction_id}")
            return False

        if len(self._records) >= self._max_interactions:
            weakest = min(self._records.values(), key=lambda record: record.duration)
            if entry.duration <= weakest.duration:
                return False
            del self._records[weakest.interaction_id]
            logger.debug(
                f"Evicted interaction {weakest.interaction_id} ({weakest.duration}ms) "
                f"for {interaction_id} ({entry.duration}ms)"
            )

        self._records[interaction_id] = InteractionRecord(
            interaction_id=interaction_id,
            duration=entry.duration,
            start_time=entry.start_time,
            route_name=route.route_name,
            parent_context=route.context,
            annotations=annotations or InteractionAnnotations(),
        )
        return True

    def observe_many(
        self,
        entries: Iterable[InteractionEntry],
        annotations: InteractionAnnotations | None = None,
    ) -> int:
        return sum(1 for entry in entries if self.observe(entry, annotations))

    def clear(self) -> None:
        self._records.clear()

    def _has_matching_timing(self, entry: InteractionEntry) -> bool:
        return any(
            record.duration == entry.duration and record.start_time == entry.start_time
            for record in self._records.values()
        )

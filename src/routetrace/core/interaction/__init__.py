"""Interaction-to-route correlation."""

from routetrace.core.interaction.cache import InteractionCorrelationCache
from routetrace.core.interaction.models import (
    NO_INTERACTION_ID,
    EntryKind,
    InteractionAnnotations,
    InteractionEntry,
    InteractionRecord,
)

__all__ = [
    "EntryKind",
    "InteractionAnnotations",
    "InteractionCorrelationCache",
    "InteractionEntry",
    "InteractionRecord",
    "NO_INTERACTION_ID",
]

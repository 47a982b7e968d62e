"""Interaction performance entries and the records correlated from them."""

from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from routetrace.core.activity.models import StartContext

NO_INTERACTION_ID = 0


class EntryKind(StrEnum):
    first_input = "first-input"
    event = "event"


class InteractionEntry(BaseModel):
    """A single event-timing entry as delivered by the performance observer."""

    model_config = ConfigDict(frozen=True)

    entry_kind: EntryKind = Field(
        validation_alias=AliasChoices("entry_kind", "entryType", "entryKind")
    )
    interaction_id: int = Field(
        ge=0, validation_alias=AliasChoices("interaction_id", "interactionId")
    )
    duration: float = Field(ge=0)
    start_time: float = Field(validation_alias=AliasChoices("start_time", "startTime"))


class InteractionAnnotations(BaseModel):
    """Context captured once, when an interaction is first recorded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str | None = None
    user_display: str | None = None
    replay_id: str | None = None
    active_span_id: str | None = None


class InteractionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    interaction_id: int
    duration: float
    start_time: float
    route_name: str
    parent_context: StartContext
    annotations: InteractionAnnotations = Field(default_factory=InteractionAnnotations)

    def merged(self, duration: float) -> "InteractionRecord":
        """Copy of this record keeping the longer of the two durations."""
        if duration <= self.duration:
            return self
        return self.model_copy(update={"duration": duration})

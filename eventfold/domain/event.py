from datetime import datetime, timezone
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information

    Note:
        Used as default_factory for Event.occurred_at to ensure all
        events are timestamped in UTC regardless of system timezone.
    """
    return datetime.now(tz=timezone.utc)


class Event(BaseModel):
    """Immutable fact about an aggregate at a specific version.

    Event is the core data structure in event sourcing. Each event represents
    something that happened to one aggregate in the past. Events are:

    - **Immutable**: Instances are frozen once created
    - **Ordered**: ``version`` positions the event in its aggregate's history
    - **Typed**: ``event_type`` is a stable discriminator used by serializers
    - **Timestamped**: ``occurred_at`` records when the event was produced (UTC)
    - **Traceable**: Events can carry correlation/causation IDs

    Subclasses add their payload as ordinary fields and must declare a
    non-empty ``event_type`` class variable. Name events in the past tense.

    Attributes:
        event_type: Discriminator registered with a serializer (class level).
        aggregate_id: Identity of the aggregate the event belongs to.
        version: Position in the aggregate's history (1 is the first event).
        occurred_at: Wall-clock instant the event was created.
        event_id: Unique identifier for this event instance.
        correlation_id: Optional correlation ID for the whole logical operation.
        causation_id: Optional ID of what caused this event (usually a command).

    Examples:
        >>> class PersonCreated(Event):
        ...     event_type: ClassVar[str] = "createdPerson"
        ...     name: str
        >>>
        >>> event = PersonCreated(aggregate_id="p1", version=1, name="Big Bird")
        >>> event.event_type
        'createdPerson'
    """

    model_config = ConfigDict(frozen=True)

    event_type: ClassVar[str] = ""

    aggregate_id: str = Field(
        min_length=1,
        description="ID of the aggregate that produced this event",
    )
    version: int = Field(
        gt=0,
        description="Position in aggregate's history (1-indexed, strictly increasing)",
    )
    occurred_at: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC timezone)",
    )
    event_id: ULID = Field(
        default_factory=ULID,
        description="Unique identifier for this event instance",
    )
    correlation_id: ULID | None = Field(
        default=None,
        description="Correlation ID for tracing the entire logical operation",
    )
    causation_id: ULID | None = Field(
        default=None,
        description="ID of what directly caused this event (typically the command_id)",
    )

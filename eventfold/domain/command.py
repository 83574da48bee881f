"""Command base class for the write side.

Commands represent intentions to change one aggregate. They are transient
and never persisted.
"""

from typing import ClassVar

from pydantic import BaseModel, Field
from ulid import ULID


class Command(BaseModel):
    """Base class for all commands in the system.

    Commands are addressed to exactly one aggregate through ``aggregate_id``.
    The repository refuses commands whose ``aggregate_id`` is empty.

    Attributes:
        command_type: Stable name of the command (class level).
        aggregate_id: ID of the aggregate that should handle this command.
        correlation_id: Optional correlation ID for distributed tracing.
        command_id: Unique identifier for this command instance. Events
            emitted while handling the command use it as their causation_id.

    Examples:
        >>> class CreatePerson(Command):
        ...     command_type: ClassVar[str] = "createPerson"
        ...     name: str
        ...     email: str
        >>>
        >>> cmd = CreatePerson(aggregate_id="p1", name="Big Bird", email="b@seasame.st")
    """

    command_type: ClassVar[str] = ""

    aggregate_id: str
    correlation_id: ULID | None = None
    command_id: ULID = Field(default_factory=ULID)

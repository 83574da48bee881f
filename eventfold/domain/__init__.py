"""Domain primitives for event sourcing.

This module contains the building blocks that users extend to create their
domain models:

- Aggregate: Base class for aggregates rebuilt by folding events
- Command: Base class for command messages (write side)
- Event: Base class for immutable, versioned facts
- EventApplier / CommandHandler: Capabilities the repository relies on
- The exception hierarchy rooted at EventfoldError
"""

from .aggregate import Aggregate, CommandHandler, EventApplier
from .command import Command
from .event import Event, utc_now
from .exceptions import (
    NO_VERSION,
    ApplyError,
    BindError,
    ConfigError,
    DeadlineExceededError,
    DecodeError,
    EventfoldError,
    EventSequenceError,
    IncapableAggregateError,
    InvalidCommandError,
    NoEventsProducedError,
    NotFoundError,
    SerializationError,
    UnknownEventTypeError,
    VersionConflictError,
)

__all__ = [
    "Aggregate",
    "Command",
    "CommandHandler",
    "Event",
    "EventApplier",
    "utc_now",
    # Errors
    "NO_VERSION",
    "ApplyError",
    "BindError",
    "ConfigError",
    "DeadlineExceededError",
    "DecodeError",
    "EventfoldError",
    "EventSequenceError",
    "IncapableAggregateError",
    "InvalidCommandError",
    "NoEventsProducedError",
    "NotFoundError",
    "SerializationError",
    "UnknownEventTypeError",
    "VersionConflictError",
]

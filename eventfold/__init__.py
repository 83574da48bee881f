"""Eventfold - a small event sourcing library for Python.

This module provides the public API: the domain primitives, the repository
with its options, the serializers and the stores.
"""

from .context import ExecutionContext, get_context, set_context
from .domain import (
    NO_VERSION,
    Aggregate,
    ApplyError,
    BindError,
    Command,
    CommandHandler,
    ConfigError,
    DeadlineExceededError,
    DecodeError,
    Event,
    EventApplier,
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
from .repository import (
    Repository,
    RepositorySettings,
    with_events,
    with_observers,
    with_serializer,
    with_store,
)
from .routing import applies_event, handles_command
from .serialization import BinarySerializer, JsonSerializer, Serializer
from .store import History, InMemoryStore, Record, Store

__all__ = [
    # Domain primitives
    "Aggregate",
    "Command",
    "CommandHandler",
    "Event",
    "EventApplier",
    # Repository
    "Repository",
    "RepositorySettings",
    "with_events",
    "with_observers",
    "with_serializer",
    "with_store",
    # Serialization
    "BinarySerializer",
    "JsonSerializer",
    "Serializer",
    # Storage
    "History",
    "InMemoryStore",
    "Record",
    "Store",
    # Context
    "ExecutionContext",
    "get_context",
    "set_context",
    # Decorators
    "applies_event",
    "handles_command",
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

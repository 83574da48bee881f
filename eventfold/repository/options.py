"""Functional options configuring a Repository at construction."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..domain.event import Event
from ..domain.exceptions import BindError, ConfigError
from ..serialization import EventPrototype, Serializer
from ..store import Store

if TYPE_CHECKING:
    from .repository import Repository

Observer = Callable[[Event], Any]
Option = Callable[["Repository[Any]"], None]


def with_store(store: Store | None) -> Option:
    """Replace the store. The default is an InMemoryStore."""

    def option(repository: "Repository[Any]") -> None:
        if store is None:
            raise ConfigError("must not provide a nil store")
        repository._store = store

    return option


def with_serializer(serializer: Serializer | None) -> Option:
    """Replace the serializer.

    Must come before with_events() when a custom serializer is used,
    otherwise those events are bound to the serializer being replaced.
    """

    def option(repository: "Repository[Any]") -> None:
        repository._serializer = serializer

    return option


def with_events(*events: EventPrototype) -> Option:
    """Bind events to the serializer configured so far."""

    def option(repository: "Repository[Any]") -> None:
        if repository._serializer is None:
            raise ConfigError(
                "a serializer must have been configured for the repository before binding events"
            )
        try:
            repository._serializer.bind(*events)
        except BindError as err:
            raise ConfigError(f"unable to bind events: {err}") from err

    return option


def with_observers(*observers: Observer) -> Option:
    """Append observers called once per saved event, after each apply.

    Observers run on the caller's task, in registration order, and block
    apply() until they return. Their return value is ignored, awaitables are
    awaited, and exceptions are logged and swallowed.
    """

    def option(repository: "Repository[Any]") -> None:
        for observer in observers:
            if not callable(observer):
                raise ConfigError(f"observer {observer!r} is not callable")
        repository._observers.extend(observers)

    return option

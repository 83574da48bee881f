import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any, Generic, TypeVar

from pydantic import ValidationError
from ulid import ULID

from ..context import get_context, reset_context, set_context
from ..domain.aggregate import CommandHandler
from ..domain.command import Command
from ..domain.event import Event
from ..domain.exceptions import (
    ApplyError,
    ConfigError,
    DeadlineExceededError,
    EventfoldError,
    EventSequenceError,
    IncapableAggregateError,
    InvalidCommandError,
    NoEventsProducedError,
    NotFoundError,
    VersionConflictError,
)
from ..serialization import EventPrototype, Serializer
from ..store import InMemoryStore, Store
from .config import RepositorySettings
from .options import Observer, Option, with_events, with_serializer, with_store

LOGGER = logging.getLogger(__name__)

A = TypeVar("A")
T = TypeVar("T")


class Repository(Generic[A]):
    """Mediates between an aggregate, a serializer and a store.

    The repository turns commands into persisted events (``apply``) and
    rebuilds aggregates by folding their history (``load``) without knowing
    any concrete aggregate or event type up front. It is configured with a
    prototype factory for fresh aggregates, the event classes to bind and
    functional options.

    Construction installs an InMemoryStore and the serializer chosen by
    RepositorySettings, applies the options in order, then binds ``events``
    to whichever serializer is active.

    Examples:
        >>> repository = Repository(
        ...     Person,
        ...     [PersonCreated],
        ...     with_observers(lambda event: print(event.event_type)),
        ... )
        >>> version = await repository.apply(
        ...     CreatePerson(aggregate_id="p1", name="Big Bird", email="b@seasame.st")
        ... )
        >>> person = await repository.load("p1")

    Raises:
        ConfigError: If an option fails, a nil store is supplied, events
            cannot be bound, or the settings are invalid.
    """

    # The repository holds no per-aggregate state. Concurrent applies on the
    # same aggregate are resolved by the store rejecting duplicate versions.

    __slots__ = ("_prototype", "_store", "_serializer", "_observers", "_settings")

    def __init__(
        self,
        prototype: Callable[[], A],
        events: Iterable[EventPrototype] = (),
        *options: Option,
        settings: RepositorySettings | None = None,
    ):
        if settings is None:
            try:
                settings = RepositorySettings()
            except ValidationError as err:
                raise ConfigError(f"invalid repository settings: {err}") from err

        self._prototype = prototype
        self._settings = settings
        self._store: Store | None = None
        self._serializer: Serializer | None = None
        self._observers: list[Observer] = []

        defaults = [
            with_store(InMemoryStore()),
            with_serializer(settings.build_serializer()),
        ]
        for option in defaults:
            self._configure(option, "error applying default configuration")

        for option in options:
            self._configure(option, "error applying option")

        self._configure(with_events(*events), "error binding events")

        if self._serializer is None:
            raise ConfigError("a serializer must be configured for the repository")

    def _configure(self, option: Option, context: str) -> None:
        try:
            option(self)
        except ConfigError:
            raise
        except Exception as err:
            raise ConfigError(f"{context}: {err}") from err

    @property
    def store(self) -> Store:
        assert self._store is not None
        return self._store

    @property
    def serializer(self) -> Serializer:
        assert self._serializer is not None
        return self._serializer

    @property
    def observers(self) -> list[Observer]:
        return list(self._observers)

    @property
    def settings(self) -> RepositorySettings:
        return self._settings

    def new_aggregate(self) -> A:
        """Return a fresh, empty aggregate from the prototype factory."""
        return self._prototype()

    async def save(self, *events: Event) -> None:
        """Serialize events and append them to the store.

        This is the low-level write used by ``apply``. All events must belong
        to the same aggregate. Saving nothing is a no-op.

        Raises:
            EventSequenceError: If the events span several aggregates.
            UnknownEventTypeError: If an event type was never bound.
            VersionConflictError: If the store already holds a version.
        """
        if not events:
            return

        aggregate_id = events[0].aggregate_id
        if any(event.aggregate_id != aggregate_id for event in events):
            raise EventSequenceError("events passed to save must belong to a single aggregate")

        await self._save(aggregate_id, events)

    async def load(self, aggregate_id: str) -> A:
        """Rebuild an aggregate by folding its full history.

        Raises:
            NotFoundError: If the aggregate has no history.
            ApplyError: If the aggregate fails to apply one of its events.
            SerializationError: If a record cannot be unmarshalled.
        """
        aggregate, _ = await self.load_version(aggregate_id)
        return aggregate

    async def load_version(self, aggregate_id: str) -> tuple[A, int]:
        """Rebuild an aggregate and return it with the latest folded version."""
        history = await self._call_store(lambda: self.store.load(aggregate_id, 0, 0))
        if not history:
            raise NotFoundError(aggregate_id)

        LOGGER.log(
            self._settings.log_level_number,
            "Loaded %d event(s) for aggregate id, %s",
            len(history),
            aggregate_id,
            extra={"aggregate_id": aggregate_id},
        )

        aggregate = self.new_aggregate()
        version = 0
        for record in history:
            event = self.serializer.unmarshal(record)
            try:
                aggregate.on_event(event)  # type: ignore[attr-defined]
            except Exception as err:
                raise ApplyError(type(aggregate).__name__, event.event_type, err) from err
            version = event.version

        return aggregate, version

    async def apply(self, command: Command) -> int:
        """Handle a command and persist the events it produces.

        Loads the aggregate (a fresh one when it does not exist yet), lets
        its command handler produce events, saves them and notifies the
        observers once per event in emission order.

        Returns:
            The version of the last event produced.

        Raises:
            InvalidCommandError: If the command is None or has an empty
                aggregate_id.
            IncapableAggregateError: If the aggregate cannot handle commands.
            NoEventsProducedError: If the handler produced no events. The
                error's ``version`` is NO_VERSION (-1) and nothing is saved.
            EventSequenceError: If version checking is enabled and the events
                do not continue the history.
            VersionConflictError: If another writer saved the same versions
                first. Retrying the command is safe.
            Exception: Domain errors raised by the command handler, unchanged.
        """
        if command is None:
            raise InvalidCommandError("command provided to Repository.apply must not be None")
        if not command.aggregate_id:
            raise InvalidCommandError(
                "command provided to Repository.apply must not contain a blank aggregate_id"
            )

        ctx = get_context()
        if command.correlation_id is not None:
            ctx = replace(ctx, correlation_id=command.correlation_id)
        if ctx.correlation_id is None:
            ctx = replace(ctx, correlation_id=ULID())
        if ctx.causation_id is None:
            ctx = ctx.with_causation(ctx.correlation_id)
        token = set_context(ctx.for_command(command.command_id))
        try:
            return await self._apply(command)
        finally:
            reset_context(token)

    async def _apply(self, command: Command) -> int:
        aggregate_id = command.aggregate_id
        try:
            aggregate, version = await self.load_version(aggregate_id)
        except NotFoundError:
            aggregate, version = self.new_aggregate(), 0

        if not isinstance(aggregate, CommandHandler):
            raise IncapableAggregateError(type(aggregate).__name__)

        result = aggregate.apply_command(command)
        if inspect.isawaitable(result):
            result = await result
        events = list(result or ())

        if not events:
            raise NoEventsProducedError()

        if self._settings.verify_versions:
            self._verify_sequence(aggregate_id, version, events)

        try:
            await self._save(aggregate_id, events)
        except VersionConflictError as err:
            LOGGER.warning(
                "Version conflict applying %s: %s",
                type(command).__name__,
                err,
                extra={"aggregate_id": aggregate_id},
            )
            raise

        LOGGER.log(
            self._settings.log_level_number,
            "Applied %s producing %d event(s)",
            command.command_type or type(command).__name__,
            len(events),
            extra={
                "aggregate_id": aggregate_id,
                "command_id": str(command.command_id),
                "correlation_id": str(get_context().correlation_id),
            },
        )

        await self._notify(events)
        return events[-1].version

    def _verify_sequence(self, aggregate_id: str, version: int, events: Sequence[Event]) -> None:
        for offset, event in enumerate(events, start=1):
            if event.aggregate_id != aggregate_id:
                raise EventSequenceError(
                    f"event {event.event_type!r} is addressed to aggregate "
                    f"{event.aggregate_id!r}, expected {aggregate_id!r}"
                )
            if event.version != version + offset:
                raise EventSequenceError(
                    f"event {event.event_type!r} has version {event.version}, "
                    f"expected {version + offset}"
                )

    async def _save(self, aggregate_id: str, events: Sequence[Event]) -> None:
        records = self.serializer.marshal_all(events)
        await self._call_store(lambda: self.store.save(aggregate_id, records))

    async def _notify(self, events: Sequence[Event]) -> None:
        for event in events:
            for observer in self._observers:
                try:
                    result = observer(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    LOGGER.exception(
                        "Observer failed for event %s",
                        event.event_type,
                        extra={"aggregate_id": event.aggregate_id},
                    )

    async def _call_store(self, call: Callable[[], Awaitable[T]]) -> T:
        timeout = self._store_timeout()
        if timeout is None:
            return await call()
        if timeout <= 0:
            raise DeadlineExceededError("deadline exceeded before store call")
        try:
            async with asyncio.timeout(timeout):
                return await call()
        except EventfoldError:
            raise
        except TimeoutError as err:
            raise DeadlineExceededError(f"store call exceeded {timeout:.3f}s") from err

    def _store_timeout(self) -> float | None:
        limits = [
            limit
            for limit in (get_context().remaining(), self._settings.store_timeout)
            if limit is not None
        ]
        return min(limits, default=None)

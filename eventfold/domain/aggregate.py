from collections.abc import Awaitable, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, PrivateAttr

from ..context import get_context
from ..routing import setup_command_routing, setup_event_applying
from .command import Command
from .event import Event

if TYPE_CHECKING:
    from ..routing import MessageRouter

E = TypeVar("E", bound=Event)


@runtime_checkable
class EventApplier(Protocol):
    """Capability to fold an event into in-memory state.

    Implementations must handle every event type the aggregate emits and
    raise for anything else.
    """

    def on_event(self, event: Event) -> object: ...


@runtime_checkable
class CommandHandler(Protocol):
    """Capability to validate a command and produce new events.

    The returned events must be stamped with versions ``current + 1`` to
    ``current + n``. Returning no events is legal here but the repository
    reports it as NoEventsProducedError. May be a coroutine function.
    """

    def apply_command(
        self, command: Command
    ) -> Sequence[Event] | Awaitable[Sequence[Event]]: ...


class Aggregate(BaseModel):
    """Base class for aggregates rebuilt by folding their event history.

    An aggregate is the current in-memory state of one domain resource and
    can be thought of as a left fold over its events. This base class
    implements both capabilities the repository needs:

    - ``on_event`` routes each event to a method decorated with
      ``@applies_event`` and then advances ``id`` and ``version``.
    - ``apply_command`` routes each command to a method decorated with
      ``@handles_command`` and returns the events emitted by that method.

    Command handlers validate the command against current state, raise a
    domain error to refuse it, and call ``emit()`` for every accepted change.
    ``emit()`` stamps the next version, the command's aggregate id and the
    correlation/causation IDs of the active ExecutionContext, then applies the
    event immediately so later checks in the same handler see the new state.

    Examples:
        >>> class Person(Aggregate):
        ...     name: str = ""
        ...
        ...     @handles_command
        ...     def create(self, cmd: CreatePerson) -> None:
        ...         if self.version != 0:
        ...             raise ValueError("person already exists")
        ...         self.emit(PersonCreated, name=cmd.name)
        ...
        ...     @applies_event
        ...     def created(self, event: PersonCreated) -> None:
        ...         self.name = event.name

    Attributes:
        id: Identity of the aggregate; empty until the first event is applied.
        version: Version of the last applied event; 0 for a fresh aggregate.
    """

    id: str = ""
    version: int = 0

    _target_id: str | None = PrivateAttr(default=None)
    _pending: list[Event] = PrivateAttr(default_factory=list)

    _command_router: ClassVar["MessageRouter"]
    _event_router: ClassVar["MessageRouter"]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._command_router = setup_command_routing(cls)
        cls._event_router = setup_event_applying(cls)

    def on_event(self, event: Event) -> None:
        """Apply one event from the aggregate's history.

        Raises:
            UnhandledMessageError: If no applier is registered for the event.
        """
        self._event_router.route(self, event)
        self.id = event.aggregate_id
        self.version = event.version

    def apply_command(self, command: Command) -> list[Event]:
        """Handle a command and return the events it produced, in order."""
        self._target_id = command.aggregate_id
        self._pending = []
        try:
            self._command_router.route(self, command)
            return list(self._pending)
        finally:
            self._target_id = None
            self._pending = []

    def emit(self, event_type: type[E], **payload: Any) -> E:
        """Create the next event for this aggregate and apply it.

        Args:
            event_type: Event class to instantiate.
            **payload: Event-specific fields.

        Returns:
            The emitted event.

        Raises:
            RuntimeError: If called outside of a command handler.
        """
        if self._target_id is None:
            raise RuntimeError("emit() can only be called while handling a command")

        ctx = get_context()
        event = event_type(
            aggregate_id=self._target_id,
            version=self.version + 1,
            correlation_id=ctx.correlation_id,
            causation_id=ctx.command_id,
            **payload,
        )
        self.on_event(event)
        self._pending.append(event)
        return event

    def replay_events(self, events: Sequence[Event]) -> None:
        """Fold a sequence of events, in order, into this aggregate."""
        for event in events:
            self.on_event(event)

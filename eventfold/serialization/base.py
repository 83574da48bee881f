"""Serializer interface and the event type registry behind it."""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from ..domain.event import Event
from ..domain.exceptions import BindError, DecodeError, UnknownEventTypeError
from ..store.base import History, Record

LOGGER = logging.getLogger(__name__)

EventPrototype = type[Event] | Event


def _event_class(prototype: object) -> type[Event]:
    cls = prototype if isinstance(prototype, type) else type(prototype)
    if not issubclass(cls, Event):
        raise BindError(f"{cls.__name__} is not an Event")
    return cls


class Serializer(ABC):
    """Converts events to records and back.

    A serializer holds a registry mapping each ``event_type`` discriminator to
    the Event subclass that reconstructs it. Registration is bind-only and
    safe to call from several threads: bind() publishes a new mapping under a
    lock, while marshal() and unmarshal() read the published mapping without
    locking.

    The discriminator travels inside ``Record.data`` so unmarshal() needs no
    out-of-band type information. Subclasses decide the byte layout by
    implementing ``_pack`` and ``_unpack``.
    """

    def __init__(self, *events: EventPrototype):
        self._lock = threading.Lock()
        self._types: MappingProxyType[str, type[Event]] = MappingProxyType({})
        self.bind(*events)

    def bind(self, *events: EventPrototype) -> None:
        """Register event classes (or instances of them) by event type.

        Binding the same class again is a no-op. Either every event of the
        call is bound or none is.

        Raises:
            BindError: If an event has an empty event_type, is not an Event,
                its event_type is already bound to a different class, or the
                encoding cannot represent its event_type.
        """
        with self._lock:
            types = dict(self._types)
            for prototype in events:
                cls = _event_class(prototype)
                event_type = cls.event_type
                if not event_type:
                    raise BindError(f"unable to determine event type of {cls.__name__}")
                self._check_event_type(event_type)

                bound = types.get(event_type)
                if bound is not None and bound is not cls:
                    raise BindError(
                        f"event type {event_type!r} is already bound to {bound.__name__}"
                    )
                types[event_type] = cls

            self._types = MappingProxyType(types)

        LOGGER.debug("Bound %d event type(s)", len(events))

    def _check_event_type(self, event_type: str) -> None:
        """Reject event types the byte layout cannot carry. Raises BindError."""
        pass

    def is_bound(self, event_type: str) -> bool:
        return event_type in self._types

    @property
    def event_types(self) -> dict[str, type[Event]]:
        """A copy of the registry, keyed by event type."""
        return dict(self._types)

    def marshal(self, event: Event) -> Record:
        """Serialize an event into a record.

        Raises:
            UnknownEventTypeError: If the event's type was never bound, so
                that nothing is written which could not be read back.
        """
        if event.event_type not in self._types:
            raise UnknownEventTypeError(event.event_type)
        return Record(version=event.version, data=self._pack(event.event_type, event))

    def marshal_all(self, events: Iterable[Event]) -> History:
        """Serialize events, in order, into a History."""
        return History(self.marshal(event) for event in events)

    def unmarshal(self, record: Record) -> Event:
        """Reconstruct the typed event stored in a record.

        Raises:
            DecodeError: If the data is not bytes-like, the bytes are
                malformed, do not validate against the bound class, or
                disagree with the record's version.
            UnknownEventTypeError: If the discriminator was never bound.
        """
        try:
            data = bytes(record.data)
        except TypeError as err:
            raise DecodeError(f"record data is not a byte sequence: {err}") from err

        event_type, payload = self._unpack(data)

        cls = self._types.get(event_type)
        if cls is None:
            raise UnknownEventTypeError(event_type)

        try:
            if isinstance(payload, bytes):
                event = cls.model_validate_json(payload)
            else:
                event = cls.model_validate(payload)
        except ValidationError as err:
            raise DecodeError(f"unable to unmarshal event {event_type!r}: {err}") from err

        if event.version != record.version:
            raise DecodeError(
                f"record version {record.version} does not match "
                f"event version {event.version} for {event_type!r}"
            )
        return event

    @abstractmethod
    def _pack(self, event_type: str, event: Event) -> bytes:
        """Encode the discriminator and the event into record bytes."""
        ...

    @abstractmethod
    def _unpack(self, data: bytes) -> tuple[str, bytes | dict[str, Any]]:
        """Split record bytes into the discriminator and the event payload.

        The payload is either JSON bytes or an already parsed mapping.

        Raises:
            DecodeError: If the bytes are not in the expected layout.
        """
        ...

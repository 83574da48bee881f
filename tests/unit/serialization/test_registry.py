"""Tests for the event type registry shared by every serializer."""

import threading
from typing import ClassVar

import pytest

from eventfold.domain import BindError, DecodeError, Event, UnknownEventTypeError
from eventfold.serialization import BinarySerializer, JsonSerializer
from eventfold.store import History, Record
from tests.fixtures.people import PERSON_EVENTS, EmailChanged, PersonCreated, PersonRenamed


class Untyped(Event):
    pass


class Impostor(Event):
    event_type: ClassVar[str] = "createdPerson"


@pytest.fixture(params=[BinarySerializer, JsonSerializer])
def serializer_class(request):
    return request.param


def test_bind_registers_by_event_type(serializer_class):
    serializer = serializer_class()
    serializer.bind(*PERSON_EVENTS)

    assert serializer.is_bound("createdPerson")
    assert serializer.event_types == {
        "createdPerson": PersonCreated,
        "renamedPerson": PersonRenamed,
        "changedEmail": EmailChanged,
    }


def test_constructor_binds_events(serializer_class):
    serializer = serializer_class(PersonCreated)

    assert serializer.is_bound("createdPerson")
    assert not serializer.is_bound("renamedPerson")


def test_bind_accepts_event_instances(serializer_class):
    serializer = serializer_class()
    serializer.bind(PersonRenamed(aggregate_id="p1", version=2, name="Elmo"))

    assert serializer.is_bound("renamedPerson")


def test_rebinding_same_class_is_noop(serializer_class):
    serializer = serializer_class(PersonCreated)
    serializer.bind(PersonCreated, PersonCreated)

    assert serializer.event_types == {"createdPerson": PersonCreated}


def test_bind_rejects_empty_event_type(serializer_class):
    with pytest.raises(BindError, match="Untyped"):
        serializer_class(Untyped)


def test_bind_rejects_non_events(serializer_class):
    with pytest.raises(BindError):
        serializer_class().bind(dict)


def test_bind_rejects_conflicting_class(serializer_class):
    serializer = serializer_class(PersonCreated)

    with pytest.raises(BindError, match="already bound"):
        serializer.bind(Impostor)

    assert serializer.event_types["createdPerson"] is PersonCreated


def test_failed_bind_binds_nothing(serializer_class):
    serializer = serializer_class()

    with pytest.raises(BindError):
        serializer.bind(PersonRenamed, Untyped)

    assert serializer.event_types == {}


def test_event_types_is_a_copy(serializer_class):
    serializer = serializer_class(PersonCreated)
    serializer.event_types.clear()

    assert serializer.is_bound("createdPerson")


def test_marshal_unbound_type_raises(serializer_class):
    serializer = serializer_class(PersonCreated)

    with pytest.raises(UnknownEventTypeError) as exc_info:
        serializer.marshal(PersonRenamed(aggregate_id="p1", version=2, name="Elmo"))

    assert exc_info.value.event_type == "renamedPerson"


def test_unmarshal_unbound_type_raises(serializer_class):
    writer = serializer_class(*PERSON_EVENTS)
    reader = serializer_class(PersonCreated)
    record = writer.marshal(EmailChanged(aggregate_id="p1", version=2, email="e@seasame.st"))

    with pytest.raises(UnknownEventTypeError):
        reader.unmarshal(record)


def test_marshal_all_preserves_order(serializer_class):
    serializer = serializer_class(*PERSON_EVENTS)
    events = [
        PersonCreated(aggregate_id="p1", version=1, name="Big Bird", email="b@seasame.st"),
        PersonRenamed(aggregate_id="p1", version=2, name="Elmo"),
        EmailChanged(aggregate_id="p1", version=3, email="e@seasame.st"),
    ]

    history = serializer.marshal_all(events)

    assert isinstance(history, History)
    assert history.versions == [1, 2, 3]
    assert [serializer.unmarshal(record) for record in history] == events


def make_event(n: int) -> type[Event]:
    class Generated(Event):
        event_type: ClassVar[str] = f"generated{n}"

    return Generated


def test_concurrent_binds_are_all_registered(serializer_class):
    serializer = serializer_class()
    classes = [make_event(i) for i in range(32)]
    barrier = threading.Barrier(len(classes))

    def bind(cls):
        barrier.wait()
        serializer.bind(cls)

    threads = [threading.Thread(target=bind, args=(cls,)) for cls in classes]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert set(serializer.event_types) == {f"generated{i}" for i in range(32)}


@pytest.mark.parametrize("wrap", [bytes, bytearray, memoryview])
def test_unmarshal_accepts_bytes_like_data(serializer_class, wrap):
    serializer = serializer_class(*PERSON_EVENTS)
    event = PersonCreated(aggregate_id="p1", version=1, name="Big Bird", email="b@seasame.st")
    record = serializer.marshal(event)

    restored = serializer.unmarshal(Record(record.version, wrap(record.data)))

    assert type(restored) is PersonCreated
    assert restored == event


@pytest.mark.parametrize("data", ["not bytes", None, 42.0])
def test_unmarshal_rejects_data_that_is_not_bytes_like(serializer_class, data):
    serializer = serializer_class(*PERSON_EVENTS)

    with pytest.raises(DecodeError):
        serializer.unmarshal(Record(1, data))

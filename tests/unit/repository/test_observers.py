"""Tests for observer notification after apply."""

import asyncio
import logging

import pytest

from eventfold import Event, NoEventsProducedError, with_observers
from tests.fixtures.people import CreatePerson, UpdateContact


def create_big_bird() -> CreatePerson:
    return CreatePerson(aggregate_id="p1", name="Big Bird", email="b@seasame.st")


@pytest.mark.asyncio
async def test_each_observer_sees_each_event_once(make_repository):
    calls: list[tuple[str, int]] = []
    repository = make_repository(
        with_observers(
            lambda event: calls.append(("a", event.version)),
            lambda event: calls.append(("b", event.version)),
        )
    )
    await repository.apply(create_big_bird())
    calls.clear()

    await repository.apply(UpdateContact(aggregate_id="p1", name="Elmo", email="e@seasame.st"))

    assert calls == [("a", 2), ("b", 2), ("a", 3), ("b", 3)]


@pytest.mark.asyncio
async def test_failing_observer_is_logged_and_swallowed(
    make_repository, caplog: pytest.LogCaptureFixture
):
    seen: list[Event] = []

    def broken(event: Event) -> None:
        raise RuntimeError("observer down")

    repository = make_repository(with_observers(broken, seen.append))

    with caplog.at_level(logging.ERROR, logger="eventfold"):
        version = await repository.apply(create_big_bird())

    assert version == 1
    assert len(seen) == 1
    assert (await repository.load("p1")).version == 1
    (record,) = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert "createdPerson" in record.getMessage()
    assert record.exc_info is not None


@pytest.mark.asyncio
async def test_async_observers_are_awaited(make_repository):
    seen: list[int] = []

    async def observe(event: Event) -> None:
        await asyncio.sleep(0)
        seen.append(event.version)

    repository = make_repository(with_observers(observe))

    await repository.apply(create_big_bird())

    assert seen == [1]


@pytest.mark.asyncio
async def test_failing_async_observer_is_swallowed(make_repository):
    async def observe(event: Event) -> None:
        raise ValueError("nope")

    repository = make_repository(with_observers(observe))

    assert await repository.apply(create_big_bird()) == 1


@pytest.mark.asyncio
async def test_observers_not_called_when_nothing_is_produced(make_repository):
    seen: list[Event] = []
    repository = make_repository(with_observers(seen.append))
    await repository.apply(create_big_bird())
    seen.clear()

    with pytest.raises(NoEventsProducedError):
        await repository.apply(
            UpdateContact(aggregate_id="p1", name="Big Bird", email="b@seasame.st")
        )

    assert seen == []


@pytest.mark.asyncio
async def test_observers_not_called_when_command_is_refused(make_repository):
    seen: list[Event] = []
    repository = make_repository(with_observers(seen.append))

    with pytest.raises(ValueError):
        await repository.apply(CreatePerson(aggregate_id="p1", name="Big Bird", email="nope"))

    assert seen == []

"""Central test fixtures - imports from the people fixture domain."""

import os

import pytest
from ulid import ULID

from eventfold import InMemoryStore, Repository, with_store
from eventfold.context import clear_context
from eventfold.repository import Option
from tests.fixtures.people import PERSON_EVENTS, Person, PersonService


@pytest.fixture
def aggregate_id() -> str:
    """Generate a unique aggregate ID."""
    return str(ULID())


@pytest.fixture
def store() -> InMemoryStore:
    """Create an in-memory store."""
    return InMemoryStore()


@pytest.fixture
def make_repository(store: InMemoryStore):
    """Build Person repositories on the shared store with extra options."""

    def make(*options: Option, **kwargs) -> Repository[Person]:
        return Repository(Person, PERSON_EVENTS, with_store(store), *options, **kwargs)

    return make


@pytest.fixture
def repository(make_repository) -> Repository[Person]:
    """Create a Person repository backed by the in-memory store."""
    return make_repository()


@pytest.fixture
def person_service(store: InMemoryStore) -> PersonService:
    return PersonService(with_store(store))


@pytest.fixture(autouse=True)
def clear_execution_context():
    """Automatically clear execution context after each test."""
    yield
    clear_context()


@pytest.fixture(autouse=True)
def isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    """Keep EVENTFOLD_* variables from the host out of repository defaults."""
    for name in list(os.environ):
        if name.startswith("EVENTFOLD_"):
            monkeypatch.delenv(name)

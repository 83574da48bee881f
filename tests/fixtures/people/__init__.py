"""Illustrative Person domain used across the test suite."""

from .errors import (
    PersonError,
    PersonMissingError,
    RecreateAttemptError,
    StateExistsError,
    ValidationFailedError,
)
from .person import (
    PERSON_EVENTS,
    CreatePerson,
    EmailChanged,
    Person,
    PersonCreated,
    PersonRenamed,
    UpdateContact,
)
from .service import PersonService

__all__ = [
    "PERSON_EVENTS",
    "CreatePerson",
    "EmailChanged",
    "Person",
    "PersonCreated",
    "PersonError",
    "PersonMissingError",
    "PersonRenamed",
    "PersonService",
    "RecreateAttemptError",
    "StateExistsError",
    "UpdateContact",
    "ValidationFailedError",
]

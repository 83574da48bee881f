"""Repository wiring aggregates, serializers and stores together.

- Repository: Applies commands and loads aggregates
- RepositorySettings: Environment-driven defaults
- with_store / with_serializer / with_events / with_observers: Options
"""

from .config import RepositorySettings
from .options import Observer, Option, with_events, with_observers, with_serializer, with_store
from .repository import Repository

__all__ = [
    "Observer",
    "Option",
    "Repository",
    "RepositorySettings",
    "with_events",
    "with_observers",
    "with_serializer",
    "with_store",
]

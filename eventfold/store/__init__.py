"""Stores persist the serialized history of each aggregate.

- Store: Abstract ordered log of records keyed by aggregate id
- InMemoryStore: Reference implementation for tests and development
- Record / History: The persisted shapes
"""

from .base import History, Record, Store, in_range
from .memory import InMemoryStore

__all__ = [
    "History",
    "InMemoryStore",
    "Record",
    "Store",
    "in_range",
]

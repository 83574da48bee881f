"""Serializers turn events into records and records back into events.

- Serializer: Abstract registry-backed serializer
- BinarySerializer: Reference framed binary encoding (repository default)
- JsonSerializer: Readable JSON envelope encoding
"""

from .base import EventPrototype, Serializer
from .binary import BinarySerializer
from .text import Envelope, JsonSerializer

__all__ = [
    "BinarySerializer",
    "Envelope",
    "EventPrototype",
    "JsonSerializer",
    "Serializer",
]

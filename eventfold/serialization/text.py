"""JSON serializer storing each event in a readable envelope."""

from typing import Any

from pydantic import BaseModel, ValidationError

from ..domain.event import Event
from ..domain.exceptions import DecodeError
from .base import Serializer


class Envelope(BaseModel):
    """Persisted shape of a JSON record: ``{"type": ..., "data": {...}}``."""

    type: str
    data: dict[str, Any]


class JsonSerializer(Serializer):
    """Serializes events into UTF-8 JSON envelopes.

    Useful for stores where records should stay human readable, such as
    document databases or log files.
    """

    def _pack(self, event_type: str, event: Event) -> bytes:
        envelope = Envelope(type=event_type, data=event.model_dump(mode="json"))
        return envelope.model_dump_json().encode("utf-8")

    def _unpack(self, data: bytes) -> tuple[str, bytes | dict[str, Any]]:
        try:
            envelope = Envelope.model_validate_json(data)
        except ValidationError as err:
            raise DecodeError(f"unable to unmarshal event: {err}") from err
        return envelope.type, envelope.data

"""Reference binary serializer.

Each record is a length-prefixed frame::

    magic "EVFB" | format (u8) | type length (u16) | event type (utf-8)
    | payload length (u32) | payload (event JSON, utf-8)

All integers are big-endian. The frame is self-describing: the event type
selects the bound class that validates the payload.
"""

import struct
from typing import Any

from ..domain.event import Event
from ..domain.exceptions import BindError, DecodeError, SerializationError
from .base import Serializer

MAGIC = b"EVFB"
FORMAT_VERSION = 1

_HEADER = struct.Struct(">4sBH")
_PAYLOAD_LENGTH = struct.Struct(">I")

MAX_TYPE_LENGTH = 0xFFFF


class BinarySerializer(Serializer):
    """Serializes events into framed binary records.

    This is the default serializer of a Repository.

    Examples:
        >>> serializer = BinarySerializer(PersonCreated)
        >>> record = serializer.marshal(event)
        >>> serializer.unmarshal(record) == event
        True
    """

    def _check_event_type(self, event_type: str) -> None:
        length = len(event_type.encode("utf-8"))
        if length > MAX_TYPE_LENGTH:
            raise BindError(
                f"event type is {length} bytes long, the binary frame allows {MAX_TYPE_LENGTH}"
            )

    def _pack(self, event_type: str, event: Event) -> bytes:
        type_bytes = event_type.encode("utf-8")
        payload = event.model_dump_json().encode("utf-8")
        try:
            header = _HEADER.pack(MAGIC, FORMAT_VERSION, len(type_bytes))
            payload_length = _PAYLOAD_LENGTH.pack(len(payload))
        except struct.error as err:
            raise SerializationError(f"unable to marshal event {event_type!r}: {err}") from err
        return b"".join((header, type_bytes, payload_length, payload))

    def _unpack(self, data: bytes) -> tuple[str, bytes | dict[str, Any]]:
        try:
            magic, format_version, type_length = _HEADER.unpack_from(data, 0)
        except struct.error as err:
            raise DecodeError(f"unable to unmarshal event: truncated header: {err}") from err

        if magic != MAGIC:
            raise DecodeError(f"unable to unmarshal event: unexpected magic {magic!r}")
        if format_version != FORMAT_VERSION:
            raise DecodeError(f"unable to unmarshal event: unsupported format {format_version}")

        offset = _HEADER.size
        type_bytes = data[offset : offset + type_length]
        if len(type_bytes) != type_length:
            raise DecodeError("unable to unmarshal event: truncated event type")
        offset += type_length

        try:
            (payload_length,) = _PAYLOAD_LENGTH.unpack_from(data, offset)
        except struct.error as err:
            raise DecodeError(f"unable to unmarshal event: truncated frame: {err}") from err
        offset += _PAYLOAD_LENGTH.size

        payload = data[offset:]
        if len(payload) != payload_length:
            raise DecodeError(
                f"unable to unmarshal event: expected {payload_length} payload bytes, "
                f"found {len(payload)}"
            )

        try:
            event_type = type_bytes.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecodeError(f"unable to unmarshal event: {err}") from err

        return event_type, payload

"""Reading room messages from Gitter's streaming API."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Any, Protocol, runtime_checkable

from .payload import Message, Room


class EmptyPayloadError(Exception):
    """Raised for a blank line, which the stream sends as a keep-alive."""


class MalformedPayloadError(Exception):
    """Raised when a payload is not a properly formed message."""


@runtime_checkable
class Connection(Protocol):
    """A source of room messages that can be closed."""

    def receive(self) -> RoomMessage:
        """Block until the next message arrives and return it."""
        ...

    def close(self) -> None:
        """Close the underlying stream."""
        ...


def decode_payload(payload: bytes | str) -> Message:
    """Decode one line of the stream into a Message."""
    stripped = payload.strip()
    if not stripped:
        raise EmptyPayloadError("empty payload was given")
    try:
        data = json.loads(stripped)
        return Message.from_dict(data)
    except (ValueError, TypeError) as exc:
        raise MalformedPayloadError(str(exc)) from exc


@dataclass
class RoomMessage:
    """A message received in a room; usable as an input."""

    room: Room
    received_message: Message

    @property
    def sender_key(self) -> str:
        """Room and sender identifiers joined by "|"."""
        return f"{self.room.id}|{self.received_message.from_user.id}"

    @property
    def message(self) -> str:
        """The received text."""
        return self.received_message.text

    @property
    def sent_at(self) -> datetime | None:
        """When the message was sent."""
        return self.received_message.send_time_stamp.time

    @property
    def reply_to(self) -> Room:
        """The room the message was sent in."""
        return self.room


class StreamConnection:
    """A streaming connection to one room, delivering one JSON message per line."""

    def __init__(self, room: Room, stream: IO[Any]) -> None:
        self.room = room
        self._stream = stream

    def receive(self) -> RoomMessage:
        """Read the next line and return it as a RoomMessage; EOFError when the stream ends."""
        line = self._stream.readline()
        newline = b"\n" if isinstance(line, bytes) else "\n"
        if not line.endswith(newline):
            raise EOFError("stream ended")
        return RoomMessage(self.room, decode_payload(line))

    def close(self) -> None:
        """Close the stream."""
        self._stream.close()

    def __enter__(self) -> StreamConnection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
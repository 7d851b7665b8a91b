"""Gitter adapter: connects to every room the token's owner belongs to."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from ..output import Output
from .config import Config, with_retry
from .connection import Connection, EmptyPayloadError, MalformedPayloadError, RoomMessage
from .payload import Message, Room
from .rest import RestAPIClient, RestAPIError
from .streaming import StreamingAPIClient

GITTER = "gitter"

_log = logging.getLogger(__name__)

EnqueueInput = Callable[[RoomMessage], Any]


class RoomsFetchError(Exception):
    """Raised when the rooms to connect to cannot be fetched; the bot cannot continue."""


class _APIClient(Protocol):
    def rooms(self) -> list[Room]: ...

    def post_message(self, room: Room, text: str) -> Message: ...


class _StreamingClient(Protocol):
    def connect(self, room: Room) -> Connection: ...


class _MessageReceiver(Protocol):
    def receive(self) -> RoomMessage: ...


def receive_messages(receiver: _MessageReceiver, enqueue_input: EnqueueInput) -> None:
    """Pass each received message on until receiving fails; the failure is re-raised.

    Blank keep-alive lines and malformed payloads are skipped.
    """
    _log.info("Start receiving message")
    while True:
        try:
            message = receiver.receive()
        except EmptyPayloadError:
            continue
        except MalformedPayloadError as exc:
            _log.warning("Skipping malformed input: %s", exc)
            continue

        try:
            enqueue_input(message)
        except Exception as exc:
            _log.debug("Failed to enqueue input: %s", exc)


class Adapter:
    """Bot adapter for Gitter, holding REST and streaming API clients."""

    bot_type = GITTER

    def __init__(
        self,
        config: Config,
        api_client: _APIClient | None = None,
        streaming_client: _StreamingClient | None = None,
    ) -> None:
        self.config = config
        self.api_client = api_client if api_client is not None else RestAPIClient(config.token)
        self.streaming_client = (
            streaming_client if streaming_client is not None else StreamingAPIClient(config.token)
        )

    def run(
        self,
        stop_event: threading.Event,
        enqueue_input: EnqueueInput,
        notify_err: Callable[[BaseException], Any],
    ) -> None:
        """Fetch the rooms and start one background thread per room to receive messages."""
        try:
            rooms = with_retry(self.config.retry_policy, self.api_client.rooms)
        except Exception as exc:
            notify_err(RoomsFetchError(str(exc)))
            return

        for room in rooms:
            threading.Thread(
                target=self.run_each_room,
                args=(stop_event, room, enqueue_input),
                name=f"gitter-room-{room.id}",
                daemon=True,
            ).start()

    def run_each_room(self, stop_event: threading.Event, room: Room, enqueue_input: EnqueueInput) -> None:
        """Keep a streaming connection to the room open until stopped or unable to connect."""
        while not stop_event.is_set():
            _log.info("Connecting to room: %s", room.id)
            try:
                conn = with_retry(self.config.retry_policy, lambda: self.streaming_client.connect(room))
            except Exception as exc:
                _log.warning("Could not connect to room: %s. Error: %s", room.id, exc)
                return

            try:
                receive_messages(conn, enqueue_input)
            except Exception as exc:
                _log.error("Disconnected from room %s: %s", room.id, exc)
            finally:
                try:
                    conn.close()
                except Exception as exc:
                    _log.debug("Failed to close connection to room %s: %s", room.id, exc)

    def send_message(self, output: Output) -> None:
        """Post a text output to the Room given as its destination."""
        content = output.content
        if not isinstance(content, str):
            _log.warning("Unexpected output %r", output)
            return

        room = output.destination
        if not isinstance(room, Room):
            _log.error("Destination is not instance of Room. %r.", room)
            return

        try:
            self.api_client.post_message(room, content)
        except (RestAPIError, OSError) as exc:
            _log.error("Failed posting message to %s: %s", room.id, exc)
"""Client for Gitter's streaming API."""

from __future__ import annotations

import urllib.error
import urllib.request
from collections.abc import Callable
from typing import Any

from .connection import StreamConnection
from .payload import Room

STREAMING_API_ENDPOINT_FORMAT = "https://stream.gitter.im/{version}/rooms/{room_id}/chatMessages"


def _urlopen(request: urllib.request.Request) -> Any:
    return urllib.request.urlopen(request)


class StreamingAPIClient:
    """Opens streaming connections to Gitter rooms."""

    def __init__(
        self,
        token: str,
        api_version: str = "v1",
        opener: Callable[[urllib.request.Request], Any] | None = None,
    ) -> None:
        self.token = token
        self.api_version = api_version
        self._opener = opener if opener is not None else _urlopen

    def build_endpoint(self, room: Room) -> str:
        """Return the streaming URL for the room's messages."""
        return STREAMING_API_ENDPOINT_FORMAT.format(version=self.api_version, room_id=room.id)

    def connect(self, room: Room) -> StreamConnection:
        """Open the room's message stream; network failures raise OSError."""
        request = urllib.request.Request(self.build_endpoint(room), method="GET")
        request.add_header("Authorization", "Bearer " + self.token)
        request.add_header("Accept", "application/json")
        try:
            response = self._opener(request)
        except urllib.error.HTTPError as exc:
            response = exc
        return StreamConnection(room, response)
"""Client for Gitter's REST API."""

from __future__ import annotations

import json
import posixpath
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Sequence
from typing import Any

from .payload import Message, Room

REST_API_ENDPOINT = "https://api.gitter.im/"

Opener = Callable[[urllib.request.Request], Any]


class RestAPIError(Exception):
    """Raised when a REST API call fails or returns an unusable body."""


def _urlopen(request: urllib.request.Request) -> Any:
    return urllib.request.urlopen(request)


class RestAPIClient:
    """Calls Gitter's REST API with the given token and API version."""

    def __init__(self, token: str, api_version: str = "v1", opener: Opener | None = None) -> None:
        self.token = token
        self.api_version = api_version
        self._opener = opener if opener is not None else _urlopen

    def build_endpoint(self, resource_fragments: Sequence[str]) -> str:
        """Return the URL for the given resource path under the API version."""
        parts = urllib.parse.urlsplit(REST_API_ENDPOINT)
        path = posixpath.normpath(posixpath.join(parts.path or "/", self.api_version, *resource_fragments))
        return urllib.parse.urlunsplit(parts._replace(path=path))

    def get(self, resource_fragments: Sequence[str]) -> Any:
        """Send a GET request and return the decoded JSON body."""
        return self._request("GET", resource_fragments, None)

    def post(self, resource_fragments: Sequence[str], payload: Any) -> Any:
        """Send payload as JSON in a POST request and return the decoded JSON body."""
        try:
            body = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise RestAPIError(f"can not marshal given payload: {exc}") from exc
        return self._request("POST", resource_fragments, body)

    def rooms(self) -> list[Room]:
        """Fetch the rooms the token's owner belongs to."""
        data = self.get(["rooms"])
        if data is None:
            return []
        if not isinstance(data, list):
            raise RestAPIError(f"can not unmarshal given JSON structure: expected a list, got {data!r}")
        try:
            return [Room.from_dict(item) for item in data]
        except ValueError as exc:
            raise RestAPIError(f"can not unmarshal given JSON structure: {exc}") from exc

    def post_message(self, room: Room, text: str) -> Message:
        """Post text to the room and return the created message."""
        try:
            data = self.post(["rooms", room.id, "chatMessages"], {"text": text})
            return Message.from_dict(data)
        except (RestAPIError, ValueError) as exc:
            raise RestAPIError(f"failed to post message: {exc}") from exc

    def _request(self, method: str, resource_fragments: Sequence[str], body: bytes | None) -> Any:
        request = urllib.request.Request(self.build_endpoint(resource_fragments), data=body, method=method)
        request.add_header("Authorization", "Bearer " + self.token)
        request.add_header("Accept", "application/json")
        if body is not None:
            request.add_header("Content-Type", "application/json")

        try:
            response = self._opener(request)
        except urllib.error.HTTPError as exc:
            # Status codes are not checked; the body is decoded as is.
            response = exc
        except OSError as exc:
            raise RestAPIError(f"failed executing HTTP request: {exc}") from exc

        try:
            with response:
                raw = response.read()
        except OSError as exc:
            raise RestAPIError(f"failed executing HTTP request: {exc}") from exc

        try:
            return json.loads(raw)
        except ValueError as exc:
            raise RestAPIError(f"can not unmarshal given JSON structure: {exc}") from exc
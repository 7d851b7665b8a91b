import io
import urllib.error
import urllib.parse

import pytest

from sarah.gitter.connection import Connection, MalformedPayloadError
from sarah.gitter.payload import Room
from sarah.gitter.streaming import StreamingAPIClient


def test_new_client_defaults_to_v1():
    client = StreamingAPIClient("token")
    assert client.token == "token"
    assert client.api_version == "v1"


def test_version_specific_client():
    client = StreamingAPIClient("token", api_version="v2")
    assert client.token == "token"
    assert client.api_version == "v2"


def test_build_endpoint():
    client = StreamingAPIClient("token", "v1")
    endpoint = client.build_endpoint(Room(id="foo"))
    assert urllib.parse.urlsplit(endpoint).path.startswith("/v1")
    assert endpoint == "https://stream.gitter.im/v1/rooms/foo/chatMessages"


def test_connect_returns_connection_reading_stream():
    requests = []

    def opener(request):
        requests.append(request)
        return io.BytesIO(b'{"text": "hi"}\n')

    client = StreamingAPIClient("token", "v1", opener=opener)
    room = Room(id="foo")

    connection = client.connect(room)

    assert isinstance(connection, Connection)
    received = connection.receive()
    assert received.message == "hi"
    assert received.room is room
    assert requests[0].get_method() == "GET"
    assert requests[0].full_url == "https://stream.gitter.im/v1/rooms/foo/chatMessages"
    assert requests[0].get_header("Authorization") == "Bearer token"


def test_connect_propagates_network_error():
    def opener(request):
        raise urllib.error.URLError("unreachable")

    client = StreamingAPIClient("token", "v1", opener=opener)
    with pytest.raises(OSError):
        client.connect(Room(id="foo"))


def test_connect_with_body_that_is_not_json():
    def opener(request):
        return io.BytesIO(b"https://stream.gitter.im/v1/rooms/foo/chatMessages\n")

    client = StreamingAPIClient("token", "v1", opener=opener)
    connection = client.connect(Room(id="foo"))
    with pytest.raises(MalformedPayloadError):
        connection.receive()
"""Gitter resources: rooms, users, messages and their timestamps."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

_T = TypeVar("_T")

_TIMESTAMP = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?Z")


def _mapping(data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {data!r}")
    return data


def _string(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _flag(value: Any, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {value!r}")
    return value


def _count(value: Any, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field {key!r} must be a non-negative integer, got {value!r}")
    return value


def _items(data: Mapping[str, Any], key: str, parse: Callable[[Any], _T]) -> list[_T]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list, got {value!r}")
    return [parse(item) for item in value]


def _timestamp(value: Any, key: str) -> TimeStamp:
    if value is None:
        return TimeStamp()
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a timestamp string, got {value!r}")
    return TimeStamp.from_text(value)


@dataclass(frozen=True)
class TimeStamp:
    """A Gitter timestamp together with the text it was parsed from."""

    time: datetime | None = None
    original_value: str = ""

    @classmethod
    def from_text(cls, text: str) -> TimeStamp:
        """Parse a Gitter-styled timestamp such as "2014-03-24T15:41:18.991Z"."""
        match = _TIMESTAMP.fullmatch(text)
        if match is None:
            raise ValueError(f"cannot parse {text!r}: expected YYYY-MM-DDTHH:MM:SS[.fff]Z")
        year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
        fraction = match.group(7) or ""
        microsecond = int((fraction + "000000")[:6])
        try:
            moment = datetime(year, month, day, hour, minute, second, microsecond, tzinfo=timezone.utc)
        except ValueError as exc:
            raise ValueError(f"cannot parse {text!r}: {exc}") from exc
        return cls(time=moment, original_value=text)

    def to_text(self) -> str:
        """Return the original Gitter-styled value."""
        return self.original_value

    def __str__(self) -> str:
        return self.original_value


def _timestamp_dict(stamp: TimeStamp) -> str | None:
    return stamp.original_value or None


@dataclass
class User:
    """Gitter's user resource."""

    id: str = ""
    username: str = ""
    display_name: str = ""
    url: str = ""
    avatar_url_small: str = ""
    avatar_url_medium: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> User:
        """Build a user from decoded JSON."""
        data = _mapping(data)
        return cls(
            id=_string(data.get("id"), "id"),
            username=_string(data.get("username"), "username"),
            display_name=_string(data.get("displayName"), "displayName"),
            url=_string(data.get("url"), "url"),
            avatar_url_small=_string(data.get("avatarUrlSmall"), "avatarUrlSmall"),
            avatar_url_medium=_string(data.get("avatarUrlMedium"), "avatarUrlMedium"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "url": self.url,
            "avatarUrlSmall": self.avatar_url_small,
            "avatarUrlMedium": self.avatar_url_medium,
        }


@dataclass
class Mention:
    """A mention of a user inside a message."""

    screen_name: str = ""
    user_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Mention:
        """Build a mention from decoded JSON."""
        data = _mapping(data)
        return cls(
            screen_name=_string(data.get("screenName"), "screenName"),
            user_id=_string(data.get("userId"), "userId"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation."""
        return {"screenName": self.screen_name, "userId": self.user_id}


@dataclass
class Issue:
    """An issue number mentioned in a message."""

    number: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Issue:
        """Build an issue reference from decoded JSON."""
        data = _mapping(data)
        return cls(number=_count(data.get("number"), "number"))

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation."""
        return {"number": self.number}


@dataclass
class Room:
    """Gitter's room resource; also serves as a message destination."""

    id: str = ""
    name: str = ""
    topic: str = ""
    uri: str = ""
    one_to_one: bool = False
    users: list[User] = field(default_factory=list)
    unread_items: int = 0
    mentions: int = 0
    last_access_time: TimeStamp = field(default_factory=TimeStamp)
    favourite: int = 0
    lurk: bool = False
    url: str = ""
    github_type: str = ""
    tags: list[str] = field(default_factory=list)
    version: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Room:
        """Build a room from decoded JSON."""
        data = _mapping(data)
        return cls(
            id=_string(data.get("id"), "id"),
            name=_string(data.get("name"), "name"),
            topic=_string(data.get("topic"), "topic"),
            uri=_string(data.get("uri"), "uri"),
            one_to_one=_flag(data.get("oneToOne"), "oneToOne"),
            users=_items(data, "users", User.from_dict),
            unread_items=_count(data.get("unreadItems"), "unreadItems"),
            mentions=_count(data.get("mentions"), "mentions"),
            last_access_time=_timestamp(data.get("lastAccessTime"), "lastAccessTime"),
            favourite=_count(data.get("favourite"), "favourite"),
            lurk=_flag(data.get("lurk"), "lurk"),
            url=_string(data.get("url"), "url"),
            github_type=_string(data.get("githubType"), "githubType"),
            tags=_items(data, "tags", lambda item: _string(item, "tags")),
            version=_count(data.get("v"), "v"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "name": self.name,
            "topic": self.topic,
            "uri": self.uri,
            "oneToOne": self.one_to_one,
            "users": [user.to_dict() for user in self.users],
            "unreadItems": self.unread_items,
            "mentions": self.mentions,
            "lastAccessTime": _timestamp_dict(self.last_access_time),
            "favourite": self.favourite,
            "lurk": self.lurk,
            "url": self.url,
            "githubType": self.github_type,
            "tags": list(self.tags),
            "v": self.version,
        }


@dataclass
class Message:
    """Gitter's message resource."""

    id: str = ""
    text: str = ""
    html: str = ""
    send_time_stamp: TimeStamp = field(default_factory=TimeStamp)
    edit_time_stamp: TimeStamp = field(default_factory=TimeStamp)
    from_user: User = field(default_factory=User)
    unread: bool = False
    read_by: int = 0
    urls: list[str] = field(default_factory=list)
    mentions: list[Mention] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    meta: list[dict[str, Any]] = field(default_factory=list)
    version: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Message:
        """Build a message from decoded JSON."""
        data = _mapping(data)
        return cls(
            id=_string(data.get("id"), "id"),
            text=_string(data.get("text"), "text"),
            html=_string(data.get("html"), "html"),
            send_time_stamp=_timestamp(data.get("sent"), "sent"),
            edit_time_stamp=_timestamp(data.get("editedAt"), "editedAt"),
            from_user=User.from_dict(data.get("fromUser")),
            unread=_flag(data.get("unread"), "unread"),
            read_by=_count(data.get("readBy"), "readBy"),
            urls=_items(data, "urls", lambda item: _string(item, "urls")),
            mentions=_items(data, "mentions", Mention.from_dict),
            issues=_items(data, "issues", Issue.from_dict),
            meta=_items(data, "meta", lambda item: dict(_mapping(item))),
            version=_count(data.get("v"), "v"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "text": self.text,
            "html": self.html,
            "sent": _timestamp_dict(self.send_time_stamp),
            "editedAt": _timestamp_dict(self.edit_time_stamp),
            "fromUser": self.from_user.to_dict(),
            "unread": self.unread,
            "readBy": self.read_by,
            "urls": list(self.urls),
            "mentions": [mention.to_dict() for mention in self.mentions],
            "issues": [issue.to_dict() for issue in self.issues],
            "meta": [dict(item) for item in self.meta],
            "v": self.version,
        }
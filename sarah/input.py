"""Incoming messages and the wrappers that mark requests for help or abort."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Input(Protocol):
    """An incoming message received from a chat service."""

    @property
    def sender_key(self) -> str:
        """Key identifying the sender, usable to store conversational context."""
        ...

    @property
    def message(self) -> str:
        """Text of the message; empty for non-text payloads."""
        ...

    @property
    def sent_at(self) -> datetime:
        """When the message was sent, or received if unknown."""
        ...

    @property
    def reply_to(self) -> Any:
        """Destination to which a reply should be sent."""
        ...


@dataclass(frozen=True)
class _WrappedInput:
    original_input: Input
    sender_key: str
    message: str
    sent_at: datetime
    reply_to: Any


def _copied_fields(original: Input) -> dict[str, Any]:
    return {
        "original_input": original,
        "sender_key": original.sender_key,
        "message": original.message,
        "sent_at": original.sent_at,
        "reply_to": original.reply_to,
    }


class HelpInput(_WrappedInput):
    """An input that stands for the user's request for help."""


class AbortInput(_WrappedInput):
    """An input that stands for the user's request to cancel the current context."""


def new_help_input(original: Input) -> HelpInput:
    """Wrap the given input as a request for help."""
    return HelpInput(**_copied_fields(original))


def new_abort_input(original: Input) -> AbortInput:
    """Wrap the given input as a request to abort the conversational context."""
    return AbortInput(**_copied_fields(original))
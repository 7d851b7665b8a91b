"""Outgoing messages and their destinations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Output(Protocol):
    """An outgoing message."""

    @property
    def destination(self) -> Any:
        """Where the message is to be sent."""
        ...

    @property
    def content(self) -> Any:
        """The payload to send."""
        ...


@dataclass(frozen=True)
class OutputMessage:
    """An outgoing message: a destination and the payload to send there."""

    destination: Any
    content: Any


def new_output_message(destination: Any, content: Any) -> OutputMessage:
    """Create an outgoing message for the given destination and payload."""
    return OutputMessage(destination=destination, content=content)
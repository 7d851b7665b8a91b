from dataclasses import dataclass
from datetime import datetime
from typing import Any

import pytest

from sarah.input import (
    AbortInput,
    HelpInput,
    new_abort_input,
    new_help_input,
)


@dataclass
class DummyInput:
    sender_key: str = ""
    message: str = ""
    sent_at: datetime = datetime.min
    reply_to: Any = None


SENDER_KEY = "sender"
MESSAGE = "Hello, 世界."
DESTINATION = "100 N University Dr Edmond, OK"


@pytest.fixture
def dummy_input():
    return DummyInput(
        sender_key=SENDER_KEY,
        message=MESSAGE,
        sent_at=datetime.now(),
        reply_to=DESTINATION,
    )


def test_new_help_input(dummy_input):
    help_input = new_help_input(dummy_input)

    assert isinstance(help_input, HelpInput)
    assert help_input.sender_key == SENDER_KEY
    assert help_input.message == MESSAGE
    assert help_input.sent_at == dummy_input.sent_at
    assert help_input.reply_to == DESTINATION
    assert help_input.original_input is dummy_input


def test_new_abort_input(dummy_input):
    abort_input = new_abort_input(dummy_input)

    assert isinstance(abort_input, AbortInput)
    assert abort_input.sender_key == SENDER_KEY
    assert abort_input.message == MESSAGE
    assert abort_input.sent_at == dummy_input.sent_at
    assert abort_input.reply_to == DESTINATION
    assert abort_input.original_input is dummy_input


def test_wrappers_can_wrap_each_other(dummy_input):
    abort_input = new_abort_input(new_help_input(dummy_input))

    assert abort_input.original_input.original_input is dummy_input
    assert abort_input.sender_key == SENDER_KEY
    assert abort_input.message == MESSAGE
    assert abort_input.reply_to == DESTINATION


def test_help_and_abort_inputs_are_distinct(dummy_input):
    assert new_help_input(dummy_input) != new_abort_input(dummy_input)
    assert new_help_input(dummy_input) == new_help_input(dummy_input)


def test_wrapped_input_is_immutable(dummy_input):
    help_input = new_help_input(dummy_input)
    with pytest.raises(AttributeError):
        help_input.message = "changed"
    assert help_input.message == MESSAGE
"""Settings for the Gitter adapter and the retry helper it uses."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

_T = TypeVar("_T")

_log = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """How many times to try a call and how long to wait between failures, in seconds."""

    trial: int = 1
    interval: float = 0.0


def _default_retry_policy() -> RetryPolicy:
    return RetryPolicy(trial=10, interval=0.5)


@dataclass
class Config:
    """Gitter adapter settings; the token has no default and must be set."""

    token: str = ""
    retry_policy: RetryPolicy = field(default_factory=_default_retry_policy)


def with_retry(policy: RetryPolicy, fn: Callable[[], _T]) -> _T:
    """Call fn until it succeeds or the policy's trials run out; re-raise the last error."""
    attempts = max(policy.trial, 1)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as exc:
            if attempt == attempts:
                raise
            _log.debug("Attempt %d of %d failed: %s", attempt, attempts, exc)
            time.sleep(policy.interval)
    raise AssertionError("unreachable")
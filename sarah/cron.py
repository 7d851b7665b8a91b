"""Cron-style schedule specifications and their next activation times.

Supported: five fields (minute, hour, day of month, month, day of week) with
lists, ranges, steps and names; @yearly, @annually, @monthly, @weekly,
@daily, @midnight, @hourly; "@every <duration>"; and a "CRON_TZ=" or "TZ="
prefix.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ScheduleError(ValueError):
    """Raised when a schedule specification cannot be parsed."""


_MONTH_NAMES = {n: i for i, n in enumerate("jan feb mar apr may jun jul aug sep oct nov dec".split(), 1)}
_DOW_NAMES = {n: i for i, n in enumerate("sun mon tue wed thu fri sat".split())}
_FIELD_BOUNDS = [(0, 59, {}), (0, 23, {}), (1, 31, {}), (1, 12, _MONTH_NAMES), (0, 6, _DOW_NAMES)]

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_EVERY = "@every "
_SEARCH_YEARS = 5

_PART = r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION = re.compile(rf"[+-]?(0|(?:{_PART})+)")
_UNIT_SECONDS = {"ns": 1e-9, "us": 1e-6, "µs": 1e-6, "μs": 1e-6, "ms": 1e-3, "s": 1, "m": 60, "h": 3600}


@dataclass(frozen=True)
class CronSchedule:
    """A schedule given by sets of allowed minutes, hours, days and months."""

    minutes: frozenset[int]
    hours: frozenset[int]
    days_of_month: frozenset[int]
    months: frozenset[int]
    days_of_week: frozenset[int]
    dom_wildcard: bool = False
    dow_wildcard: bool = False
    location: tzinfo | None = None

    def next_after(self, moment: datetime) -> datetime | None:
        """Return the first activation strictly after moment, or None if there is none."""
        if self.location is not None:
            moment = moment.astimezone(self.location)
        zone = moment.tzinfo
        current = moment.replace(tzinfo=None, second=0, microsecond=0) + timedelta(minutes=1)
        limit = current.year + _SEARCH_YEARS
        while current.year <= limit:
            if current.month not in self.months:
                year, month = divmod(current.year * 12 + current.month, 12)
                current = datetime(year, month + 1, 1)
            elif not self._day_matches(current):
                current = current.replace(hour=0, minute=0) + timedelta(days=1)
            elif current.hour not in self.hours:
                current = current.replace(minute=0) + timedelta(hours=1)
            elif current.minute not in self.minutes:
                current += timedelta(minutes=1)
            else:
                return current.replace(tzinfo=zone)
        return None

    def _day_matches(self, moment: datetime) -> bool:
        dom_match = moment.day in self.days_of_month
        dow_match = (moment.weekday() + 1) % 7 in self.days_of_week
        if self.dom_wildcard or self.dow_wildcard:
            return dom_match and dow_match
        return dom_match or dow_match


@dataclass(frozen=True)
class IntervalSchedule:
    """A schedule that fires at a constant delay, rounded to whole seconds (at least one)."""

    delay: timedelta

    def __post_init__(self) -> None:
        seconds = max(int(self.delay.total_seconds()), 1)
        object.__setattr__(self, "delay", timedelta(seconds=seconds))

    def next_after(self, moment: datetime) -> datetime:
        """Return the activation one delay after moment, on a whole second."""
        return moment.replace(microsecond=0) + self.delay


def _number(text: str, names: dict[str, int] | None = None) -> int:
    if names and text.lower() in names:
        return names[text.lower()]
    if not re.fullmatch(r"\+?\d+", text):
        raise ScheduleError(f"failed to parse non-negative int from {text!r}")
    return int(text)


def _parse_range(expr: str, low: int, high: int, names: dict[str, int]) -> tuple[set[int], bool]:
    range_part, *steps = expr.split("/")
    if len(steps) > 1:
        raise ScheduleError(f"too many slashes: {expr}")
    ends = range_part.split("-")
    wildcard = ends[0] in ("*", "?")
    if wildcard:
        start, end = low, high
    elif len(ends) > 2:
        raise ScheduleError(f"too many hyphens: {expr}")
    else:
        start, end = _number(ends[0], names), _number(ends[-1], names)

    step = 1
    if steps:
        step = _number(steps[0])
        if len(ends) == 1:
            end = high
        wildcard = wildcard and step <= 1

    if start < low or end > high or start > end:
        raise ScheduleError(f"range {start}-{end} outside {low}-{high} or reversed: {expr}")
    if step == 0:
        raise ScheduleError(f"step of range should be a positive number: {expr}")
    return set(range(start, end + 1, step)), wildcard


def _parse_duration(text: str) -> timedelta:
    if not _DURATION.fullmatch(text):
        raise ScheduleError(f"invalid duration: {text!r}")
    seconds = sum(float(value) * _UNIT_SECONDS[unit] for value, unit in re.findall(_PART, text))
    return timedelta(seconds=-seconds if text.startswith("-") else seconds)


def _parse_fields(spec: str, location: tzinfo | None) -> CronSchedule:
    fields = spec.split()
    if len(fields) != 5:
        raise ScheduleError(f"expected exactly 5 fields, found {len(fields)}: {spec!r}")
    parsed = []
    for field, (low, high, names) in zip(fields, _FIELD_BOUNDS):
        values: set[int] = set()
        wildcard = False
        for part in field.split(","):
            part_values, part_wildcard = _parse_range(part, low, high, names)
            values |= part_values
            wildcard = wildcard or part_wildcard
        parsed.append((frozenset(values), wildcard))
    (minutes, _), (hours, _), (dom, dom_wild), (months, _), (dow, dow_wild) = parsed
    return CronSchedule(minutes, hours, dom, months, dow, dom_wild, dow_wild, location)


def parse_schedule(spec: str) -> CronSchedule | IntervalSchedule:
    """Parse a schedule specification; raise ScheduleError if it is invalid."""
    if not spec:
        raise ScheduleError("empty spec string")

    location: tzinfo | None = None
    if spec.startswith(("TZ=", "CRON_TZ=")):
        head, separator, rest = spec.partition(" ")
        if not separator:
            raise ScheduleError(f"missing schedule after time zone: {spec!r}")
        zone_name = head.split("=", 1)[1]
        try:
            location = ZoneInfo(zone_name)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise ScheduleError(f"provided bad location {zone_name}: {exc}") from exc
        spec = rest.strip()

    if spec.startswith(_EVERY):
        return IntervalSchedule(_parse_duration(spec[len(_EVERY):]))
    if spec.startswith("@"):
        if spec not in _DESCRIPTORS:
            raise ScheduleError(f"unrecognized descriptor: {spec}")
        spec = _DESCRIPTORS[spec]
    return _parse_fields(spec, location)
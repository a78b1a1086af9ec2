"""
Date expressions embedded in a clips command.

Two grammars are recognized:
- absolute dates: YYYY-MM-DD, at most two, in order of appearance
- relative shorthand: <N>d, <N>m or <N>y, counted back from today

Relative shorthand is only looked at when no absolute date was found.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .utils.logger import get_logger

logger = get_logger("dates")

ABSOLUTE_DATE_PATTERN = re.compile(r"[12][0-9]{3}-(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])")
RELATIVE_DATE_PATTERN = re.compile(r"\b(\d+)(d|m|y)\b")

DATE_FORMAT = "%Y-%m-%d"


class DateParseError(ValueError):
    """A date matched the YYYY-MM-DD pattern but is not a real calendar date."""


@dataclass(frozen=True)
class DateRange:
    """Time bounds found in a command, plus the substrings they came from."""

    started_at: datetime | None = None
    ended_at: datetime | None = None
    matched: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.matched)


def truncate_to_day(moment: datetime) -> datetime:
    """Start of the UTC day containing moment."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move moment by a number of months, clamping the day to the target month's length."""
    total = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def _parse_date(value: str) -> datetime:
    try:
        parsed = datetime.strptime(value, DATE_FORMAT)
    except ValueError as e:
        raise DateParseError(f"Invalid date: {value}") from e
    return parsed.replace(tzinfo=timezone.utc)


def parse_absolute_dates(text: str) -> DateRange:
    """
    Find up to two YYYY-MM-DD dates in text.

    One date sets started_at only. Two dates set started_at and ended_at
    in the order they appear, without sorting them.

    Raises:
        DateParseError: if a matched date does not exist (e.g. 2021-02-30)
    """
    matched = tuple(m.group(0) for m in ABSOLUTE_DATE_PATTERN.finditer(text))[:2]
    if not matched:
        return DateRange()

    started_at = _parse_date(matched[0])
    ended_at = _parse_date(matched[1]) if len(matched) > 1 else None
    return DateRange(started_at=started_at, ended_at=ended_at, matched=matched)


def parse_relative_date(text: str, now: datetime | None = None) -> DateRange:
    """
    Find the first <N><d|m|y> token in text.

    The range ends today (truncated to the day) and starts N days,
    months or years earlier.
    """
    match = RELATIVE_DATE_PATTERN.search(text)
    if not match:
        return DateRange()

    value, unit = int(match.group(1)), match.group(2)
    today = truncate_to_day(now or datetime.now(timezone.utc))

    try:
        if unit == "d":
            started_at = today - timedelta(days=value)
        elif unit == "m":
            started_at = shift_months(today, -value)
        else:
            started_at = shift_months(today, -12 * value)
    except (ValueError, OverflowError) as e:
        raise DateParseError(f"Date out of range: {match.group(0)}") from e

    return DateRange(started_at=started_at, ended_at=today, matched=(match.group(0),))


def resolve_dates(text: str, now: datetime | None = None) -> DateRange:
    """Absolute dates win; relative shorthand is only tried when there are none."""
    dates = parse_absolute_dates(text)
    if dates:
        return dates
    return parse_relative_date(text, now=now)

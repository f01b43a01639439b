"""
Challenge calendar: the fixed day and week structure of the challenge.

Day identity is the local calendar date. Keys are built from the local
year/month/day so a late-evening timestamp never lands on the next UTC day.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Sequence, Tuple, Union

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class CalendarDay:
    iso: str
    date: date
    short: str  # weekday, e.g. "Mon"
    long: str   # e.g. "Oct 6"
    label: str  # e.g. "Mon, Oct 6"


@dataclass(frozen=True)
class Week:
    days: Tuple[CalendarDay, ...]
    label: str


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def to_iso(value: DateLike) -> str:
    d = _as_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def _long_label(d: date) -> str:
    return f"{d.strftime('%b')} {d.day}"


def readable_date(iso: str) -> str:
    d = date.fromisoformat(iso)
    return f"{d.strftime('%a')}, {_long_label(d)}"


def make_day(d: date) -> CalendarDay:
    iso = to_iso(d)
    return CalendarDay(
        iso=iso,
        date=d,
        short=d.strftime("%a"),
        long=_long_label(d),
        label=readable_date(iso),
    )


def build_challenge_days(start: DateLike, end: DateLike) -> List[CalendarDay]:
    """Every calendar day from start's date through end's date inclusive."""
    first, last = _as_date(start), _as_date(end)
    if isinstance(start, datetime) and isinstance(end, datetime) and end < start:
        return []
    if last < first:
        return []
    return [make_day(first + timedelta(days=i)) for i in range((last - first).days + 1)]


def chunk_by_week(days: Sequence[CalendarDay], size: int = 7) -> List[Week]:
    weeks = []
    for i in range(0, len(days), size):
        chunk = tuple(days[i:i + size])
        weeks.append(Week(days=chunk, label=f"{chunk[0].long} – {chunk[-1].long}"))
    return weeks

"""Local calendar-day helpers.

Every day boundary in the journal goes through :func:`local_day_key` so that
partitioning, streaks, range buckets and report filenames agree on which
local day an instant belongs to.
"""

from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from food_journal.domain.entries import FoodEntry

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)
_MIN_EPOCH_MS = (datetime(1, 1, 2, tzinfo=UTC) - _EPOCH) // _ONE_MS
_MAX_EPOCH_MS = (datetime(9999, 12, 30, tzinfo=UTC) - _EPOCH) // _ONE_MS


def to_epoch_ms(moment: datetime) -> int:
    """Return epoch milliseconds for an aware datetime."""
    return (moment - _EPOCH) // _ONE_MS


def from_epoch_ms(timestamp_ms: int, tz: ZoneInfo) -> datetime:
    """Return the local datetime for epoch milliseconds."""
    return (_EPOCH + timedelta(milliseconds=timestamp_ms)).astimezone(tz)


def local_date(timestamp_ms: int, tz: ZoneInfo) -> date:
    """Return the local calendar date of an instant."""
    return from_epoch_ms(timestamp_ms, tz).date()


def local_day_key(timestamp_ms: int, tz: ZoneInfo) -> str:
    """Return the local ``YYYY-MM-DD`` key of an instant."""
    return local_date(timestamp_ms, tz).isoformat()


def parse_day_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key."""
    return date.fromisoformat(key)


def days_between(earlier: str, later: str) -> int:
    """Return whole calendar days from ``earlier`` to ``later``."""
    return (parse_day_key(later) - parse_day_key(earlier)).days


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    """Return the local midnight that starts ``day``."""
    return datetime.combine(day, time.min, tzinfo=tz)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[int, int]:
    """Return ``[start, end)`` epoch milliseconds for a local day.

    Days are 23 or 25 hours long across DST transitions.
    """
    start = local_midnight(day, tz)
    end = local_midnight(day + timedelta(days=1), tz)
    return to_epoch_ms(start), to_epoch_ms(end)


def minute_of_day(timestamp_ms: int, tz: ZoneInfo) -> int:
    """Return minutes since local midnight for an instant."""
    moment = from_epoch_ms(timestamp_ms, tz)
    return moment.hour * 60 + moment.minute


def entries_for_day(
    entries: Iterable[FoodEntry], day: date | str, tz: ZoneInfo
) -> list[FoodEntry]:
    """Return entries logged on ``day``, in insertion order."""
    key = day if isinstance(day, str) else day.isoformat()
    return [entry for entry in entries if local_day_key(entry.timestamp_ms, tz) == key]


def is_valid_epoch_ms(timestamp_ms: float) -> bool:
    """Return True when an instant maps to a local date in every timezone.

    The first and last day of the ``datetime`` range are excluded so a
    timezone offset can never push the local date out of range. NaN and
    infinities fall outside the range.
    """
    return _MIN_EPOCH_MS <= timestamp_ms <= _MAX_EPOCH_MS

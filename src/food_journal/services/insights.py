"""Range analytics over the journal."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from food_journal.domain.entries import FoodEntry
from food_journal.domain.insights import (
    DailyBucket,
    MacroShare,
    RangeSummary,
    TimeRange,
)
from food_journal.services.calendar import local_day_key, to_epoch_ms
from food_journal.services.export import export_csv, report_filename
from food_journal.services.totals import sum_nutrition


class EntrySource(Protocol):
    """Read access to the full entry collection."""

    def all(self) -> list[FoodEntry]:
        """Return all entries in insertion order."""


@dataclass
class InsightsService:
    """Service for range summaries and reports in the journal's timezone."""

    source: EntrySource
    timezone: ZoneInfo

    def get_range(
        self, time_range: TimeRange, now: datetime | None = None
    ) -> RangeSummary:
        """Return the summary for a lookback window ending today."""
        return summarize_range(
            self.source.all(), time_range, self.timezone, _resolve_now(now)
        )

    def export_report(
        self, time_range: TimeRange, now: datetime | None = None
    ) -> tuple[str, str]:
        """Return the report filename and CSV content for a window."""
        resolved_now = _resolve_now(now)
        summary = summarize_range(
            self.source.all(), time_range, self.timezone, resolved_now
        )
        filename = report_filename(
            time_range, to_epoch_ms(resolved_now), self.timezone
        )
        return filename, export_csv(summary.entries, self.timezone)


def summarize_range(
    entries: Iterable[FoodEntry],
    time_range: TimeRange,
    tz: ZoneInfo,
    now: datetime,
) -> RangeSummary:
    """Aggregate entries into a gap-free daily series for a window.

    The average divides by the number of days in the window, so idle days
    count as zero.
    """
    end_day = now.astimezone(tz).date()
    start_day = end_day - timedelta(days=time_range.days - 1)

    buckets: dict[str, list[float]] = {}
    for offset in range(time_range.days):
        day = start_day + timedelta(days=offset)
        buckets[day.isoformat()] = [0.0, 0.0]

    in_range: list[FoodEntry] = []
    for entry in entries:
        bucket = buckets.get(local_day_key(entry.timestamp_ms, tz))
        if bucket is None:
            continue
        bucket[0] += entry.nutrition.calories
        bucket[1] += entry.nutrition.water_ml
        in_range.append(entry)

    daily = [
        DailyBucket(
            day=date.fromisoformat(key),
            calories=values[0],
            water_ml=values[1],
            label=_bucket_label(date.fromisoformat(key), time_range),
        )
        for key, values in buckets.items()
    ]
    totals = sum_nutrition(in_range)

    return RangeSummary(
        time_range=time_range,
        start_day=start_day,
        end_day=end_day,
        daily=daily,
        totals=totals,
        average_daily_calories=totals.calories / time_range.days,
        macro_distribution=[
            MacroShare(name="Protein", grams=totals.protein_g),
            MacroShare(name="Carbs", grams=totals.carbs_g),
            MacroShare(name="Fat", grams=totals.fat_g),
        ],
        entries=in_range,
    )


def _bucket_label(day: date, time_range: TimeRange) -> str:
    if time_range is TimeRange.WEEK:
        return day.strftime("%a")
    if time_range is TimeRange.YEAR:
        return day.strftime("%b")
    return f"{day.strftime('%b')} {day.day}"


def _resolve_now(now: datetime | None) -> datetime:
    return now or datetime.now(tz=UTC)

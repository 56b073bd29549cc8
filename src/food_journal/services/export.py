"""CSV report export."""

from collections.abc import Iterable
from zoneinfo import ZoneInfo

from food_journal.domain.entries import FoodEntry
from food_journal.domain.insights import TimeRange
from food_journal.services.calendar import from_epoch_ms, local_day_key

CSV_HEADER = (
    "Date",
    "Time",
    "Food Name",
    "Type",
    "Source",
    "Calories",
    "Protein (g)",
    "Carbs (g)",
    "Fat (g)",
    "Water (ml)",
    "Fiber (g)",
    "Sugar (g)",
)


def export_csv(entries: Iterable[FoodEntry], tz: ZoneInfo) -> str:
    """Render entries as a complete CSV document, one row per entry."""
    lines = [",".join(CSV_HEADER)]
    for entry in entries:
        lines.append(",".join(_row(entry, tz)))
    return "\n".join(lines)


def report_filename(time_range: TimeRange, now_ms: int, tz: ZoneInfo) -> str:
    """Return the download filename for a report generated at ``now_ms``."""
    return f"nutrition_report_{time_range.label}_{local_day_key(now_ms, tz)}.csv"


def quote_field(value: str) -> str:
    """Quote a text field, doubling embedded quote characters."""
    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def _row(entry: FoodEntry, tz: ZoneInfo) -> list[str]:
    moment = from_epoch_ms(entry.timestamp_ms, tz)
    nutrition = entry.nutrition
    return [
        moment.date().isoformat(),
        moment.strftime("%H:%M:%S"),
        quote_field(entry.name),
        entry.meal_slot.value,
        entry.provenance.value,
        _format_number(nutrition.calories),
        _format_number(nutrition.protein_g),
        _format_number(nutrition.carbs_g),
        _format_number(nutrition.fat_g),
        _format_number(nutrition.water_ml),
        _format_number(nutrition.fiber_g),
        _format_number(nutrition.sugar_g),
    ]


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")

"""Journal store: the single owner of the entry collection and profile."""

import json
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from food_journal.domain.analysis import AnalysisResult
from food_journal.domain.entries import FoodEntry, MealSlot, NutritionVector, Provenance
from food_journal.domain.errors import AnalysisInputError
from food_journal.domain.insights import DaySummary
from food_journal.domain.profile import UserProfile
from food_journal.services.calendar import (
    day_bounds,
    entries_for_day,
    is_valid_epoch_ms,
    local_day_key,
    minute_of_day,
    to_epoch_ms,
)
from food_journal.services.meal_slots import infer_meal_slot
from food_journal.services.streaks import advance_streak
from food_journal.services.totals import sum_nutrition

logger = logging.getLogger(__name__)

ENTRIES_KEY = "food_journal_entries"
PROFILE_KEY = "food_journal_profile"
DEFAULT_CALORIE_GOAL = 2500.0
QUICK_WATER_ML = 250.0
PERSISTENCE_WARNING = (
    "Your latest change could not be saved and may be lost after a reload."
)

_LEGACY_PROVENANCE = {"image": Provenance.PHOTO}


class BlobStore(Protocol):
    """Key-value persistence for whole serialized blobs."""

    def load(self, key: str) -> str | None:
        """Return the blob stored under ``key``, if any."""

    def save(self, key: str, blob: str) -> None:
        """Store ``blob`` under ``key``, replacing any previous value."""


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a journal mutation."""

    changed: bool
    persisted: bool
    entry: FoodEntry | None = None
    profile: UserProfile | None = None

    @property
    def warning(self) -> str | None:
        return None if self.persisted else PERSISTENCE_WARNING


@dataclass
class JournalService:
    """Owns the entries and profile; every mutation is persisted before returning."""

    store: BlobStore
    timezone: ZoneInfo
    calorie_goal: float = DEFAULT_CALORIE_GOAL
    _entries: list[FoodEntry] = field(default_factory=list, init=False, repr=False)
    _profile: UserProfile | None = field(default=None, init=False, repr=False)

    @classmethod
    def load(
        cls,
        store: BlobStore,
        timezone: ZoneInfo,
        calorie_goal: float = DEFAULT_CALORIE_GOAL,
        now: datetime | None = None,
    ) -> "JournalService":
        """Load persisted state, dropping images from entries before today."""
        service = cls(store=store, timezone=timezone, calorie_goal=calorie_goal)
        resolved_now = now or datetime.now(tz=UTC)
        today = resolved_now.astimezone(timezone).date()
        start_of_today, _ = day_bounds(today, timezone)
        service._entries = [
            _drop_stale_image(entry, start_of_today)
            for entry in _decode_entries(store.load(ENTRIES_KEY))
        ]
        service._profile = _decode_profile(store.load(PROFILE_KEY))
        return service

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    def all(self) -> list[FoodEntry]:
        """Return all entries in insertion order."""
        return list(self._entries)

    def create_profile(self, name: str) -> MutationResult:
        """Create the profile captured at onboarding."""
        cleaned = name.strip()
        if not cleaned:
            raise AnalysisInputError("Please enter your name.")
        self._profile = UserProfile(name=cleaned, streak=0, last_log_day="")
        persisted = self._persist()
        return MutationResult(changed=True, persisted=persisted, profile=self._profile)

    def add(self, entry: FoodEntry) -> MutationResult:
        """Append an entry, advance the streak and persist."""
        if any(existing.id == entry.id for existing in self._entries):
            raise ValueError(f"Entry {entry.id} already exists")
        self._entries.append(entry)
        if self._profile is not None:
            state = advance_streak(
                self._profile.streak_state,
                local_day_key(entry.timestamp_ms, self.timezone),
            )
            self._profile = replace(
                self._profile, streak=state.streak, last_log_day=state.last_log_day
            )
        persisted = self._persist()
        return MutationResult(
            changed=True, persisted=persisted, entry=entry, profile=self._profile
        )

    def add_quick_water(self, now: datetime | None = None) -> MutationResult:
        """Log a 250 ml glass of water."""
        timestamp_ms = to_epoch_ms(now or datetime.now(tz=UTC))
        entry = FoodEntry(
            id=new_entry_id(timestamp_ms),
            name="Water",
            description="Quick add (250ml)",
            timestamp_ms=timestamp_ms,
            nutrition=NutritionVector(water_ml=QUICK_WATER_ML),
            provenance=Provenance.WATER,
            meal_slot=infer_meal_slot(minute_of_day(timestamp_ms, self.timezone)),
        )
        return self.add(entry)

    def add_analysis(  # noqa: PLR0913
        self,
        result: AnalysisResult,
        provenance: Provenance,
        image_url: str | None = None,
        meal_slot: MealSlot | None = None,
        now: datetime | None = None,
    ) -> MutationResult:
        """Log an entry built from a successful analysis."""
        timestamp_ms = to_epoch_ms(now or datetime.now(tz=UTC))
        entry = FoodEntry(
            id=new_entry_id(timestamp_ms),
            name=result.food_name,
            description=result.description or None,
            health_tip=result.health_tip or None,
            timestamp_ms=timestamp_ms,
            nutrition=NutritionVector(
                calories=result.calories,
                protein_g=result.protein,
                carbs_g=result.carbs,
                fat_g=result.fat,
                fiber_g=result.fiber,
                sugar_g=result.sugar,
                water_ml=result.water,
            ),
            provenance=provenance,
            meal_slot=meal_slot
            or infer_meal_slot(minute_of_day(timestamp_ms, self.timezone)),
            image_url=image_url,
        )
        return self.add(entry)

    def delete(self, entry_id: str) -> MutationResult:
        """Remove the entry with ``entry_id``; unknown ids are a no-op."""
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[index]
                persisted = self._persist()
                return MutationResult(changed=True, persisted=persisted, entry=entry)
        return MutationResult(changed=False, persisted=True)

    def entries_for_day(self, day: date | str) -> list[FoodEntry]:
        """Return entries logged on a local day."""
        return entries_for_day(self._entries, day, self.timezone)

    def day_summary(
        self, day: date | None = None, now: datetime | None = None
    ) -> DaySummary:
        """Return a day's entries and totals against the calorie goal."""
        resolved_day = day or (now or datetime.now(tz=UTC)).astimezone(
            self.timezone
        ).date()
        entries = self.entries_for_day(resolved_day)
        totals = sum_nutrition(entries)
        percent = (
            min(100, round(totals.calories / self.calorie_goal * 100))
            if self.calorie_goal > 0
            else 0
        )
        return DaySummary(
            day=resolved_day,
            entries=entries,
            totals=totals,
            calorie_goal=self.calorie_goal,
            goal_percent=percent,
        )

    def _persist(self) -> bool:
        try:
            self.store.save(ENTRIES_KEY, _encode_entries(self._entries))
            if self._profile is not None:
                self.store.save(PROFILE_KEY, _encode_profile(self._profile))
        except Exception:
            logger.exception(
                "Failed to persist journal", extra={"entry_count": len(self._entries)}
            )
            return False
        return True


def new_entry_id(timestamp_ms: int) -> str:
    """Return a unique id that sorts in generation order."""
    return f"{timestamp_ms:013d}-{uuid4().hex[:8]}"


def _drop_stale_image(entry: FoodEntry, start_of_today_ms: int) -> FoodEntry:
    if entry.image_url and entry.timestamp_ms < start_of_today_ms:
        return replace(entry, image_url=None)
    return entry


def _encode_entries(entries: list[FoodEntry]) -> str:
    return json.dumps([_entry_to_row(entry) for entry in entries])


def _encode_profile(profile: UserProfile) -> str:
    return json.dumps(
        {
            "name": profile.name,
            "streak": profile.streak,
            "lastLogDate": profile.last_log_day,
        }
    )


def _entry_to_row(entry: FoodEntry) -> dict[str, object]:
    row: dict[str, object] = {
        "id": entry.id,
        "name": entry.name,
        "nutrition": {
            "calories": entry.nutrition.calories,
            "protein": entry.nutrition.protein_g,
            "carbs": entry.nutrition.carbs_g,
            "fat": entry.nutrition.fat_g,
            "fiber": entry.nutrition.fiber_g,
            "sugar": entry.nutrition.sugar_g,
            "water": entry.nutrition.water_ml,
        },
        "timestamp": entry.timestamp_ms,
        "source": entry.provenance.value,
        "mealType": entry.meal_slot.value,
    }
    if entry.description is not None:
        row["description"] = entry.description
    if entry.health_tip is not None:
        row["healthTip"] = entry.health_tip
    if entry.image_url is not None:
        row["imageUrl"] = entry.image_url
    return row


def _decode_entries(blob: str | None) -> list[FoodEntry]:
    if not blob:
        return []
    try:
        rows = json.loads(blob)
    except ValueError:
        logger.exception("Stored entries are not valid JSON; starting empty")
        return []
    if not isinstance(rows, list):
        logger.error("Stored entries are not a list; starting empty")
        return []
    entries: list[FoodEntry] = []
    for row in rows:
        entry = _parse_entry(row)
        if entry is None:
            logger.warning("Skipping malformed stored entry", extra={"row": row})
            continue
        entries.append(entry)
    return entries


def _decode_profile(blob: str | None) -> UserProfile | None:
    if not blob:
        return None
    try:
        row = json.loads(blob)
    except ValueError:
        logger.exception("Stored profile is not valid JSON")
        return None
    if not isinstance(row, dict) or not row.get("name"):
        return None
    streak = row.get("streak")
    return UserProfile(
        name=str(row["name"]),
        streak=max(int(_to_float(streak)), 0),
        last_log_day=str(row.get("lastLogDate") or ""),
    )


def _parse_entry(row: object) -> FoodEntry | None:
    if not isinstance(row, dict):
        return None
    entry_id = row.get("id")
    timestamp = row.get("timestamp")
    if not entry_id or isinstance(timestamp, bool):
        return None
    if not isinstance(timestamp, int | float) or not is_valid_epoch_ms(timestamp):
        return None
    raw_nutrition = row.get("nutrition")
    nutrition = raw_nutrition if isinstance(raw_nutrition, dict) else {}
    return FoodEntry(
        id=str(entry_id),
        name=str(row.get("name") or ""),
        description=_optional_text(row.get("description")),
        health_tip=_optional_text(row.get("healthTip")),
        timestamp_ms=int(timestamp),
        nutrition=NutritionVector(
            calories=_non_negative(nutrition.get("calories")),
            protein_g=_non_negative(nutrition.get("protein")),
            carbs_g=_non_negative(nutrition.get("carbs")),
            fat_g=_non_negative(nutrition.get("fat")),
            fiber_g=_non_negative(nutrition.get("fiber")),
            sugar_g=_non_negative(nutrition.get("sugar")),
            water_ml=_non_negative(nutrition.get("water")),
        ),
        provenance=_parse_provenance(row.get("source")),
        meal_slot=_parse_meal_slot(row.get("mealType")),
        image_url=_optional_text(row.get("imageUrl")),
    )


def _parse_provenance(value: object) -> Provenance:
    if isinstance(value, str):
        if value in _LEGACY_PROVENANCE:
            return _LEGACY_PROVENANCE[value]
        try:
            return Provenance(value)
        except ValueError:
            return Provenance.PHOTO
    return Provenance.PHOTO


def _parse_meal_slot(value: object) -> MealSlot:
    if isinstance(value, str):
        try:
            return MealSlot(value)
        except ValueError:
            return MealSlot.SNACK
    return MealSlot.SNACK


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _to_float(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return 0.0
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _non_negative(value: object) -> float:
    return max(_to_float(value), 0.0)

"""Tests for local calendar-day helpers."""

from datetime import UTC, date, datetime

from food_journal.services.calendar import (
    day_bounds,
    days_between,
    entries_for_day,
    is_valid_epoch_ms,
    local_day_key,
    minute_of_day,
    to_epoch_ms,
)
from tests.conftest import NEW_YORK, make_entry


def test_local_day_key_uses_local_timezone_near_midnight() -> None:
    # 03:30 UTC on Jan 2 is still the evening of Jan 1 in New York.
    timestamp = to_epoch_ms(datetime(2024, 1, 2, 3, 30, tzinfo=UTC))

    assert local_day_key(timestamp, NEW_YORK) == "2024-01-01"
    assert local_day_key(timestamp, UTC) == "2024-01-02"


def test_local_day_key_at_exact_local_midnight() -> None:
    midnight = to_epoch_ms(datetime(2024, 6, 1, 0, 0, tzinfo=NEW_YORK))

    assert local_day_key(midnight, NEW_YORK) == "2024-06-01"
    assert local_day_key(midnight - 1, NEW_YORK) == "2024-05-31"


def test_day_bounds_spring_forward_day_is_23_hours() -> None:
    start, end = day_bounds(date(2024, 3, 10), NEW_YORK)

    assert end - start == 23 * 60 * 60 * 1000
    assert local_day_key(start, NEW_YORK) == "2024-03-10"
    assert local_day_key(end - 1, NEW_YORK) == "2024-03-10"
    assert local_day_key(end, NEW_YORK) == "2024-03-11"


def test_day_bounds_fall_back_day_is_25_hours() -> None:
    start, end = day_bounds(date(2024, 11, 3), NEW_YORK)

    assert end - start == 25 * 60 * 60 * 1000
    assert local_day_key(end - 1, NEW_YORK) == "2024-11-03"


def test_late_evening_after_dst_change_stays_on_same_day() -> None:
    # 23:30 local on the fall-back day is 04:30 UTC the next morning.
    late = to_epoch_ms(datetime(2024, 11, 4, 4, 30, tzinfo=UTC))

    assert local_day_key(late, NEW_YORK) == "2024-11-03"
    assert minute_of_day(late, NEW_YORK) == 23 * 60 + 30


def test_days_between_handles_year_rollover_and_leap_day() -> None:
    assert days_between("2023-12-31", "2024-01-01") == 1
    assert days_between("2024-02-28", "2024-03-01") == 2
    assert days_between("2024-01-05", "2024-01-05") == 0
    assert days_between("2024-01-05", "2024-01-02") == -3


def test_entries_for_day_keeps_insertion_order() -> None:
    late = make_entry("b", datetime(2024, 1, 1, 21, 0, tzinfo=NEW_YORK))
    other = make_entry("c", datetime(2024, 1, 2, 8, 0, tzinfo=NEW_YORK))
    early = make_entry("a", datetime(2024, 1, 1, 7, 0, tzinfo=NEW_YORK))

    result = entries_for_day([late, other, early], date(2024, 1, 1), NEW_YORK)

    assert [entry.id for entry in result] == ["b", "a"]
    assert entries_for_day([late, other, early], "2024-01-02", NEW_YORK) == [other]


def test_entries_for_day_groups_regardless_of_order() -> None:
    first = make_entry("a", datetime(2024, 1, 1, 0, 1, tzinfo=NEW_YORK))
    second = make_entry("b", datetime(2024, 1, 1, 23, 59, tzinfo=NEW_YORK))

    forward = entries_for_day([first, second], "2024-01-01", NEW_YORK)
    backward = entries_for_day([second, first], "2024-01-01", NEW_YORK)

    assert {entry.id for entry in forward} == {"a", "b"}
    assert {entry.id for entry in backward} == {"a", "b"}


def test_is_valid_epoch_ms_rejects_out_of_range_instants() -> None:
    assert is_valid_epoch_ms(to_epoch_ms(datetime(2024, 1, 1, tzinfo=UTC)))
    assert is_valid_epoch_ms(0)
    assert is_valid_epoch_ms(-86_400_000.5)
    assert not is_valid_epoch_ms(1_704_114_000_000_000)
    assert not is_valid_epoch_ms(1e20)
    assert not is_valid_epoch_ms(float("inf"))
    assert not is_valid_epoch_ms(float("-inf"))
    assert not is_valid_epoch_ms(float("nan"))

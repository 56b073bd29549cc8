"""Consecutive-day logging streaks."""

from food_journal.domain.profile import StreakState
from food_journal.services.calendar import days_between


def advance_streak(state: StreakState, day: str) -> StreakState:
    """Return the streak state after logging an entry on ``day``.

    ``day`` is the local day key of the new entry, never of "now", so
    back-dated entries and repeated logs behave deterministically.
    """
    if state.last_log_day == day:
        return state

    if not state.last_log_day or state.streak == 0:
        return StreakState(streak=1, last_log_day=day)

    gap = days_between(state.last_log_day, day)
    if gap == 1:
        return StreakState(streak=state.streak + 1, last_log_day=day)
    if gap > 1:
        return StreakState(streak=1, last_log_day=day)
    return state

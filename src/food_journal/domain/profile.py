"""Domain models for the journal owner."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StreakState:
    """Consecutive-day logging state."""

    streak: int = 0
    last_log_day: str = ""


@dataclass(frozen=True)
class UserProfile:
    """Represents the journal owner captured during onboarding."""

    name: str
    streak: int = 0
    last_log_day: str = ""

    @property
    def streak_state(self) -> StreakState:
        return StreakState(streak=self.streak, last_log_day=self.last_log_day)

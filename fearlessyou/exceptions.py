"""Exception hierarchy for FearlessYou."""


class FearlessYouError(Exception):
    """Base exception for all FearlessYou errors."""
    pass


class DayOutOfRange(FearlessYouError, ValueError):
    """Raised when a day number falls outside the challenge calendar."""

    def __init__(self, day: object, first: int, last: int) -> None:
        super().__init__(f"Day {day!r} is outside {first}..{last}")
        self.day = day
        self.first = first
        self.last = last


class ProgressStoreError(FearlessYouError):
    """Raised when a progress store backend cannot be built."""
    pass

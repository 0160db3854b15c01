"""
Shared test fixtures for the FearlessYou test suite.
"""

from datetime import datetime, timedelta, timezone

import pytest

from fearlessyou.challenge import ChallengeCatalog, ChallengeStateMachine
from fearlessyou.config import Config
from fearlessyou.database import ChallengeProgress, MemoryProgressStore


class FakeClock:
    """Controllable clock for deterministic timestamps."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def catalog():
    return ChallengeCatalog()


@pytest.fixture
def machine(catalog, clock):
    return ChallengeStateMachine(catalog=catalog, clock=clock)


@pytest.fixture
def empty_state():
    return ChallengeProgress()


@pytest.fixture
def memory_store():
    return MemoryProgressStore()


@pytest.fixture
def fast_config():
    """Config with a three-second countdown ticking every 10ms."""
    return Config(countdown_seconds=3, tick_interval=0.01, initial_coins=0)

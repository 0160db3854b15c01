"""
Challenge progression state machine for FearlessYou.

Every intent is a pure function over a ``ChallengeProgress`` snapshot that
returns a ``TransitionResult``: the next snapshot, an ``Outcome`` and the
``Effect`` values the session owner has to carry out (persist progress,
start or stop the countdown, show a banner). ``ChallengeStateMachine`` keeps
the current snapshot, logs each transition and records its history.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict

from ..database.models import ActiveChallenge, ChallengeProgress, DayState, Feedback, Feeling
from .catalog import (
    ALREADY_SUBMITTED_MESSAGE,
    CONFIRM_PROMPT,
    COUNTDOWN_BANNER,
    FEEDBACK_PROMPT,
    NO_COINS_MESSAGE,
    STORY_PROMPT,
    ChallengeCatalog,
    is_valid_day,
)

logger = structlog.get_logger(__name__)

DEFAULT_COUNTDOWN = timedelta(hours=24)


class Outcome(str, Enum):
    """Result of applying an intent."""
    OK = "ok"
    OUT_OF_RANGE = "out_of_range"
    INSUFFICIENT_COINS = "insufficient_coins"
    ALREADY_SUBMITTED = "already_submitted"
    ALREADY_ACCEPTED = "already_accepted"
    ALREADY_COMPLETED = "already_completed"
    ANOTHER_CHALLENGE_ACTIVE = "another_challenge_active"
    NOT_AVAILABLE = "not_available"
    NO_ACTIVE_CHALLENGE = "no_active_challenge"
    COUNTDOWN_LAPSED = "countdown_lapsed"


class Effect(str, Enum):
    """Side effect requested from the session owner."""
    PRESENT_CHOICE = "present_choice"
    START_COUNTDOWN = "start_countdown"
    STOP_COUNTDOWN = "stop_countdown"
    PERSIST_PROGRESS = "persist_progress"
    COLLECT_FEEDBACK = "collect_feedback"
    SHOW_NO_COINS_BANNER = "show_no_coins_banner"
    CLOSE_POPUP = "close_popup"


class TransitionResult(BaseModel):
    """Next snapshot plus what happened and what must happen next."""

    model_config = ConfigDict(frozen=True)

    state: ChallengeProgress
    outcome: Outcome
    effects: Tuple[Effect, ...] = ()
    message: Optional[str] = None


def _unchanged(state: ChallengeProgress, outcome: Outcome,
               effects: Tuple[Effect, ...] = (), message: Optional[str] = None) -> TransitionResult:
    return TransitionResult(state=state, outcome=outcome, effects=effects, message=message)


def day_state(state: ChallengeProgress, day: int) -> DayState:
    """Get the progression state of a day."""
    if day in state.completed:
        return DayState.COMPLETED
    if state.active is not None and state.active.day == day:
        return DayState.ACTIVE
    return DayState.NOT_STARTED


def _blocked_outcome(state: ChallengeProgress, day: int) -> Outcome:
    if day_state(state, day) == DayState.COMPLETED:
        return Outcome.ALREADY_COMPLETED
    return Outcome.NOT_AVAILABLE


def select_day(state: ChallengeProgress, day: int) -> TransitionResult:
    """Ask whether the user is ready for a day's challenge."""
    if not is_valid_day(day):
        return _unchanged(state, Outcome.OUT_OF_RANGE)
    if day_state(state, day) != DayState.NOT_STARTED:
        return _unchanged(state, _blocked_outcome(state, day))
    return _unchanged(state, Outcome.OK, (Effect.PRESENT_CHOICE,), CONFIRM_PROMPT)


def accept(state: ChallengeProgress, day: int, now: datetime,
           countdown: timedelta = DEFAULT_COUNTDOWN) -> TransitionResult:
    """Accept a day's challenge and start its countdown."""
    if not is_valid_day(day):
        return _unchanged(state, Outcome.OUT_OF_RANGE)

    current = day_state(state, day)
    if current == DayState.COMPLETED:
        return _unchanged(state, Outcome.ALREADY_COMPLETED)
    if current == DayState.ACTIVE:
        return _unchanged(state, Outcome.ALREADY_ACCEPTED)

    active = state.active
    if active is not None and not active.submitted:
        return _unchanged(state, Outcome.ANOTHER_CHALLENGE_ACTIVE)

    challenge = ActiveChallenge(
        day=day,
        accepted_at=now,
        deadline=now + countdown,
        remaining_seconds=int(countdown.total_seconds()),
    )
    new_state = state.model_copy(update={"active": challenge})
    return TransitionResult(
        state=new_state,
        outcome=Outcome.OK,
        effects=(Effect.START_COUNTDOWN,),
        message=COUNTDOWN_BANNER,
    )


def reject(state: ChallengeProgress, day: int) -> TransitionResult:
    """Reject a day's challenge, paying one coin."""
    if not is_valid_day(day):
        return _unchanged(state, Outcome.OUT_OF_RANGE)
    if day_state(state, day) != DayState.NOT_STARTED:
        return _unchanged(state, _blocked_outcome(state, day))

    if state.wallet <= 0:
        return _unchanged(
            state,
            Outcome.INSUFFICIENT_COINS,
            (Effect.SHOW_NO_COINS_BANNER,),
            NO_COINS_MESSAGE,
        )

    new_state = state.model_copy(update={"wallet": state.wallet - 1})
    return TransitionResult(state=new_state, outcome=Outcome.OK)


def submit(state: ChallengeProgress, day: int) -> TransitionResult:
    """Submit the active challenge, earning one coin the first time."""
    if not is_valid_day(day):
        return _unchanged(state, Outcome.OUT_OF_RANGE)

    active = state.active
    if active is None or active.day != day:
        return _unchanged(state, Outcome.NO_ACTIVE_CHALLENGE)
    if active.submitted:
        return _unchanged(state, Outcome.ALREADY_SUBMITTED, message=ALREADY_SUBMITTED_MESSAGE)

    submitted = active.model_copy(update={"submitted": True})
    effects = (Effect.STOP_COUNTDOWN, Effect.PERSIST_PROGRESS, Effect.COLLECT_FEEDBACK)

    if day in state.completed:
        # Paid earlier; only close out the active record.
        new_state = state.model_copy(update={"active": submitted})
        return TransitionResult(state=new_state, outcome=Outcome.ALREADY_COMPLETED, effects=effects)

    new_state = state.model_copy(update={
        "wallet": state.wallet + 1,
        "completed": state.completed | {day},
        "active": submitted,
    })
    return TransitionResult(state=new_state, outcome=Outcome.OK, effects=effects,
                            message=f"{FEEDBACK_PROMPT}\n{STORY_PROMPT}")


def tick(state: ChallengeProgress) -> TransitionResult:
    """Advance the countdown of the active challenge by one second."""
    active = state.active
    if active is None or active.submitted:
        return _unchanged(state, Outcome.NO_ACTIVE_CHALLENGE)
    if active.lapsed:
        return _unchanged(state, Outcome.COUNTDOWN_LAPSED, (Effect.STOP_COUNTDOWN,))

    remaining = active.remaining_seconds - 1
    new_state = state.model_copy(update={
        "active": active.model_copy(update={"remaining_seconds": remaining}),
    })
    if remaining == 0:
        return TransitionResult(state=new_state, outcome=Outcome.COUNTDOWN_LAPSED,
                                effects=(Effect.STOP_COUNTDOWN,))
    return TransitionResult(state=new_state, outcome=Outcome.OK)


def dismiss(state: ChallengeProgress) -> TransitionResult:
    """Close the popup; a submitted challenge stops being active."""
    effects = (Effect.STOP_COUNTDOWN, Effect.PERSIST_PROGRESS, Effect.CLOSE_POPUP)
    active = state.active
    if active is not None and active.submitted:
        return TransitionResult(state=state.model_copy(update={"active": None}),
                                outcome=Outcome.OK, effects=effects)
    return TransitionResult(state=state, outcome=Outcome.OK, effects=effects)


def resume(state: ChallengeProgress, now: datetime) -> TransitionResult:
    """Restart the countdown of a still-running active challenge.

    Time spent with the popup closed still counts: the remaining seconds are
    recomputed from the deadline.
    """
    active = state.active
    if active is None or active.submitted:
        return _unchanged(state, Outcome.NO_ACTIVE_CHALLENGE)

    remaining = max(0, int((active.deadline - now).total_seconds()))
    remaining = min(remaining, active.remaining_seconds)
    new_state = state.model_copy(update={
        "active": active.model_copy(update={"remaining_seconds": remaining}),
    })
    if remaining == 0:
        return TransitionResult(state=new_state, outcome=Outcome.COUNTDOWN_LAPSED)
    return TransitionResult(state=new_state, outcome=Outcome.OK,
                            effects=(Effect.START_COUNTDOWN,), message=COUNTDOWN_BANNER)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChallengeStateMachine:
    """Holds the current challenge snapshot and applies intents to it."""

    def __init__(self, catalog: Optional[ChallengeCatalog] = None, wallet: int = 0,
                 completed: Iterable[int] = (), countdown: timedelta = DEFAULT_COUNTDOWN,
                 clock: Callable[[], datetime] = _utcnow):
        self.catalog = catalog or ChallengeCatalog()
        self.countdown = countdown
        self.clock = clock
        self.state = ChallengeProgress(wallet=wallet, completed=frozenset(completed))
        self.feedback: List[Feedback] = []
        self.history: List[Tuple[str, Outcome, datetime]] = []

    def snapshot(self) -> ChallengeProgress:
        """Get the current snapshot."""
        return self.state

    def day_state(self, day: int) -> DayState:
        """Get the progression state of a day."""
        return day_state(self.state, day)

    def describe(self, day: int) -> Optional[str]:
        """Get the popup heading for a day, or None for an invalid day."""
        if not is_valid_day(day):
            return None
        return self.catalog.title(day)

    def _apply(self, intent: str, result: TransitionResult, **context) -> TransitionResult:
        self.state = result.state
        self.history.append((intent, result.outcome, self.clock()))

        if result.outcome in (Outcome.OK, Outcome.ALREADY_ACCEPTED):
            logger.info("Challenge intent applied", intent=intent, outcome=result.outcome.value,
                        wallet=self.state.wallet, **context)
        elif result.outcome == Outcome.COUNTDOWN_LAPSED:
            logger.warning("Challenge countdown lapsed without submission", **context)
        else:
            logger.warning("Challenge intent refused", intent=intent,
                           outcome=result.outcome.value, **context)
        return result

    def select_day(self, day: int) -> TransitionResult:
        """Ask for confirmation before opening a day."""
        return self._apply("select_day", select_day(self.state, day), day=day)

    def accept(self, day: int) -> TransitionResult:
        """Accept a day's challenge."""
        return self._apply("accept", accept(self.state, day, self.clock(), self.countdown), day=day)

    def reject(self, day: int) -> TransitionResult:
        """Reject a day's challenge."""
        return self._apply("reject", reject(self.state, day), day=day)

    def submit(self, day: int) -> TransitionResult:
        """Submit the active challenge."""
        return self._apply("submit", submit(self.state, day), day=day)

    def tick(self) -> TransitionResult:
        """Advance the countdown by one second."""
        result = tick(self.state)
        if result.outcome == Outcome.OK:
            # One entry per second would swamp the history.
            self.state = result.state
            return result
        active = self.state.active
        return self._apply("tick", result, day=active.day if active else None)

    def dismiss(self) -> TransitionResult:
        """Close the challenge popup."""
        return self._apply("dismiss", dismiss(self.state))

    def resume(self) -> TransitionResult:
        """Reopen the countdown of the active challenge."""
        return self._apply("resume", resume(self.state, self.clock()))

    def record_feedback(self, feeling: Feeling = Feeling.NONE, text: str = "") -> TransitionResult:
        """Attach feedback to the just-submitted challenge."""
        active = self.state.active
        if active is None or not active.submitted:
            return self._apply("record_feedback", _unchanged(self.state, Outcome.NO_ACTIVE_CHALLENGE))

        try:
            feeling = Feeling(feeling)
        except ValueError:
            logger.warning("Unknown feeling, recording none", feeling=feeling)
            feeling = Feeling.NONE

        entry = Feedback(day=active.day, feeling=feeling, text=text, recorded_at=self.clock())
        self.feedback.append(entry)
        return self._apply("record_feedback", _unchanged(self.state, Outcome.OK),
                           day=active.day, feeling=entry.feeling.value)

    def get_history(self) -> List[Tuple[str, Outcome, datetime]]:
        """Get the transition history."""
        return self.history.copy()

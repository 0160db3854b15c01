"""
Challenge session manager for FearlessYou.
"""

import asyncio
from datetime import timedelta
from typing import Callable, List, Optional

import structlog

from ..config import Config, get_config
from ..database.models import ChallengeProgress, Feeling
from ..database.store import ProgressStore, create_progress_store
from .catalog import ChallengeCatalog
from .state_machine import ChallengeStateMachine, Effect, Outcome, TransitionResult

logger = structlog.get_logger(__name__)

Listener = Callable[[ChallengeProgress, TransitionResult], None]


class ChallengeManager:
    """Owns a challenge session: state machine, progress store and countdown task."""

    def __init__(self, store: Optional[ProgressStore] = None, config: Optional[Config] = None,
                 catalog: Optional[ChallengeCatalog] = None):
        self.config = config or get_config()
        self.store = store if store is not None else create_progress_store()
        self.catalog = catalog or ChallengeCatalog()
        self.machine: Optional[ChallengeStateMachine] = None

        self._countdown_task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    def start(self) -> ChallengeProgress:
        """Load saved progress and open a session."""
        completed = self.store.load()
        self.machine = ChallengeStateMachine(
            catalog=self.catalog,
            wallet=self.config.initial_coins,
            completed=completed,
            countdown=timedelta(seconds=self.config.countdown_seconds),
        )
        logger.info("Challenge session started", completed=sorted(completed),
                    wallet=self.config.initial_coins)
        return self.machine.snapshot()

    async def close(self):
        """Stop the countdown and save progress."""
        await self._stop_countdown()
        if self.machine is not None:
            self.store.save(self.machine.snapshot().completed)
        logger.info("Challenge session closed")

    def add_listener(self, listener: Listener):
        """Register a callback receiving every new snapshot."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        """Unregister a snapshot callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> ChallengeProgress:
        """Get the current snapshot."""
        return self._require_machine().snapshot()

    def is_countdown_running(self) -> bool:
        """Check if the countdown task is alive."""
        return self._countdown_task is not None and not self._countdown_task.done()

    def _require_machine(self) -> ChallengeStateMachine:
        if self.machine is None:
            raise RuntimeError("Challenge session not started")
        return self.machine

    async def select_day(self, day: int) -> TransitionResult:
        return await self._handle(self._require_machine().select_day(day))

    async def accept(self, day: int) -> TransitionResult:
        return await self._handle(self._require_machine().accept(day))

    async def reject(self, day: int) -> TransitionResult:
        return await self._handle(self._require_machine().reject(day))

    async def submit(self, day: int) -> TransitionResult:
        return await self._handle(self._require_machine().submit(day))

    async def dismiss(self) -> TransitionResult:
        return await self._handle(self._require_machine().dismiss())

    async def resume(self) -> TransitionResult:
        return await self._handle(self._require_machine().resume())

    async def record_feedback(self, feeling: Feeling = Feeling.NONE, text: str = "") -> TransitionResult:
        return await self._handle(self._require_machine().record_feedback(feeling, text))

    async def _handle(self, result: TransitionResult) -> TransitionResult:
        """Carry out the effects of a transition and notify listeners."""
        for effect in result.effects:
            if effect == Effect.START_COUNTDOWN:
                self._start_countdown()
            elif effect == Effect.STOP_COUNTDOWN:
                await self._stop_countdown()
            elif effect == Effect.PERSIST_PROGRESS:
                self.store.save(result.state.completed)

        self._notify(result)
        return result

    def _notify(self, result: TransitionResult):
        for listener in list(self._listeners):
            try:
                listener(result.state, result)
            except Exception as e:
                logger.error("Snapshot listener failed", error=str(e))

    def _start_countdown(self):
        if self.is_countdown_running():
            return
        self._countdown_task = asyncio.create_task(self._run_countdown())
        logger.debug("Countdown started")

    async def _stop_countdown(self):
        task = self._countdown_task
        self._countdown_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Countdown cancelled")

    async def _run_countdown(self):
        """Tick the active challenge until it is submitted or lapses."""
        machine = self._require_machine()
        while True:
            await asyncio.sleep(self.config.tick_interval)
            result = machine.tick()
            self._notify(result)

            if Effect.STOP_COUNTDOWN in result.effects or result.outcome == Outcome.NO_ACTIVE_CHALLENGE:
                logger.info("Countdown finished", outcome=result.outcome.value)
                self._countdown_task = None
                return

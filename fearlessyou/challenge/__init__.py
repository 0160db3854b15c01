"""
Challenge progression package for FearlessYou.
"""

from .catalog import ChallengeCatalog
from .manager import ChallengeManager
from .state_machine import ChallengeStateMachine, Effect, Outcome, TransitionResult

__all__ = [
    "ChallengeCatalog",
    "ChallengeManager",
    "ChallengeStateMachine",
    "Effect",
    "Outcome",
    "TransitionResult"
]

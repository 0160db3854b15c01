"""
Challenge catalog for FearlessYou.
"""

from typing import Tuple

from ..exceptions import DayOutOfRange
from ..utils.formatting import format_challenge_title

FIRST_DAY = 1
LAST_DAY = 30

CONFIRM_PROMPT = "Are you ready for today's challenge?"
COUNTDOWN_BANNER = "Once you're in, you're never out"
NO_COINS_MESSAGE = (
    "You already don't have coins to deduct. "
    "You can't move to the next challenge unless you submit this."
)
ALREADY_SUBMITTED_MESSAGE = "Challenge Already Submitted"
FEEDBACK_PROMPT = "How do you feel after the challenge?"
STORY_PROMPT = "Share your story regarding this challenge"

CHALLENGES: Tuple[str, ...] = (
    "Compliment a stranger on their outfit",
    "Ask a stranger for directions to a place you already know",
    "Strike up a conversation with someone waiting in line",
    "Participate in group activities that involve collaboration and interaction",
    "Share your thoughts and ideas in a group discussion",
    "Attend a social event and introduce yourself to someone new",
    "Express your opinion on a topic during a meeting",
    "Invite someone to join you for a meal or coffee",
    "Offer help to someone in need without expecting anything in return",
    "Apologize to someone you may have wronged or hurt",
    "Engage in a physical activity or sport with others",
    "Start a conversation with a coworker you haven't talked to much",
    "Visit a local place or event and interact with people there",
    "Attend a networking event and make meaningful connections",
    "Join a club or group with shared interests",
    "Take on a leadership role in a team project or activity",
    "Organize a small get-together with friends or colleagues",
    "Initiate a conversation with someone you admire",
    "Collaborate on a creative project with others",
    "Share a personal story or experience with someone",
    "Express gratitude to someone who has made a positive impact",
    "Attend a workshop or seminar and actively participate",
    "Join an online community and engage in discussions",
    "Take on a challenge outside your comfort zone",
    "Host a gathering or party for friends and acquaintances",
    "Participate in a public speaking event or presentation",
    "Connect with someone from a different background or culture",
    "Volunteer for a cause or organization in your community",
    "Reflect on your fears and identify opportunities for growth",
    "Ask for something you fully expect to be told no to",
)


def is_valid_day(day: object) -> bool:
    """Check whether a value is a day on the challenge calendar."""
    return isinstance(day, int) and not isinstance(day, bool) and FIRST_DAY <= day <= LAST_DAY


class ChallengeCatalog:
    """Read-only list of daily challenges, indexed by day number."""

    def __init__(self, challenges: Tuple[str, ...] = CHALLENGES):
        if len(challenges) != LAST_DAY - FIRST_DAY + 1:
            raise ValueError(
                f"Catalog needs {LAST_DAY - FIRST_DAY + 1} challenges, got {len(challenges)}"
            )
        self._challenges = tuple(challenges)

    def __len__(self) -> int:
        return len(self._challenges)

    def days(self) -> range:
        """Day numbers in grid order."""
        return range(FIRST_DAY, LAST_DAY + 1)

    def describe(self, day: int) -> str:
        """Get the challenge text for a day."""
        if not is_valid_day(day):
            raise DayOutOfRange(day, FIRST_DAY, LAST_DAY)
        return self._challenges[day - FIRST_DAY]

    def title(self, day: int) -> str:
        """Get the popup heading for a day."""
        return format_challenge_title(day, self.describe(day))

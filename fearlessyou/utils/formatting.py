"""
Display formatting helpers for FearlessYou.
"""


def format_countdown(seconds: int) -> str:
    """Format remaining seconds as HH:MM:SS."""
    seconds = max(seconds, 0)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    remaining_seconds = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{remaining_seconds:02d}"


def format_challenge_title(day: int, description: str) -> str:
    """Format the popup heading for a challenge."""
    return f"Challenge {day}: {description}"


def format_wallet(coins: int) -> str:
    """Format the wallet balance shown above the grid."""
    return f"{coins} Coin" if coins == 1 else f"{coins} Coins"

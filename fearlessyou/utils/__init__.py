"""
Utility helpers for FearlessYou.
"""

from .formatting import format_countdown, format_challenge_title, format_wallet

__all__ = [
    "format_countdown",
    "format_challenge_title",
    "format_wallet"
]

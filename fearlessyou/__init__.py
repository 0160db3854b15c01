"""
FearlessYou: 30 days of rejection challenge tracker.
"""

__version__ = "1.0.0"

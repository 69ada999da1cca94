"""
Model enums.
"""
from enum import Enum


class Difficulty(str, Enum):
    """Rating a learner gives a card after seeing its answer."""
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


class CardProgressBucket(str, Enum):
    """Reporting buckets for review progress. Not used for scheduling."""
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"

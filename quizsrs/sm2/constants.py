"""
SM-2 Constants and Parameters

All tunable values for the SM-2 review scheduler in one place.
"""

from enum import Enum, IntEnum


# ---- Quality Signal ----

QUALITY_MIN = 0  # Complete blackout
QUALITY_MAX = 5  # Perfect recall
SUCCESS_THRESHOLD = 3  # quality >= 3 counts as a successful recall


class ReviewQuality(IntEnum):
    """Quality values the quiz actually reports (binary answer mapping)."""
    INCORRECT = 0
    CORRECT = 5


# ---- Interval Ladder (seconds) ----

SECONDS_PER_DAY = 86400.0

FIRST_INTERVAL = SECONDS_PER_DAY       # After the first success (or any lapse)
SECOND_INTERVAL = 3 * SECONDS_PER_DAY  # After the second consecutive success
LAPSE_INTERVAL = SECONDS_PER_DAY       # Every failure restarts at one day
MAX_INTERVAL = 36500 * SECONDS_PER_DAY  # Growth stops at roughly 100 years


# ---- Ease Factor ----

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


# ---- Mastery Levels ----

class MasteryLevel(str, Enum):
    """Coarse mastery tier derived from the consecutive-correct streak."""
    LEARNING = "learning"
    REVIEWING = "reviewing"
    FAMILIAR = "familiar"
    MASTERED = "mastered"


# Lowest streak that reaches each tier
MASTERY_STREAK_THRESHOLDS = {
    MasteryLevel.LEARNING: 0,
    MasteryLevel.REVIEWING: 1,
    MasteryLevel.FAMILIAR: 3,
    MasteryLevel.MASTERED: 6,
}

# Weight of each tier in the 0-100 mastery score
MASTERY_SCORE_WEIGHTS = {
    MasteryLevel.LEARNING: 0.0,
    MasteryLevel.REVIEWING: 33.0,
    MasteryLevel.FAMILIAR: 66.0,
    MasteryLevel.MASTERED: 100.0,
}


# ---- Daily Queue ----

# New items target = len(review_items) // NEW_ITEMS_DIVISOR (80:20 review/new)
NEW_ITEMS_DIVISOR = 4
MIN_NEW_ITEMS = 1

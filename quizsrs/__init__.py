"""
Spaced-repetition review scheduling for quiz items.
"""

from quizsrs.scheduler import SRSScheduler, create_default_scheduler

__all__ = [
    "SRSScheduler",
    "create_default_scheduler",
]

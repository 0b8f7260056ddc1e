"""
medtriage/context — conversation context, feedback, background timers.

Stores are shared across requests; both are lock-protected and hand out copies.
"""

from medtriage.context.feedback import FeedbackStore
from medtriage.context.scheduler import BackgroundScheduler, PeriodicTask
from medtriage.context.store import ContextStore

__all__ = [
    "BackgroundScheduler",
    "ContextStore",
    "FeedbackStore",
    "PeriodicTask",
]

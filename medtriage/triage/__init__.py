"""
medtriage/triage — urgency triage and provider recommendation.
"""

from medtriage.triage.engine import priority_update, triage
from medtriage.triage.providers import recommend

__all__ = [
    "priority_update",
    "recommend",
    "triage",
]

"""
medtriage/context/feedback.py
Feedback on composed responses, keyed by (user_id, message_id).
Last write wins. Aggregated on demand or by the background scheduler.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Tuple

from medtriage.models.record import FeedbackRecord, FeedbackSummary

logger = logging.getLogger(__name__)


class FeedbackStore:

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock   = clock
        self._lock    = threading.Lock()
        self._records: Dict[Tuple[str, str], FeedbackRecord] = {}

    def record(
        self,
        user_id:       str,
        message_id:    str,
        helpful:       bool,
        feedback_text: str = '',
    ) -> bool:
        if not user_id or not message_id:
            raise ValueError("user_id and message_id are required")
        rec = FeedbackRecord(
            user_id       = str(user_id),
            message_id    = str(message_id),
            helpful       = bool(helpful),
            feedback_text = feedback_text or '',
            timestamp     = self._clock(),
        )
        with self._lock:
            self._records[(rec.user_id, rec.message_id)] = rec
        return True

    def records(self) -> List[FeedbackRecord]:
        with self._lock:
            return list(self._records.values())

    def summarize(self) -> FeedbackSummary:
        records = self.records()
        count   = len(records)
        helpful = sum(1 for r in records if r.helpful)
        pct     = round(helpful / count * 100, 1) if count else 0.0
        return FeedbackSummary(count=count, helpful_count=helpful, helpful_percentage=pct)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def analyze_feedback(store: FeedbackStore) -> FeedbackSummary:
    """Scheduled aggregation job — logs and returns the summary."""
    summary = store.summarize()
    logger.info(
        f"Feedback analysis: {summary.helpful_count}/{summary.count} helpful "
        f"responses ({summary.helpful_percentage:.1f}%)"
    )
    return summary

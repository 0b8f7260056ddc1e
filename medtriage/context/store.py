"""
medtriage/context/store.py
Per-user conversation context with bounded history and idle expiry.

  update(user_id, entry) — append, FIFO-trim to max_history, refresh lastInteraction
  sweep(now)             — evict users idle longer than idle_expiry_seconds

One lock guards every mutation and snapshot; readers always get copies,
so a concurrent sweep never exposes a half-written entry.
Not consulted for classification — write-side history only.
"""

import copy
import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from medtriage.models.record import ContextEntry, ConversationContext

logger = logging.getLogger(__name__)

MAX_HISTORY          = 10
IDLE_EXPIRY_SECONDS  = 30 * 60


class ContextStore:
    """Owned by the process; create at startup, close() on shutdown."""

    def __init__(
        self,
        max_history:         int                    = MAX_HISTORY,
        idle_expiry_seconds: float                  = IDLE_EXPIRY_SECONDS,
        clock:               Callable[[], float]    = time.time,
    ):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.max_history         = max_history
        self.idle_expiry_seconds = idle_expiry_seconds
        self._clock    = clock
        self._lock     = threading.Lock()
        self._contexts: Dict[str, ConversationContext] = {}
        self._closed   = False

    # ── MUTATION ─────────────────────────────────────────────

    def update(self, user_id: str, entry: ContextEntry) -> None:
        if not user_id:
            raise ValueError("user_id is required")
        with self._lock:
            if self._closed:
                raise RuntimeError("ContextStore is closed")
            ctx = self._contexts.setdefault(user_id, ConversationContext())
            ctx.history.append(entry)
            overflow = len(ctx.history) - self.max_history
            if overflow > 0:
                del ctx.history[:overflow]
            ctx.last_interaction = self._clock()

    def sweep(self, now: Optional[float] = None) -> int:
        """Evict idle users. Returns the number evicted."""
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                uid for uid, ctx in self._contexts.items()
                if now - ctx.last_interaction > self.idle_expiry_seconds
            ]
            for uid in expired:
                del self._contexts[uid]
        if expired:
            logger.info(f"Context sweep: evicted {len(expired)} idle user(s)")
        return len(expired)

    def forget(self, user_id: str) -> bool:
        with self._lock:
            return self._contexts.pop(user_id, None) is not None

    def close(self) -> None:
        with self._lock:
            self._contexts.clear()
            self._closed = True
        logger.info("Context store closed")

    # ── READ ─────────────────────────────────────────────────

    def get(self, user_id: str) -> Optional[ConversationContext]:
        """Deep copy of the user's context, or None."""
        with self._lock:
            ctx = self._contexts.get(user_id)
            return copy.deepcopy(ctx) if ctx is not None else None

    def history(self, user_id: str) -> List[ContextEntry]:
        ctx = self.get(user_id)
        return ctx.history if ctx else []

    def snapshot(self) -> Dict[str, ConversationContext]:
        with self._lock:
            return copy.deepcopy(self._contexts)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)

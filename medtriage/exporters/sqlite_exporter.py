"""
medtriage/exporters/sqlite_exporter.py
Audit export of conversation context and feedback to SQLite.

SCHEMA DESIGN NOTES:
- context_entries holds one row per history entry, message text REDACTED
  before it is written (raw PHI never reaches disk)
- context_entries is keyed by (user_id, timestamp_ms, turn); turn numbers
  entries that share a millisecond, so re-runs stay idempotent
- feedback mirrors FeedbackStore, keyed by (user_id, message_id)
- triage_meta stores run metadata and schema version
- All timestamps stored as INTEGER milliseconds (Unix epoch * 1000)
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Union

from medtriage.detectors.phi_detector import redact
from medtriage.models.record import ConversationContext, FeedbackRecord

logger = logging.getLogger(__name__)

SCHEMA_VERSION = '1.1'


def export(
    db_path:   Union[str, Path],
    contexts:  Dict[str, ConversationContext] = None,
    feedback:  List[FeedbackRecord]           = None,
    run_label: str                            = '',
) -> Path:
    """
    Write a context/feedback snapshot to SQLite.
    Safe to call multiple times — uses INSERT OR IGNORE on natural keys.
    Returns db_path.
    """
    db_path  = Path(db_path)
    contexts = contexts or {}
    feedback = feedback or []

    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")

    try:
        _create_schema(conn)
        entry_count = _write_contexts(conn, contexts)
        _write_feedback(conn, feedback)
        _write_meta(conn, len(contexts), entry_count, len(feedback), run_label)
        conn.commit()
        logger.info(
            f"SQLite export complete → {db_path} | "
            f"Users: {len(contexts)} | Entries: {entry_count} | Feedback: {len(feedback)}"
        )
    except Exception as e:
        conn.rollback()
        logger.error(f"SQLite export failed: {e}")
        raise
    finally:
        conn.close()

    return db_path


def _ms(ts: float) -> int:
    return int(ts * 1000)


# ── SCHEMA ───────────────────────────────────────────────────

def _create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS triage_meta (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            run_at          TEXT    NOT NULL,
            run_label       TEXT,
            schema_version  TEXT    NOT NULL,
            user_count      INTEGER DEFAULT 0,
            entry_count     INTEGER DEFAULT 0,
            feedback_count  INTEGER DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS context_entries (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id          TEXT    NOT NULL,
            timestamp_ms     INTEGER NOT NULL,
            turn             INTEGER NOT NULL DEFAULT 0,  -- ordinal among same-ms entries
            language         TEXT,
            intent           TEXT,
            sentiment_score  REAL,
            sentiment_label  TEXT,
            is_urgent        INTEGER DEFAULT 0,
            entities         TEXT,    -- JSON object, PHI-free categories only
            redacted_message TEXT,
            UNIQUE(user_id, timestamp_ms, turn)
        );

        CREATE TABLE IF NOT EXISTS feedback (
            user_id        TEXT    NOT NULL,
            message_id     TEXT    NOT NULL,
            helpful        INTEGER NOT NULL,
            feedback_text  TEXT,
            timestamp_ms   INTEGER NOT NULL,
            PRIMARY KEY (user_id, message_id)
        );

        CREATE INDEX IF NOT EXISTS idx_ctx_user   ON context_entries(user_id);
        CREATE INDEX IF NOT EXISTS idx_ctx_intent ON context_entries(intent);
    """)


# ── WRITERS ──────────────────────────────────────────────────

def _write_contexts(conn: sqlite3.Connection, contexts: Dict[str, ConversationContext]) -> int:
    rows = []
    for user_id, ctx in contexts.items():
        seen: Dict[int, int] = {}
        for entry in ctx.history:
            a    = entry.analysis
            ms   = _ms(entry.timestamp)
            turn = seen.get(ms, 0)
            seen[ms] = turn + 1
            rows.append((
                user_id,
                ms,
                turn,
                entry.language,
                a.intent,
                a.sentiment.score,
                a.sentiment.label,
                int(a.sentiment.is_urgent),
                json.dumps({k: v for k, v in a.entities.items() if k != 'dates'}),
                redact(entry.message, include_names_and_dates=True),
            ))
    if not rows:
        return 0
    conn.executemany("""
        INSERT OR IGNORE INTO context_entries
        (user_id, timestamp_ms, turn, language, intent, sentiment_score,
         sentiment_label, is_urgent, entities, redacted_message)
        VALUES (?,?,?,?,?,?,?,?,?,?)
    """, rows)
    logger.debug(f"Wrote {len(rows)} context rows")
    return len(rows)


def _write_feedback(conn: sqlite3.Connection, feedback: List[FeedbackRecord]) -> None:
    if not feedback:
        return
    # Store is last-write-wins, so the snapshot replaces older rows
    rows = [
        (f.user_id, f.message_id, int(f.helpful), f.feedback_text, _ms(f.timestamp))
        for f in feedback
    ]
    conn.executemany("""
        INSERT OR REPLACE INTO feedback
        (user_id, message_id, helpful, feedback_text, timestamp_ms)
        VALUES (?,?,?,?,?)
    """, rows)
    logger.debug(f"Wrote {len(rows)} feedback rows")


def _write_meta(
    conn:           sqlite3.Connection,
    user_count:     int,
    entry_count:    int,
    feedback_count: int,
    run_label:      str,
) -> None:
    conn.execute("""
        INSERT INTO triage_meta
        (run_at, run_label, schema_version, user_count, entry_count, feedback_count)
        VALUES (?,?,?,?,?,?)
    """, (
        datetime.now().isoformat(),
        run_label or 'medtriage-run',
        SCHEMA_VERSION,
        user_count,
        entry_count,
        feedback_count,
    ))

"""
tests/test_exporter.py
SQLite audit export. Raw PHI must never reach disk.
"""

import json
import sqlite3

from medtriage.exporters.sqlite_exporter import SCHEMA_VERSION, export

from conftest import CHEST_PAIN, SSN_MSG


def _rows(db, sql):
    conn = sqlite3.connect(str(db))
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


def _populate(pipeline, clock):
    pipeline.respond(CHEST_PAIN, user_id="u1")
    clock.advance(1)
    pipeline.context_store.update("u2", pipeline.context_store.history("u1")[0])
    pipeline.record_feedback("u1", "m1", True, "thanks")
    pipeline.record_feedback("u2", "m1", False)


class TestSQLiteExport:
    def test_writes_tables(self, pipeline, clock, tmp_path):
        _populate(pipeline, clock)
        db = export(tmp_path / "audit.db", pipeline.context_store.snapshot(),
                    pipeline.feedback_store.records(), run_label="unit")
        assert db.exists()

        entries = _rows(db, "SELECT user_id, intent, sentiment_label, language, entities FROM context_entries ORDER BY user_id")
        assert [r[0] for r in entries] == ["u1", "u2"]
        assert entries[0][2] == 'negative'
        assert entries[0][3] == 'en'
        assert json.loads(entries[0][4])['symptoms'] == ['pain', 'breath']

        feedback = _rows(db, "SELECT user_id, message_id, helpful FROM feedback ORDER BY user_id")
        assert feedback == [("u1", "m1", 1), ("u2", "m1", 0)]

        meta = _rows(db, "SELECT run_label, schema_version, user_count, entry_count, feedback_count FROM triage_meta")
        assert meta == [("unit", SCHEMA_VERSION, 2, 2, 2)]

    def test_message_text_is_redacted(self, pipeline, tmp_path):
        pipeline.config['hipaa_compliance']['auto_redact_phi'] = False
        pipeline.respond(SSN_MSG + " - John Smith, 01/02/2024", user_id="u1")
        db = export(tmp_path / "audit.db", pipeline.context_store.snapshot())
        (stored,) = _rows(db, "SELECT redacted_message FROM context_entries")[0]
        assert "123-45-6789" not in stored
        assert "John Smith" not in stored
        assert "[SSN]" in stored

    def test_rerun_is_idempotent_for_entries(self, pipeline, clock, tmp_path):
        _populate(pipeline, clock)
        db = tmp_path / "audit.db"
        for _ in range(2):
            export(db, pipeline.context_store.snapshot(), pipeline.feedback_store.records())
        assert _rows(db, "SELECT COUNT(*) FROM context_entries") == [(2,)]
        assert _rows(db, "SELECT COUNT(*) FROM feedback") == [(2,)]
        assert _rows(db, "SELECT COUNT(*) FROM triage_meta") == [(2,)]

    def test_same_millisecond_turns_are_all_kept(self, pipeline, tmp_path):
        for i in range(10):
            pipeline.respond(f"Question number {i} about my bill", user_id="u1")
        db = tmp_path / "audit.db"
        for _ in range(2):
            export(db, pipeline.context_store.snapshot())
        assert _rows(db, "SELECT COUNT(*) FROM context_entries") == [(10,)]
        assert _rows(db, "SELECT MIN(turn), MAX(turn), COUNT(DISTINCT timestamp_ms) FROM context_entries") == [(0, 9, 1)]

    def test_feedback_updates_replace_rows(self, pipeline, clock, tmp_path):
        db = tmp_path / "audit.db"
        pipeline.record_feedback("u1", "m1", False)
        export(db, feedback=pipeline.feedback_store.records())
        clock.advance(10)
        pipeline.record_feedback("u1", "m1", True)
        export(db, feedback=pipeline.feedback_store.records())
        assert _rows(db, "SELECT helpful FROM feedback") == [(1,)]

    def test_empty_export(self, tmp_path):
        db = export(tmp_path / "empty.db")
        assert _rows(db, "SELECT user_count, entry_count, feedback_count, run_label FROM triage_meta") == [
            (0, 0, 0, 'medtriage-run'),
        ]

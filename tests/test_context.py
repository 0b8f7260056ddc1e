"""
tests/test_context.py
Conversation context store, feedback store and background scheduler.
"""

import logging
import threading
import time

import pytest

from medtriage.context.feedback import FeedbackStore, analyze_feedback
from medtriage.context.scheduler import BackgroundScheduler, PeriodicTask
from medtriage.context.store import ContextStore

from conftest import FakeClock, make_entry


def _wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# ── CONTEXT STORE ────────────────────────────────────────────

class TestContextStore:
    def test_history_is_bounded_fifo(self, context_store):
        for i in range(11):
            context_store.update("u1", make_entry(f"m{i}"))
        history = context_store.history("u1")
        assert len(history) == 10
        assert [e.message for e in history] == [f"m{i}" for i in range(1, 11)]

    def test_update_refreshes_last_interaction(self, context_store, clock):
        context_store.update("u1", make_entry("first"))
        clock.advance(60)
        context_store.update("u1", make_entry("second"))
        assert context_store.get("u1").last_interaction == clock.now

    def test_sweep_evicts_only_idle_users(self, context_store, clock):
        context_store.update("idle", make_entry("a"))
        clock.advance(25 * 60)
        context_store.update("active", make_entry("b"))
        clock.advance(6 * 60)
        assert context_store.sweep() == 1
        assert context_store.get("idle") is None
        assert context_store.get("active") is not None

    def test_sweep_keeps_users_at_the_window_edge(self, context_store, clock):
        context_store.update("u1", make_entry("a"))
        clock.advance(30 * 60)
        assert context_store.sweep() == 0

    def test_sweep_accepts_explicit_now(self, context_store, clock):
        context_store.update("u1", make_entry("a"))
        assert context_store.sweep(now=clock.now + 31 * 60) == 1

    def test_reads_are_copies(self, context_store):
        context_store.update("u1", make_entry("a"))
        context_store.get("u1").history.clear()
        context_store.snapshot()["u1"].history.clear()
        assert len(context_store.history("u1")) == 1

    def test_unknown_user(self, context_store):
        assert context_store.get("nobody") is None
        assert context_store.history("nobody") == []
        assert not context_store.forget("nobody")

    def test_forget(self, context_store):
        context_store.update("u1", make_entry("a"))
        assert context_store.forget("u1")
        assert len(context_store) == 0

    def test_user_id_required(self, context_store):
        with pytest.raises(ValueError):
            context_store.update("", make_entry("a"))

    def test_closed_store_rejects_writes(self, context_store):
        context_store.update("u1", make_entry("a"))
        context_store.close()
        assert context_store.closed
        assert len(context_store) == 0
        with pytest.raises(RuntimeError):
            context_store.update("u1", make_entry("b"))

    def test_max_history_must_be_positive(self):
        with pytest.raises(ValueError):
            ContextStore(max_history=0)

    def test_concurrent_updates_and_sweeps(self):
        store  = ContextStore(clock=FakeClock())
        errors = []

        def writer(uid):
            try:
                for i in range(50):
                    store.update(uid, make_entry(f"{uid}-{i}"))
            except Exception as e:   # pragma: no cover
                errors.append(e)

        def sweeper():
            for _ in range(50):
                store.sweep()
                store.snapshot()

        threads = [threading.Thread(target=writer, args=(f"u{n}",)) for n in range(8)]
        threads.append(threading.Thread(target=sweeper))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(store) == 8
        for n in range(8):
            history = store.history(f"u{n}")
            assert [e.message for e in history] == [f"u{n}-{i}" for i in range(40, 50)]


# ── FEEDBACK ─────────────────────────────────────────────────

class TestFeedbackStore:
    def test_helpful_percentage_rounds_to_one_decimal(self, feedback_store):
        feedback_store.record("u1", "m1", True)
        feedback_store.record("u1", "m2", True)
        feedback_store.record("u2", "m1", False, "did not answer my question")
        summary = feedback_store.summarize()
        assert summary.count == 3
        assert summary.helpful_count == 2
        assert summary.helpful_percentage == 66.7

    def test_empty_store(self, feedback_store):
        summary = feedback_store.summarize()
        assert (summary.count, summary.helpful_count, summary.helpful_percentage) == (0, 0, 0.0)

    def test_last_write_wins(self, feedback_store, clock):
        feedback_store.record("u1", "m1", False)
        clock.advance(5)
        feedback_store.record("u1", "m1", True, "actually fine")
        records = feedback_store.records()
        assert len(records) == 1
        assert records[0].helpful
        assert records[0].feedback_text == "actually fine"
        assert records[0].timestamp == clock.now

    def test_ids_required(self, feedback_store):
        with pytest.raises(ValueError):
            feedback_store.record("", "m1", True)
        with pytest.raises(ValueError):
            feedback_store.record("u1", "", True)

    def test_analyze_feedback_logs_summary(self, feedback_store, caplog):
        feedback_store.record("u1", "m1", True)
        feedback_store.record("u1", "m2", False)
        with caplog.at_level(logging.INFO, logger="medtriage.context.feedback"):
            summary = analyze_feedback(feedback_store)
        assert summary.helpful_percentage == 50.0
        assert "Feedback analysis: 1/2 helpful responses (50.0%)" in caplog.text


# ── SCHEDULER ────────────────────────────────────────────────

class TestPeriodicTask:
    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            PeriodicTask("bad", 0, lambda: None)

    def test_run_once_swallows_and_logs_failures(self, caplog):
        def boom():
            raise RuntimeError("store offline")

        task = PeriodicTask("boom", 60, boom)
        with caplog.at_level(logging.ERROR, logger="medtriage.context.scheduler"):
            task.run_once()
        assert task.runs == 1
        assert "boom failed" in caplog.text

    def test_runs_on_interval_until_stopped(self):
        calls = []
        task  = PeriodicTask("tick", 0.01, lambda: calls.append(1))
        task.start()
        try:
            assert _wait_for(lambda: len(calls) >= 3)
            assert task.running
        finally:
            task.stop()
        assert not task.running
        settled = len(calls)
        time.sleep(0.05)
        assert len(calls) == settled

    def test_failures_do_not_stop_the_loop(self):
        task = PeriodicTask("flaky", 0.01, lambda: 1 / 0)
        task.start()
        try:
            assert _wait_for(lambda: task.runs >= 3)
        finally:
            task.stop()


class TestBackgroundScheduler:
    def test_sweep_task_evicts_idle_users(self, clock):
        store = ContextStore(clock=clock)
        store.update("u1", make_entry("a"))
        clock.advance(31 * 60)

        scheduler = BackgroundScheduler(store, FeedbackStore(), sweep_interval=0.01, feedback_interval=60)
        scheduler.start()
        try:
            assert _wait_for(lambda: len(store) == 0)
            assert scheduler.running
        finally:
            scheduler.stop()
        assert not scheduler.running

    def test_feedback_task_aggregates(self, caplog):
        feedback = FeedbackStore()
        feedback.record("u1", "m1", True)
        scheduler = BackgroundScheduler(ContextStore(), feedback, sweep_interval=60, feedback_interval=0.01)
        with caplog.at_level(logging.INFO, logger="medtriage.context.feedback"):
            scheduler.start()
            try:
                assert _wait_for(lambda: "Feedback analysis: 1/1" in caplog.text)
            finally:
                scheduler.stop()

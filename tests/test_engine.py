"""Tests for the schedulers and the notifier."""

import asyncio
from datetime import timedelta
from lab_results.engine import EventLoopScheduler, Notifier, VirtualClock


def test_virtual_clock_fires_due_timers_in_order(clock):
    """Timers fire in due order; ties fire in scheduling order."""
    fired = []
    clock.call_later(2.0, lambda: fired.append("b"))
    clock.call_later(1.0, lambda: fired.append("a1"))
    clock.call_later(1.0, lambda: fired.append("a2"))
    assert clock.advance(1.5) == 2
    assert fired == ["a1", "a2"]
    assert clock.advance(1.0) == 1
    assert fired == ["a1", "a2", "b"]


def test_virtual_clock_cancelled_timer_does_not_fire(clock):
    """Cancelled timers are skipped and not counted as pending."""
    fired = []
    handle = clock.call_later(1.0, lambda: fired.append("x"))
    handle.cancel()
    assert clock.pending == 0
    assert clock.advance(5.0) == 0
    assert fired == []


def test_virtual_clock_now_tracks_elapsed(clock):
    """now() moves with advance()."""
    start = clock.now()
    clock.advance(90)
    assert clock.now() - start == timedelta(seconds=90)
    assert clock.elapsed == 90


def test_virtual_clock_chained_timers_fire_within_advance(clock):
    """A timer scheduled by a callback fires in the same advance if due."""
    fired = []
    clock.call_later(1.0, lambda: clock.call_later(0.5, lambda: fired.append("chained")))
    clock.advance(2.0)
    assert fired == ["chained"]


def test_event_loop_scheduler_runs_callback():
    """EventLoopScheduler delegates to loop.call_later."""
    loop = asyncio.new_event_loop()
    try:
        scheduler = EventLoopScheduler(loop)
        fired = []
        scheduler.call_later(0.01, lambda: fired.append(True))
        scheduler.call_later(0.02, loop.stop)
        loop.run_forever()
        assert fired == [True]
        assert scheduler.now().tzinfo is not None
    finally:
        loop.close()


def test_notifier_queues_and_drains():
    """Notifications are queued until drained."""
    notifier = Notifier()
    notifier.notify("DRAFT_WRITE_FAILED", "save failed", patient_id="P1", test_id="cbc")
    notifier.notify("SCHEMA_FALLBACK", "generic fields", level="info")
    assert notifier.codes() == ["DRAFT_WRITE_FAILED", "SCHEMA_FALLBACK"]
    drained = notifier.drain()
    assert [n.level for n in drained] == ["warning", "info"]
    assert drained[0].test_id == "cbc"
    assert notifier.pending == []


def test_notifier_logs_warnings(caplog):
    """Warning-level notifications are logged as warnings."""
    with caplog.at_level("WARNING", logger="lab_results.engine.notify"):
        Notifier().notify("ROSTER_ADD_FAILED", "could not save")
    assert "ROSTER_ADD_FAILED" in caplog.text

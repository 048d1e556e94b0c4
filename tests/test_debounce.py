"""Tests for the debouncer and the virtual-clock scheduler."""

import asyncio

from factor_review.matching import Debouncer, ManualScheduler


class TestManualScheduler:
    """Tests for ManualScheduler."""

    def test_runs_due_tasks_in_order(self, scheduler):
        calls = []
        scheduler.call_later(0.2, lambda: calls.append("b"))
        scheduler.call_later(0.1, lambda: calls.append("a"))

        assert scheduler.advance(0.25) == 2
        assert calls == ["a", "b"]
        assert scheduler.now == 0.25

    def test_not_yet_due(self, scheduler):
        calls = []
        scheduler.call_later(0.3, lambda: calls.append(1))

        assert scheduler.advance(0.299) == 0
        assert calls == []
        assert scheduler.pending == 1

    def test_cancelled_task_skipped(self, scheduler):
        calls = []
        handle = scheduler.call_later(0.1, lambda: calls.append(1))
        handle.cancel()

        assert scheduler.pending == 0
        assert scheduler.advance(1) == 0
        assert calls == []

    def test_run_pending(self):
        scheduler = ManualScheduler(start=10.0)
        calls = []
        scheduler.call_later(5, lambda: calls.append(1))

        assert scheduler.run_pending() == 1
        assert scheduler.now == 15.0


class TestDebouncer:
    """Trailing-edge debounce behaviour."""

    def test_fires_after_quiet_period(self, scheduler):
        received = []
        debouncer = Debouncer(300, received.append, scheduler)

        debouncer.trigger("gas")
        assert debouncer.is_pending

        scheduler.advance(0.3)
        assert received == ["gas"]
        assert not debouncer.is_pending

    def test_burst_delivers_last_value_once(self, scheduler):
        """Keystrokes within the window collapse into a single call."""
        received = []
        debouncer = Debouncer(300, received.append, scheduler)

        for text in ("g", "ga", "gas"):
            debouncer.trigger(text)
            scheduler.advance(0.1)
        assert received == []

        scheduler.advance(0.3)
        assert received == ["gas"]

    def test_each_trigger_restarts_window(self, scheduler):
        received = []
        debouncer = Debouncer(300, received.append, scheduler)

        debouncer.trigger("a")
        scheduler.advance(0.25)
        debouncer.trigger("ab")
        scheduler.advance(0.25)
        assert received == []
        assert scheduler.pending == 1

        scheduler.advance(0.05)
        assert received == ["ab"]

    def test_cancel_drops_pending_value(self, scheduler):
        received = []
        debouncer = Debouncer(300, received.append, scheduler)

        debouncer.trigger("x")
        debouncer.cancel()
        scheduler.advance(1)

        assert received == []
        assert not debouncer.is_pending

    def test_separate_bursts_each_fire(self, scheduler):
        received = []
        debouncer = Debouncer(300, received.append, scheduler)

        debouncer.trigger("one")
        scheduler.advance(0.5)
        debouncer.trigger("two")
        scheduler.advance(0.5)

        assert received == ["one", "two"]

    def test_no_scheduler_outside_event_loop_delivers_at_once(self):
        received = []
        debouncer = Debouncer(300, received.append)

        debouncer.trigger("gas")

        assert received == ["gas"]
        assert not debouncer.is_pending

    def test_loop_looked_up_per_trigger(self):
        """The same debouncer works across separate event loops."""
        received = []
        debouncer = Debouncer(10, received.append)

        async def run(value):
            debouncer.trigger(value)
            await asyncio.sleep(0.05)

        asyncio.run(run("first"))
        asyncio.run(run("second"))
        assert received == ["first", "second"]

    def test_defaults_to_running_event_loop(self):
        """Without an injected scheduler the asyncio loop is used."""
        received = []

        async def run():
            debouncer = Debouncer(10, received.append)
            debouncer.trigger("first")
            debouncer.trigger("second")
            await asyncio.sleep(0.05)

        asyncio.run(run())
        assert received == ["second"]

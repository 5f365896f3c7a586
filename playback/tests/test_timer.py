"""
Unit tests for Timer scheduling, chaining and event gating.

Run with: python -m pytest playback/tests/test_timer.py -v
"""

import pytest

from playback.events import Event, EventDispatcher
from playback.frame import Frame
from playback.timer import INDEFINITE, Timer


def _noop(*args):
    return None


@pytest.fixture
def frame():
    return Frame(_noop, name="test")


# ===========================================================================
# Construction & accessors
# ===========================================================================


class TestTimerInit:
    """Timer construction and builder-style mutators."""

    def test_initializes_running(self):
        """New timers are running."""
        assert Timer(None, _noop).running is True

    def test_requires_callable(self):
        """A missing callback fails the constructor."""
        with pytest.raises(TypeError):
            Timer(None, None)

    def test_ids_strictly_increase(self):
        """Ids are assigned in creation order."""
        a, b, c = Timer(None, _noop), Timer(None, _noop), Timer(None, _noop)
        assert a.id < b.id < c.id

    def test_start_time(self):
        """start_time can be set and read back."""
        assert Timer(None, _noop).set_start_time(200).start_time == 200

    def test_interval(self):
        """interval can be set and read back."""
        assert Timer(None, _noop).set_interval(100).interval == 100

    @pytest.mark.parametrize("value", [0, -100, 0.4, -0.4])
    def test_non_positive_interval_is_cleared(self, value):
        """Intervals that round to zero or below leave the timer one-shot."""
        assert Timer(None, _noop).set_interval(value).interval is None

    def test_negative_duration_is_clamped(self):
        """Negative durations clamp to zero."""
        assert Timer(None, _noop).set_duration(-5).duration == 0

    def test_non_positive_delay_is_ignored(self):
        """delay() ignores zero and negative values."""
        timer = Timer(None, _noop).set_start_time(100).delay(-50).delay(0)
        assert timer.start_time == 100

    def test_frame_timer_starts_at_playhead(self, frame):
        """Frame timers start at the current playhead."""
        frame.set_playhead(100)
        assert frame.timer(_noop).start_time == 100

    def test_frame_timer_with_delay(self, frame):
        """delay() pushes the start time back."""
        frame.set_playhead(100)
        assert frame.timer(_noop).delay(200).start_time == 300


class TestTimes:
    """Repeat counts."""

    def test_times_sets_duration(self):
        """n repeats span interval * (n - 1)."""
        timer = Timer(None, _noop).set_start_time(0).set_interval(50).times(4)
        assert timer.duration == 150
        assert timer.until(150) == 150
        assert timer.until(151) is None

    def test_times_one_is_one_shot(self):
        """times(1) clears interval and duration."""
        timer = Timer(None, _noop).set_start_time(0).set_interval(50).set_duration(500).times(1)
        assert timer.interval is None
        assert timer.duration is None

    def test_sub_unit_interval_runs_once(self, frame):
        """A fractional period that rounds to zero does not break advancing."""
        log = []
        frame.timer(lambda t: log.append(frame.playhead)).set_interval(0.4).times(3)
        frame.set_playhead(10)
        assert log == [0]
        assert frame.playhead == 10

    def test_times_runs_exactly_n_times(self, frame):
        """A frame runs a times(3) timer three times."""
        log = []
        frame.timer(lambda t: log.append(frame.playhead)).set_interval(40).times(3)
        frame.set_playhead(1000)
        assert log == [0, 40, 80]


# ===========================================================================
# until()
# ===========================================================================


class TestUntil:
    """Next-boundary arithmetic."""

    def test_none_when_stopped(self):
        timer = Timer(None, _noop).set_start_time(200).set_interval(100).stop()
        assert timer.until(1000) is None

    def test_none_without_start_time(self):
        assert Timer(None, _noop).until(0) is None

    def test_start_time_when_before_start(self):
        timer = Timer(None, _noop).set_start_time(2000).set_interval(100)
        assert timer.until(500) == 2000

    def test_on_boundary_returns_t(self):
        timer = Timer(None, _noop).set_start_time(200).set_interval(100)
        assert timer.until(500) == 500

    def test_next_boundary(self):
        timer = Timer(None, _noop).set_start_time(200).set_interval(100)
        assert timer.until(501) == 600
        assert timer.until(599) == 600

    def test_none_after_end_time(self):
        timer = Timer(None, _noop).set_start_time(100).set_interval(50).set_duration(200)
        assert timer.until(300) == 300
        assert timer.until(301) is None

    def test_boundary_past_end_is_none(self):
        """A boundary beyond start + duration is never returned."""
        timer = Timer(None, _noop).set_start_time(0).set_interval(100).set_duration(150)
        assert timer.until(101) is None

    def test_one_shot_past_start_is_none(self):
        timer = Timer(None, _noop).set_start_time(100)
        assert timer.until(100) == 100
        assert timer.until(101) is None

    @pytest.mark.parametrize("start,interval", [(0, 7), (13, 5), (200, 100)])
    def test_smallest_boundary_at_or_after_t(self, start, interval):
        """until(t) is the smallest s + k*i >= t."""
        timer = Timer(None, _noop).set_start_time(start).set_interval(interval)
        for t in range(start, start + 3 * interval):
            expected = start + -(-(t - start) // interval) * interval
            assert timer.until(t) == expected

    def test_until_does_not_mutate(self):
        timer = Timer(None, _noop).set_start_time(200).set_interval(100)
        before = repr(timer)
        timer.until(350)
        assert repr(timer) == before


# ===========================================================================
# run() / stop()
# ===========================================================================


class TestRunStop:

    def test_run_passes_timer(self):
        """run() calls the callback with the timer."""
        seen = []
        timer = Timer(None, seen.append)
        timer.run()
        assert seen == [timer]

    def test_stop(self):
        timer = Timer(None, _noop)
        timer.stop()
        assert timer.running is False

    def test_stop_dispatches_end_once(self):
        """stop() is idempotent and notifies only once."""
        ends = []
        timer = Timer(None, _noop)
        timer.add_event_listener("end", ends.append)
        timer.stop()
        timer.stop()
        assert len(ends) == 1
        assert ends[0].target is timer


# ===========================================================================
# Chaining
# ===========================================================================


class TestChaining:

    def test_then_links_to_frame(self, frame):
        t0 = frame.timer(_noop).set_start_time(200)
        t1 = t0.then(_noop)
        assert t1.frame is frame

    def test_then_is_not_active_until_parent_stops(self, frame):
        t0 = frame.timer(_noop).set_start_time(200)
        t1 = t0.then(_noop)
        assert t1 not in frame.timers
        assert t0.dependents == [(0, t1)]

    def test_then_offsets_from_parent_stop(self, frame):
        t0 = frame.timer(_noop).set_start_time(200)
        t1 = t0.then(_noop).delay(400)
        frame.set_playhead(300)
        assert t1.start_time == 600

    def test_after_offsets_from_parent(self, frame):
        t0 = frame.timer(_noop).set_start_time(200)
        t1 = t0.after(300, _noop)
        frame.set_playhead(200)
        assert t1.start_time == 500

    def test_after_uses_actual_stop_time(self, frame):
        """Dependents are anchored to when the parent actually stopped."""
        t0 = frame.timer(_noop).set_start_time(200).set_interval(1000)
        t1 = t0.after(300, _noop)
        frame.set_playhead(201)
        t0.stop()
        assert t1.start_time == 501
        assert t1 in frame.timers

    def test_chained_timers_run_when_skipped_over(self, frame):
        """All chained timers run even if the playhead jumps past them."""
        count = []
        t0 = frame.after(100, lambda t: count.append(1))
        t1 = t0.after(100, lambda t: count.append(1))
        t1.after(100, lambda t: count.append(1))
        frame.set_playhead(99)
        frame.set_playhead(1000)
        assert len(count) == 3

    def test_then_on_stopped_timer_activates_immediately(self, frame):
        t0 = frame.timer(_noop)
        frame.set_playhead(50)
        assert t0.running is False
        t1 = t0.after(10, _noop)
        assert t1 in frame.timers
        assert t1.start_time == 60


# ===========================================================================
# Event gating
# ===========================================================================


class TestAt:

    def test_runs_chain_when_event_happens(self, frame):
        done = []
        target = EventDispatcher()
        t0 = frame.timer(_noop).set_start_time(200)
        t1 = t0.at(target, "myEvent", _noop)
        t1.after(100, lambda t: done.append(frame.playhead))

        frame.set_playhead(200)
        assert t1.gated
        assert t1.until(frame.playhead) == INDEFINITE

        target.dispatch_event(Event("myEvent"))
        assert t1.running is False
        frame.set_playhead(frame.playhead + 100)
        assert done == [300]

    def test_gated_timer_ignores_time(self, frame):
        """A gated timer never advances the playhead on its own."""
        target = EventDispatcher()
        t1 = frame.at(target, "go", _noop)
        frame.set_playhead(10_000)
        assert t1.running is True
        assert frame.playhead == 10_000

    def test_keeps_listening_while_returning_false(self, frame):
        counter = [0]
        finished = []
        target = EventDispatcher()

        def predicate(event):
            counter[0] += 1
            return counter[0] > 3

        t0 = frame.timer(_noop).set_start_time(200)
        t1 = t0.at(target, "myEvent", predicate)
        t1.after(100, lambda t: finished.append(True))
        frame.set_playhead(201)

        for _ in range(3):
            target.dispatch_event(Event("myEvent"))
            frame.set_playhead(frame.playhead + 101)
            assert not finished

        target.dispatch_event(Event("myEvent"))
        frame.set_playhead(frame.playhead + 101)
        assert finished == [True]

    def test_listener_removed_after_stop(self, frame):
        target = EventDispatcher()
        t1 = frame.at(target, "go", _noop)
        assert target.has_event_listener("go")
        t1.stop()
        assert not target.has_event_listener("go")

    def test_gate_registered_only_once_parent_stops(self, frame):
        target = EventDispatcher()
        t0 = frame.timer(_noop).set_start_time(100)
        t0.at(target, "go", _noop)
        assert not target.has_event_listener("go")
        frame.set_playhead(100)
        assert target.has_event_listener("go")


# ===========================================================================
# Cloning
# ===========================================================================


class TestClone:

    def test_clone_preserves_fields(self, frame):
        t0 = frame.timer(_noop).set_start_time(200).set_interval(50).set_duration(300)
        t1 = t0.after(100, _noop)
        clone = t0.clone()
        assert clone.id == t0.id
        assert clone.start_time == 200
        assert clone.interval == 50
        assert clone.duration == 300
        assert clone.running is True
        assert clone.dependents[0][1].id == t1.id
        assert clone.dependents[0][1] is not t1

    def test_clone_is_independent(self, frame):
        t0 = frame.timer(_noop).set_start_time(200)
        clone = t0.clone()
        t0.stop()
        assert clone.running is True

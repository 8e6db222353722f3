"""TimerEngine: timestamp-driven countdown, phase rules, persistence."""

import pytest

from pomosync.core.timer_engine import (
    IDLE,
    LONG_BREAK,
    PAUSED,
    RUNNING,
    SHORT_BREAK,
    WORK,
    Completion,
    TimerEngine,
)
from pomosync.domain.models import TimerSettings

# 1 minute work, 1 minute short break, 2 minute long break
FAST = TimerSettings(work_duration=1, short_break_duration=1, long_break_duration=2)


def run_work(engine: TimerEngine, t: float) -> float:
    engine.start(t)
    engine.tick(t + engine.time_left)
    return t + 60


class TestBasics:
    def test_initial_state(self):
        snap = TimerEngine().snapshot()
        assert snap.state == IDLE
        assert snap.time_left == 25 * 60
        assert snap.cycles == 0
        assert not snap.is_break
        assert snap.session_type == WORK
        assert snap.expected_end_time is None

    def test_start_sets_expected_end(self):
        e = TimerEngine()
        assert e.start(1000.0) is True
        assert e.state == RUNNING
        assert e.expected_end_time == 1000.0 + 1500

    def test_start_while_running_is_noop(self):
        e = TimerEngine()
        e.start(0.0)
        assert e.start(50.0) is False
        assert e.expected_end_time == 1500.0

    def test_tick_uses_timestamps(self):
        e = TimerEngine()
        e.start(1000.0)
        assert e.tick(1010.2) == []
        assert e.time_left == 1490

    def test_missed_ticks_do_not_drift(self):
        e = TimerEngine()
        e.start(0.0)
        e.tick(1.0)
        # nothing ticked for ten minutes (sleep / background)
        e.tick(601.0)
        assert e.time_left == 1500 - 601

    def test_tick_ignored_when_not_running(self):
        e = TimerEngine()
        assert e.tick(99999.0) == []
        assert e.time_left == 1500


class TestPauseResume:
    def test_pause_freezes_remaining(self):
        e = TimerEngine()
        e.start(0.0)
        assert e.pause(100.0) is True
        assert e.state == PAUSED
        assert e.time_left == 1400
        assert e.expected_end_time is None
        assert e.tick(5000.0) == []
        assert e.time_left == 1400

    def test_resume_rebases_end_time(self):
        e = TimerEngine()
        e.start(0.0)
        e.pause(100.0)
        assert e.resume(200.0) is True
        assert e.expected_end_time == 1600.0
        e.tick(300.0)
        assert e.time_left == 1300

    def test_pause_only_from_running(self):
        e = TimerEngine()
        assert e.pause(10.0) is False
        assert e.resume(10.0) is False


class TestPhases:
    def test_work_completion_goes_to_short_break(self):
        e = TimerEngine(FAST)
        e.start(0.0)
        done = e.tick(60.0)
        assert done == [Completion(WORK, 60.0)]
        assert e.state == IDLE
        assert e.is_break and not e.is_long_break
        assert e.cycles == 1
        assert e.time_left == 60

    def test_every_fourth_cycle_is_long_break(self):
        e = TimerEngine(FAST)
        t = 0.0
        for i in range(4):
            t = run_work(e, t)
            if i < 3:
                assert e.session_type == SHORT_BREAK
                e.start(t)
                e.tick(t + 60)
                t += 60
        assert e.cycles == 4
        assert e.session_type == LONG_BREAK
        assert e.time_left == 120

    def test_break_completion_returns_to_work(self):
        e = TimerEngine(FAST)
        t = run_work(e, 0.0)
        e.start(t)
        done = e.tick(t + 60)
        assert [c.session_type for c in done] == [SHORT_BREAK]
        assert not e.is_break
        assert not e.is_long_break
        assert e.time_left == 60
        assert e.cycles == 1

    def test_auto_start_break_anchored_at_work_end(self):
        settings = TimerSettings(1, 1, 2, auto_start_breaks=True)
        e = TimerEngine(settings)
        e.start(0.0)
        done = e.tick(90.0)
        assert [c.session_type for c in done] == [WORK]
        assert e.state == RUNNING
        assert e.expected_end_time == 120.0
        assert e.time_left == 30

    def test_break_does_not_auto_start_work(self):
        settings = TimerSettings(1, 1, 2, auto_start_breaks=True)
        e = TimerEngine(settings)
        e.start(0.0)
        done = e.tick(500.0)
        assert [c.session_type for c in done] == [WORK, SHORT_BREAK]
        assert e.state == IDLE
        assert not e.is_break

    def test_reset_keeps_cycles_and_phase(self):
        e = TimerEngine(FAST)
        t = run_work(e, 0.0)
        e.start(t)
        e.tick(t + 20)
        e.reset()
        assert e.state == IDLE
        assert e.is_break
        assert e.time_left == 60
        assert e.cycles == 1

    def test_skip_work_counts_cycle(self):
        e = TimerEngine(FAST)
        e.start(0.0)
        assert e.skip() == WORK
        assert e.cycles == 1
        assert e.is_break
        assert e.state == IDLE
        assert e.expected_end_time is None

    def test_skip_break_goes_to_work(self):
        e = TimerEngine(FAST)
        e.skip()
        assert e.skip() == SHORT_BREAK
        assert not e.is_break
        assert e.cycles == 1

    def test_skip_into_fourth_break_is_long(self):
        e = TimerEngine(FAST)
        for _ in range(3):
            e.skip()
            e.skip()
        e.skip()
        assert e.session_type == LONG_BREAK

    def test_apply_settings_when_idle(self):
        e = TimerEngine()
        e.apply_settings(TimerSettings(work_duration=50))
        assert e.time_left == 3000

    def test_apply_settings_leaves_running_countdown(self):
        e = TimerEngine()
        e.start(0.0)
        e.apply_settings(TimerSettings(work_duration=50))
        assert e.time_left == 1500
        assert e.expected_end_time == 1500.0


class TestPersistence:
    def test_to_dict_shape_running(self):
        e = TimerEngine()
        e.start(1000.5)
        assert e.to_dict() == {
            "timeLeft": 1500,
            "state": "running",
            "cycles": 0,
            "isBreak": False,
            "isLongBreak": False,
            "expectedEndTime": 2_500_500,
        }

    def test_to_dict_idle_has_no_end(self):
        assert TimerEngine().to_dict()["expectedEndTime"] is None

    def test_restore_running_recomputes_remaining(self):
        data = {
            "timeLeft": 1500,
            "state": "running",
            "cycles": 2,
            "isBreak": False,
            "isLongBreak": False,
            "expectedEndTime": 2_500_000,
        }
        e, done = TimerEngine.from_dict(data, now=2000.0)
        assert done == []
        assert e.state == RUNNING
        assert e.time_left == 500
        assert e.cycles == 2

    def test_restore_expired_completes_session(self):
        data = {
            "timeLeft": 60,
            "state": "running",
            "cycles": 0,
            "isBreak": False,
            "isLongBreak": False,
            "expectedEndTime": 60_000,
        }
        e, done = TimerEngine.from_dict(data, settings=FAST, now=4000.0)
        assert done == [Completion(WORK, 60.0)]
        assert e.state == IDLE
        assert e.is_break
        assert e.cycles == 1

    def test_restore_running_without_end_is_paused(self):
        data = {"timeLeft": 300, "state": "running", "cycles": 0}
        e, _ = TimerEngine.from_dict(data, now=10.0)
        assert e.state == PAUSED
        assert e.time_left == 300

    def test_restore_paused_keeps_time(self):
        data = {"timeLeft": 321, "state": "paused", "cycles": 1, "isBreak": True}
        e, _ = TimerEngine.from_dict(data, now=10.0)
        assert e.state == PAUSED
        assert e.time_left == 321
        assert e.session_type == SHORT_BREAK

    def test_legacy_break_state_reads_as_idle(self):
        e, _ = TimerEngine.from_dict({"timeLeft": 300, "state": "break"})
        assert e.state == IDLE

    def test_long_break_requires_break(self):
        data = {"timeLeft": 10, "state": "idle", "isBreak": False, "isLongBreak": True}
        e, _ = TimerEngine.from_dict(data)
        assert not e.is_long_break

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"timeLeft": "abc", "state": "idle"},
            {"timeLeft": -5, "state": "idle"},
            {"timeLeft": 10, "state": "bogus"},
            {"timeLeft": 10, "state": "running", "expectedEndTime": "soon"},
            {"timeLeft": 10, "state": "running", "expectedEndTime": float("inf")},
            {"timeLeft": 1e400, "state": "idle"},
            {"timeLeft": float("nan"), "state": "idle"},
            {"timeLeft": True, "state": "idle"},
            {"timeLeft": 10, "state": "idle", "isBreak": "false"},
            {"timeLeft": 10, "state": "idle", "isBreak": True, "isLongBreak": 1},
        ],
    )
    def test_malformed_state_raises(self, data):
        with pytest.raises(ValueError):
            TimerEngine.from_dict(data, now=0.0)

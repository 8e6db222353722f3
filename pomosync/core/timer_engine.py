# -*- coding: utf-8 -*-

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pomosync.domain.models import TimerSettings

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
TIMER_STATES = (IDLE, RUNNING, PAUSED)

WORK = "work"
SHORT_BREAK = "short_break"
LONG_BREAK = "long_break"

LONG_BREAK_EVERY = 4

SESSION_LABELS = {
    WORK: "Work Session",
    SHORT_BREAK: "Short Break",
    LONG_BREAK: "Long Break",
}


@dataclass(frozen=True)
class Completion:
    session_type: str
    ended_at: float  # epoch seconds the session was due to end


@dataclass(frozen=True)
class EngineSnapshot:
    time_left: int
    state: str  # idle | running | paused
    cycles: int
    is_break: bool
    is_long_break: bool
    expected_end_time: Optional[float]

    @property
    def session_type(self) -> str:
        if not self.is_break:
            return WORK
        return LONG_BREAK if self.is_long_break else SHORT_BREAK

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state == PAUSED

    @property
    def is_idle(self) -> bool:
        return self.state == IDLE


def _finite(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Timer state has an invalid {what}.")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Timer state has an invalid {what}.")
    if not math.isfinite(number):
        raise ValueError(f"Timer state has a non-finite {what}.")
    return number


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"Timer state flag {key} must be true or false.")
    return value


class TimerEngine:
    """
    Pure countdown engine (no Tkinter, no storage).

    Remaining time is always derived from the expected end timestamp, so a
    late or missed tick (sleep, backgrounded window, process restart) does
    not drift the countdown. Callers pass wall-clock epoch seconds.
    """

    def __init__(self, settings: Optional[TimerSettings] = None):
        self.settings = settings or TimerSettings()

        self.time_left = self.settings.work_sec
        self.state = IDLE
        self.cycles = 0
        self.is_break = False
        self.is_long_break = False
        self.expected_end_time: Optional[float] = None

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            time_left=self.time_left,
            state=self.state,
            cycles=self.cycles,
            is_break=self.is_break,
            is_long_break=self.is_long_break,
            expected_end_time=self.expected_end_time,
        )

    @property
    def session_type(self) -> str:
        return self.snapshot().session_type

    def phase_duration(self) -> int:
        if not self.is_break:
            return self.settings.work_sec
        if self.is_long_break:
            return self.settings.long_break_sec
        return self.settings.short_break_sec

    def remaining(self, now: float) -> int:
        if self.state != RUNNING or self.expected_end_time is None:
            return self.time_left
        return max(0, math.ceil(self.expected_end_time - now))

    # ----- transitions -----
    def start(self, now: float) -> bool:
        if self.state not in (IDLE, PAUSED):
            return False
        self.expected_end_time = now + self.time_left
        self.state = RUNNING
        return True

    def pause(self, now: float) -> bool:
        if self.state != RUNNING:
            return False
        self.time_left = self.remaining(now)
        self.expected_end_time = None
        self.state = PAUSED
        return True

    def resume(self, now: float) -> bool:
        if self.state != PAUSED:
            return False
        return self.start(now)

    def reset(self) -> None:
        # cycles survive a reset; only the current phase restarts
        self.state = IDLE
        self.expected_end_time = None
        self.time_left = self.phase_duration()

    def skip(self) -> str:
        """Move to the next phase without waiting. Returns the skipped type."""
        skipped = self.session_type
        self.expected_end_time = None
        self._advance_phase()
        self.state = IDLE
        return skipped

    def tick(self, now: float) -> List[Completion]:
        """
        Recompute the countdown. Returns the sessions that completed during
        this call (empty most of the time).
        """
        completed: List[Completion] = []
        while self.state == RUNNING:
            left = self.remaining(now)
            if left > 0:
                self.time_left = left
                break
            completed.append(self._complete())
        return completed

    def apply_settings(self, settings: TimerSettings) -> None:
        self.settings = settings
        if self.state == IDLE:
            self.time_left = self.phase_duration()

    # ----- internals -----
    def _advance_phase(self) -> None:
        if not self.is_break:
            self.cycles += 1
            self.is_break = True
            self.is_long_break = self.cycles % LONG_BREAK_EVERY == 0
        else:
            self.is_break = False
            self.is_long_break = False
        self.time_left = self.phase_duration()

    def _complete(self) -> Completion:
        finished = self.session_type
        ended_at = self.expected_end_time
        self._advance_phase()
        self.state = IDLE
        self.expected_end_time = None

        if finished == WORK and self.settings.auto_start_breaks:
            # anchor the break at the instant work ended, not at "now"
            self.start(ended_at)
        return Completion(finished, ended_at)

    # ----- persistence -----
    def to_dict(self) -> Dict[str, Any]:
        end_ms = None
        if self.state == RUNNING and self.expected_end_time is not None:
            end_ms = int(round(self.expected_end_time * 1000))
        return {
            "timeLeft": int(self.time_left),
            "state": self.state,
            "cycles": int(self.cycles),
            "isBreak": bool(self.is_break),
            "isLongBreak": bool(self.is_long_break),
            "expectedEndTime": end_ms,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        settings: Optional[TimerSettings] = None,
        now: Optional[float] = None,
    ) -> Tuple["TimerEngine", List[Completion]]:
        """
        Rebuild an engine from its persisted form.

        Returns (engine, completed) where completed lists the sessions that
        ran out while nobody was ticking.
        """
        if not isinstance(data, dict):
            raise ValueError("Timer state must be an object.")

        time_left = int(_finite(data.get("timeLeft"), "timeLeft"))
        cycles = int(_finite(data.get("cycles", 0), "cycles"))
        if time_left < 0 or cycles < 0:
            raise ValueError("Timer state has negative values.")

        state = data.get("state", IDLE)
        if state == "break":
            state = IDLE
        if state not in TIMER_STATES:
            raise ValueError(f"Unknown timer state: {state!r}")

        engine = cls(settings)
        engine.time_left = time_left
        engine.cycles = cycles
        engine.is_break = _flag(data, "isBreak")
        engine.is_long_break = engine.is_break and _flag(data, "isLongBreak")

        completed: List[Completion] = []
        end_ms = data.get("expectedEndTime")
        if state == RUNNING:
            if end_ms is None:
                engine.state = PAUSED
            else:
                engine.expected_end_time = _finite(end_ms, "expectedEndTime") / 1000.0
                engine.state = RUNNING
                if now is not None:
                    completed = engine.tick(now)
        else:
            engine.state = state

        return engine, completed

# -*- coding: utf-8 -*-

import json
import logging
import time
from typing import Callable, List, Optional

from pomosync.core.clock import iso_from_ts
from pomosync.core.timer_engine import (
    WORK,
    Completion,
    EngineSnapshot,
    TimerEngine,
)
from pomosync.domain.models import AppSettings, SessionLog
from pomosync.services.notification_service import NotificationService
from pomosync.services.settings_service import SettingsService
from pomosync.storage.repos import AppStateRepo, SessionRepo

logger = logging.getLogger(__name__)

TIMER_KEY = "pomodoro-timer"
ACTIVE_SESSION_KEY = "pomodoro-active-session"

NOTIFY_LABELS = {
    "work": "Work",
    "short_break": "Short break",
    "long_break": "Long break",
}


class TimerService:
    """
    Orchestrates:
    - TimerEngine state, persisted to the local store on every change
    - restoring a running countdown after a restart
    - session logging + cloud hook on completion
    - notification / sound
    - callbacks for UI
    """

    def __init__(
        self,
        state_repo: AppStateRepo,
        session_repo: SessionRepo,
        settings_service: SettingsService,
        notifier: Optional[NotificationService] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.state = state_repo
        self.session_repo = session_repo
        self.settings_service = settings_service
        self.notifier = notifier or NotificationService()
        self._clock = clock or time.time

        self.user_id: Optional[str] = None
        self.active_task_id: Optional[str] = None
        self._session_started_at: Optional[float] = None

        self._on_tick: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_phase_change: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_state_change: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_session_complete: Optional[Callable[[SessionLog], None]] = None

        self.engine = TimerEngine(settings_service.timer)
        self._restore()
        settings_service.add_listener(self._on_settings_changed)

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_tick = fn

    def set_on_phase_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_phase_change = fn

    def set_on_state_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_state_change = fn

    def set_on_session_complete(self, fn: Callable[[SessionLog], None]) -> None:
        self._on_session_complete = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_phase_change(self) -> None:
        if self._on_phase_change:
            self._on_phase_change(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    # ----- Public API -----
    def get_snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    def set_active_task(self, task_id: Optional[str]) -> None:
        self.active_task_id = task_id
        self._save()

    def start(self, task_id: Optional[str] = None) -> None:
        if task_id:
            self.active_task_id = task_id

        now = self._clock()
        snap = self.engine.snapshot()
        if snap.is_idle:
            self.engine.start(now)
            self._session_started_at = now
        elif snap.is_paused:
            self.engine.resume(now)
        else:
            return

        self._save()
        self._emit_state_change()
        self._emit_tick()

    def pause(self) -> None:
        if not self.engine.pause(self._clock()):
            return
        self._save()
        self._emit_state_change()
        self._emit_tick()

    def resume(self) -> None:
        if not self.engine.resume(self._clock()):
            return
        self._save()
        self._emit_state_change()
        self._emit_tick()

    def reset(self) -> None:
        # the abandoned session is not logged
        self.engine.reset()
        self._session_started_at = None
        self._save()
        self._emit_state_change()
        self._emit_tick()

    def skip(self) -> None:
        skipped = self.engine.skip()
        logger.info("Skipped %s session", skipped)
        self._session_started_at = None
        self._save()
        self._emit_phase_change()
        self._emit_state_change()
        self._emit_tick()

    def tick(self) -> None:
        """
        Called about once per second by the UI loop. Lateness does not matter:
        the remaining time comes from the stored end timestamp.
        """
        if not self.engine.snapshot().is_running:
            return

        completed = self.engine.tick(self._clock())
        self._emit_tick()

        if completed:
            self._handle_completed(completed)
            self._save()
            self._emit_phase_change()
            self._emit_state_change()

    def mark_task_done(self, task_id: str) -> None:
        """Stop counting for a task that was just completed."""
        if self.active_task_id == task_id:
            self.active_task_id = None
            self.reset()

    def reset_all(self) -> None:
        """
        Back to a fresh install: default settings, unmuted, no saved timer.
        Cycles and the active task are forgotten; logged sessions stay.
        """
        self.settings_service.reset_all()
        self.engine = TimerEngine(self.settings_service.timer)
        self.active_task_id = None
        self._session_started_at = None
        self.state.delete(TIMER_KEY)
        self.state.delete(ACTIVE_SESSION_KEY)
        logger.info("Settings and timer state reset to defaults")
        self._emit_phase_change()
        self._emit_state_change()
        self._emit_tick()

    # ----- completion -----
    def _handle_completed(self, completed: List[Completion]) -> None:
        for item in completed:
            self._log_session(item)
            self._notify(item)
            # an auto-started break begins exactly when work ended
            self._session_started_at = item.ended_at if self.engine.snapshot().is_running else None

    def _phase_seconds(self, session_type: str) -> int:
        timer = self.engine.settings
        if session_type == WORK:
            return timer.work_sec
        if session_type == "long_break":
            return timer.long_break_sec
        return timer.short_break_sec

    def _log_session(self, item: Completion) -> None:
        started = self._session_started_at
        if started is None or started > item.ended_at:
            started = item.ended_at - self._phase_seconds(item.session_type)

        log = self.session_repo.add(
            type=item.session_type,
            started_at=iso_from_ts(started),
            ended_at=iso_from_ts(item.ended_at),
            task_id=self.active_task_id if item.session_type == WORK else None,
            user_id=self.user_id,
        )
        logger.info("Logged %s session %s", item.session_type, log.id)

        if self._on_session_complete:
            self._on_session_complete(log)

    def _notify(self, item: Completion) -> None:
        settings = self.settings_service.settings
        if settings.notifications:
            if item.session_type == WORK:
                self.notifier.notify_session_complete(NOTIFY_LABELS[WORK])
            else:
                self.notifier.notify_break_complete()
        self.notifier.play_sound(muted=self.settings_service.is_muted())

    # ----- persistence -----
    def _save(self) -> None:
        self.state.set(TIMER_KEY, json.dumps(self.engine.to_dict()))
        if self._session_started_at is None and not self.active_task_id:
            self.state.delete(ACTIVE_SESSION_KEY)
            return
        started_ms = None
        if self._session_started_at is not None:
            started_ms = int(round(self._session_started_at * 1000))
        self.state.set(
            ACTIVE_SESSION_KEY,
            json.dumps({"startedAt": started_ms, "taskId": self.active_task_id}),
        )

    def _restore(self) -> None:
        raw_session = self.state.get(ACTIVE_SESSION_KEY)
        if raw_session:
            try:
                data = json.loads(raw_session)
                if data.get("startedAt") is not None:
                    self._session_started_at = float(data["startedAt"]) / 1000.0
                self.active_task_id = data.get("taskId") or None
            except (ValueError, TypeError, AttributeError):
                logger.exception("Failed to load active session record")

        raw = self.state.get(TIMER_KEY)
        if not raw:
            return
        try:
            engine, completed = TimerEngine.from_dict(
                json.loads(raw),
                settings=self.settings_service.timer,
                now=self._clock(),
            )
        except (ValueError, OverflowError):
            logger.exception("Failed to load timer state")
            self._session_started_at = None
            return

        self.engine = engine
        if completed:
            logger.info("%d session(s) finished while the app was closed", len(completed))
            self._handle_completed(completed)
            self._save()

    def _on_settings_changed(self, settings: AppSettings) -> None:
        self.engine.apply_settings(settings.timer)
        self._save()
        self._emit_state_change()
        self._emit_tick()

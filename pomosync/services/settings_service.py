# -*- coding: utf-8 -*-

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from pomosync.domain.models import THEMES, AppSettings, TimerSettings
from pomosync.errors import ValidationError
from pomosync.storage.repos import AppStateRepo

logger = logging.getLogger(__name__)

SETTINGS_KEY = "pomodoro-settings"
MUTED_KEY = "pomodoro-muted"

# minutes, inclusive
DURATION_LIMITS = {
    "work_duration": (1, 60),
    "short_break_duration": (1, 30),
    "long_break_duration": (1, 60),
}

_TIMER_KEYS = {
    "workDuration": "work_duration",
    "shortBreakDuration": "short_break_duration",
    "longBreakDuration": "long_break_duration",
    "autoStartBreaks": "auto_start_breaks",
}


def _check_duration(name: str, value: Any) -> int:
    lo, hi = DURATION_LIMITS[name]
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number of minutes.")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{name} must be a whole number of minutes.")
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number of minutes.")
    if not lo <= minutes <= hi:
        raise ValidationError(f"{name} must be between {lo} and {hi} minutes.")
    return minutes


def timer_settings_from_dict(data: Dict[str, Any]) -> TimerSettings:
    """Merge a stored timer block over the defaults, key by key."""
    base = TimerSettings()
    changes: Dict[str, Any] = {}
    for stored, attr in _TIMER_KEYS.items():
        if stored not in data:
            continue
        value = data[stored]
        if attr == "auto_start_breaks":
            if isinstance(value, bool):
                changes[attr] = value
            else:
                logger.warning("Ignoring stored %s: %r is not true/false", stored, value)
            continue
        try:
            changes[attr] = _check_duration(attr, value)
        except ValidationError as e:
            logger.warning("Ignoring stored %s: %s", stored, e)
    return replace(base, **changes)


def app_settings_from_dict(data: Dict[str, Any]) -> AppSettings:
    timer = data.get("timer")
    theme = data.get("theme", "system")
    if theme not in THEMES:
        logger.warning("Ignoring stored theme %r", theme)
        theme = "system"
    notifications = data.get("notifications", True)
    if not isinstance(notifications, bool):
        logger.warning("Ignoring stored notifications flag %r", notifications)
        notifications = True
    return AppSettings(
        timer=timer_settings_from_dict(timer if isinstance(timer, dict) else {}),
        theme=theme,
        notifications=notifications,
    )


class SettingsService:
    def __init__(self, state: AppStateRepo):
        self.state = state
        self._listeners: List[Callable[[AppSettings], None]] = []
        self.settings = self._load()

    def _load(self) -> AppSettings:
        raw = self.state.get(SETTINGS_KEY)
        if not raw:
            return AppSettings()
        try:
            data = json.loads(raw)
        except ValueError:
            logger.exception("Failed to load settings, using defaults")
            return AppSettings()
        if not isinstance(data, dict):
            logger.error("Stored settings are not an object, using defaults")
            return AppSettings()
        return app_settings_from_dict(data)

    def add_listener(self, fn: Callable[[AppSettings], None]) -> None:
        self._listeners.append(fn)

    def _commit(self, settings: AppSettings) -> AppSettings:
        self.settings = settings
        self.state.set(SETTINGS_KEY, json.dumps(settings.to_dict()))
        for fn in self._listeners:
            fn(settings)
        return settings

    # ----- Public API -----
    @property
    def timer(self) -> TimerSettings:
        return self.settings.timer

    def update_timer_settings(
        self,
        work_duration: Optional[int] = None,
        short_break_duration: Optional[int] = None,
        long_break_duration: Optional[int] = None,
        auto_start_breaks: Optional[bool] = None,
    ) -> AppSettings:
        changes: Dict[str, Any] = {}
        for name, value in (
            ("work_duration", work_duration),
            ("short_break_duration", short_break_duration),
            ("long_break_duration", long_break_duration),
        ):
            if value is not None:
                changes[name] = _check_duration(name, value)
        if auto_start_breaks is not None:
            changes["auto_start_breaks"] = bool(auto_start_breaks)

        timer = replace(self.settings.timer, **changes)
        return self._commit(replace(self.settings, timer=timer))

    def update_theme(self, theme: str) -> AppSettings:
        theme = (theme or "").strip().lower()
        if theme not in THEMES:
            raise ValidationError("Invalid theme. Use light/dark/system.")
        return self._commit(replace(self.settings, theme=theme))

    def toggle_notifications(self) -> AppSettings:
        return self._commit(
            replace(self.settings, notifications=not self.settings.notifications)
        )

    def resolve_theme(self, prefers_dark: bool) -> str:
        if self.settings.theme == "system":
            return "dark" if prefers_dark else "light"
        return self.settings.theme

    def reset_all(self) -> AppSettings:
        """Forget stored preferences and the mute flag; back to defaults."""
        self.state.delete(SETTINGS_KEY)
        self.state.delete(MUTED_KEY)
        self.settings = AppSettings()
        for fn in self._listeners:
            fn(self.settings)
        return self.settings

    # ---- mute ----
    def is_muted(self) -> bool:
        raw = self.state.get(MUTED_KEY)
        if not raw:
            return False
        try:
            return bool(json.loads(raw))
        except ValueError:
            return raw == "true"

    def toggle_muted(self) -> bool:
        muted = not self.is_muted()
        self.state.set(MUTED_KEY, json.dumps(muted))
        return muted

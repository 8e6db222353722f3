# -*- coding: utf-8 -*-

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

THEMES = ("light", "dark", "system")
TASK_STATUSES = ("todo", "done")


@dataclass(frozen=True)
class TimerSettings:
    # minutes
    work_duration: int = 25
    short_break_duration: int = 5
    long_break_duration: int = 15
    auto_start_breaks: bool = False

    @property
    def work_sec(self) -> int:
        return int(self.work_duration) * 60

    @property
    def short_break_sec(self) -> int:
        return int(self.short_break_duration) * 60

    @property
    def long_break_sec(self) -> int:
        return int(self.long_break_duration) * 60

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workDuration": self.work_duration,
            "shortBreakDuration": self.short_break_duration,
            "longBreakDuration": self.long_break_duration,
            "autoStartBreaks": self.auto_start_breaks,
        }


@dataclass(frozen=True)
class AppSettings:
    timer: TimerSettings = field(default_factory=TimerSettings)
    theme: str = "system"  # light | dark | system
    notifications: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timer": self.timer.to_dict(),
            "theme": self.theme,
            "notifications": self.notifications,
        }


@dataclass(frozen=True)
class Task:
    id: str
    user_id: Optional[str]
    title: str
    description: Optional[str]
    status: str  # todo | done
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class SessionLog:
    id: str
    user_id: Optional[str]
    type: str  # work | short_break | long_break
    started_at: str
    ended_at: Optional[str]
    task_id: Optional[str]
    created_at: str


@dataclass(frozen=True)
class User:
    id: str
    email: str


@dataclass(frozen=True)
class DiagnosticResult:
    name: str
    ok: bool
    message: str
    details: Any = None

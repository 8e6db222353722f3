# -*- coding: utf-8 -*-

import time
from typing import Any, Dict, List, Optional

from pomosync.core.clock import iso_from_ts, ts_from_iso
from pomosync.domain.models import SessionLog
from pomosync.storage.db import Database
from pomosync.storage.repos import SessionRepo


def _start_of_today_ts() -> int:
    lt = time.localtime(time.time())
    start = time.mktime(
        (
            lt.tm_year,
            lt.tm_mon,
            lt.tm_mday,
            0,
            0,
            0,
            lt.tm_wday,
            lt.tm_yday,
            lt.tm_isdst,
        )
    )
    return int(start)


def _duration(s: SessionLog) -> int:
    if not s.ended_at:
        return 0
    return max(0, int(ts_from_iso(s.ended_at) - ts_from_iso(s.started_at)))


class StatsService:
    def __init__(self, db: Database):
        self.db = db
        self.sessions = SessionRepo(db)

    def get_db_info(self) -> Dict[str, Any]:
        conn = self.db.conn
        tasks = conn.execute("SELECT COUNT(1) AS c FROM tasks").fetchone()["c"]
        sessions = conn.execute("SELECT COUNT(1) AS c FROM sessions").fetchone()["c"]
        return {
            "db_path": self.db.db_path,
            "tasks_count": tasks,
            "sessions_count": sessions,
            "now_ts": int(time.time()),
        }

    def _today_work(self, since_ts: Optional[int] = None) -> List[SessionLog]:
        start = _start_of_today_ts() if since_ts is None else since_ts
        return [
            s for s in self.sessions.list_between(iso_from_ts(start))
            if s.type == "work"
        ]

    def total_today_work_sec(self) -> int:
        return sum(_duration(s) for s in self._today_work())

    def completed_work_sessions_today(self) -> int:
        return len(self._today_work())

    def total_task_work_sec(self, task_id: str, since_ts: Optional[int] = None) -> int:
        rows = self.sessions.list_between(iso_from_ts(since_ts or 0))
        return sum(_duration(s) for s in rows if s.type == "work" and s.task_id == task_id)

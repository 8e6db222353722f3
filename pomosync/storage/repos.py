# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import uuid
from typing import Any, Dict, List, Optional

from pomosync.core.clock import utc_now_iso
from pomosync.domain.models import SessionLog, Task
from pomosync.storage.db import Database

TASK_COLUMNS = "id, user_id, title, description, status, created_at, updated_at"
SESSION_COLUMNS = "id, user_id, type, started_at, ended_at, task_id, created_at"
TASK_UPDATABLE = ("title", "description", "status")


class AppStateRepo:
    """Small key-value store; the desktop stand-in for browser localStorage."""

    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.conn.commit()

    def delete(self, key: str) -> None:
        self.db.conn.execute("DELETE FROM app_state WHERE key=?", (key,))
        self.db.conn.commit()


class TaskRepo:
    """Tasks kept on this machine (signed-out use, pending upload)."""

    def __init__(self, db: Database):
        self.db = db

    def create(
        self,
        user_id: Optional[str],
        title: str,
        description: Optional[str] = None,
        status: str = "todo",
        created_at: Optional[str] = None,
    ) -> Task:
        tid = str(uuid.uuid4())
        ts = created_at or utc_now_iso()
        self.db.conn.execute(
            f"INSERT INTO tasks({TASK_COLUMNS}) VALUES(?,?,?,?,?,?,?)",
            (tid, user_id, title, description, status, ts, ts),
        )
        self.db.conn.commit()
        return self.get(tid)

    def list(self, user_id: Optional[str] = None) -> List[Task]:
        rows = self.db.conn.execute(
            f"""
            SELECT {TASK_COLUMNS} FROM tasks
            WHERE user_id IS ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (user_id,),
        ).fetchall()
        return [Task(**dict(r)) for r in rows]

    def get(self, task_id: str) -> Optional[Task]:
        r = self.db.conn.execute(
            f"SELECT {TASK_COLUMNS} FROM tasks WHERE id=?",
            (task_id,),
        ).fetchone()
        return Task(**dict(r)) if r else None

    def update(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        fields = {k: v for k, v in fields.items() if k in TASK_UPDATABLE}
        fields["updated_at"] = utc_now_iso()
        assignments = ", ".join(f"{k}=?" for k in fields)
        self.db.conn.execute(
            f"UPDATE tasks SET {assignments} WHERE id=?",
            (*fields.values(), task_id),
        )
        self.db.conn.commit()
        return self.get(task_id)

    def delete(self, task_id: str) -> None:
        self.db.conn.execute("DELETE FROM tasks WHERE id=?", (task_id,))
        self.db.conn.commit()

    # ---- sync helpers ----
    def list_unsynced(self) -> List[Task]:
        return self.list(user_id=None)


class SessionRepo:
    def __init__(self, db: Database):
        self.db = db

    def add(
        self,
        type: str,
        started_at: str,
        ended_at: Optional[str],
        task_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SessionLog:
        sid = str(uuid.uuid4())
        self.db.conn.execute(
            f"INSERT INTO sessions({SESSION_COLUMNS}) VALUES(?,?,?,?,?,?,?)",
            (sid, user_id, type, started_at, ended_at, task_id, utc_now_iso()),
        )
        self.db.conn.commit()
        return self.get(sid)

    def get(self, session_id: str) -> Optional[SessionLog]:
        r = self.db.conn.execute(
            f"SELECT {SESSION_COLUMNS} FROM sessions WHERE id=?",
            (session_id,),
        ).fetchone()
        return SessionLog(**dict(r)) if r else None

    def list_unsynced(self) -> List[SessionLog]:
        rows = self.db.conn.execute(
            f"""
            SELECT {SESSION_COLUMNS} FROM sessions
            WHERE user_id IS NULL ORDER BY started_at ASC
            """
        ).fetchall()
        return [SessionLog(**dict(r)) for r in rows]

    def claim(self, user_id: str, session_ids: Optional[List[str]] = None) -> int:
        """Attach anonymous sessions (all, or just session_ids) to user_id."""
        if session_ids is None:
            cur = self.db.conn.execute(
                "UPDATE sessions SET user_id=? WHERE user_id IS NULL",
                (user_id,),
            )
        else:
            marks = ",".join("?" for _ in session_ids)
            cur = self.db.conn.execute(
                f"UPDATE sessions SET user_id=? WHERE user_id IS NULL AND id IN ({marks})",
                (user_id, *session_ids),
            )
        self.db.conn.commit()
        return cur.rowcount

    def list_between(
        self, start_iso: str, end_iso: Optional[str] = None
    ) -> List[SessionLog]:
        if end_iso is None:
            rows = self.db.conn.execute(
                f"""
                SELECT {SESSION_COLUMNS} FROM sessions
                WHERE started_at >= ? ORDER BY started_at ASC
                """,
                (start_iso,),
            ).fetchall()
        else:
            rows = self.db.conn.execute(
                f"""
                SELECT {SESSION_COLUMNS} FROM sessions
                WHERE started_at >= ? AND started_at < ?
                ORDER BY started_at ASC
                """,
                (start_iso, end_iso),
            ).fetchall()
        return [SessionLog(**dict(r)) for r in rows]

# -*- coding: utf-8 -*-
"""
Supabase-backed tables.

Row persistence, row-level security and auth live in the hosted project;
these classes only shape rows in and out of the SDK and turn SDK failures
into CloudError.
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import Client, ClientOptions, create_client

from pomosync.config import AppConfig
from pomosync.core.clock import utc_now_iso
from pomosync.domain.models import SessionLog, Task
from pomosync.errors import CloudError

logger = logging.getLogger(__name__)

TASK_FIELDS = ("id", "user_id", "title", "description", "status", "created_at", "updated_at")
SESSION_FIELDS = ("id", "user_id", "type", "started_at", "ended_at", "task_id", "created_at")
TASK_UPDATABLE = ("title", "description", "status")


def create_client_from_config(config: AppConfig) -> Client:
    if not config.cloud_enabled:
        raise CloudError(
            "SUPABASE_URL or SUPABASE_ANON_KEY missing.", code="CLOUD_DISABLED"
        )
    # PKCE: the OAuth redirect carries a code this process can exchange
    return create_client(
        config.supabase_url,
        config.supabase_anon_key,
        options=ClientOptions(flow_type="pkce"),
    )


def _execute(query, action: str):
    try:
        return query.execute()
    except Exception as e:
        logger.error("Supabase %s failed: %s", action, e)
        raise CloudError(f"{action} failed: {e}", details=e) from e


def _task_from_row(row: Dict[str, Any]) -> Task:
    return Task(**{k: row.get(k) for k in TASK_FIELDS})


def _session_from_row(row: Dict[str, Any]) -> SessionLog:
    return SessionLog(**{k: row.get(k) for k in SESSION_FIELDS})


class CloudUserRepo:
    def __init__(self, client: Client):
        self.client = client

    def exists(self, user_id: str) -> bool:
        res = _execute(
            self.client.table("users").select("id").eq("id", user_id).limit(1),
            "user lookup",
        )
        return bool(res.data)

    def upsert(self, user_id: str, email: str) -> None:
        ts = utc_now_iso()
        _execute(
            self.client.table("users").upsert(
                {"id": user_id, "email": email, "updated_at": ts}
            ),
            "user upsert",
        )


class CloudTaskRepo:
    def __init__(self, client: Client):
        self.client = client

    def create(
        self,
        user_id: Optional[str],
        title: str,
        description: Optional[str] = None,
        status: str = "todo",
        created_at: Optional[str] = None,
    ) -> Task:
        ts = created_at or utc_now_iso()
        res = _execute(
            self.client.table("tasks").insert(
                {
                    "user_id": user_id,
                    "title": title,
                    "description": description or None,
                    "status": status,
                    "created_at": ts,
                    "updated_at": ts,
                }
            ),
            "task insert",
        )
        if not res.data:
            raise CloudError("task insert returned no row")
        return _task_from_row(res.data[0])

    def list(self, user_id: Optional[str] = None) -> List[Task]:
        res = _execute(
            self.client.table("tasks")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "task list",
        )
        return [_task_from_row(r) for r in res.data or []]

    def get(self, task_id: str) -> Optional[Task]:
        res = _execute(
            self.client.table("tasks").select("*").eq("id", task_id).limit(1),
            "task fetch",
        )
        return _task_from_row(res.data[0]) if res.data else None

    def update(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        payload = {k: v for k, v in fields.items() if k in TASK_UPDATABLE}
        payload["updated_at"] = utc_now_iso()
        res = _execute(
            self.client.table("tasks").update(payload).eq("id", task_id),
            "task update",
        )
        return _task_from_row(res.data[0]) if res.data else None

    def delete(self, task_id: str) -> None:
        _execute(
            self.client.table("tasks").delete().eq("id", task_id),
            "task delete",
        )


class CloudSessionRepo:
    def __init__(self, client: Client):
        self.client = client

    def add(
        self,
        type: str,
        started_at: str,
        ended_at: Optional[str],
        task_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SessionLog:
        res = _execute(
            self.client.table("sessions").insert(
                {
                    "user_id": user_id,
                    "type": type,
                    "started_at": started_at,
                    "ended_at": ended_at,
                    "task_id": task_id,
                }
            ),
            "session insert",
        )
        if not res.data:
            raise CloudError("session insert returned no row")
        return _session_from_row(res.data[0])


class CloudPreferencesRepo:
    def __init__(self, client: Client):
        self.client = client

    def upsert(self, user_id: str, settings: Dict[str, Any]) -> None:
        # last write wins
        _execute(
            self.client.table("preferences").upsert(
                {
                    "user_id": user_id,
                    "settings": settings,
                    "updated_at": utc_now_iso(),
                }
            ),
            "preferences upsert",
        )

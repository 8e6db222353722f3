# services/task_service.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from typing import List, Optional

from pomosync.domain.models import TASK_STATUSES, Task
from pomosync.errors import TaskNotFoundError, UserNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class TaskService:
    """
    Task CRUD over one store: the local TaskRepo while signed out, the
    Supabase CloudTaskRepo once signed in (see use_store).
    """

    def __init__(self, tasks, users=None):
        self.tasks = tasks
        # directory of known users (cloud only); None means no ownership check
        self.users = users

    def use_store(self, tasks, users=None) -> None:
        self.tasks = tasks
        self.users = users

    # ---- tasks ----
    def create_task(
        self, title: str, user_id: Optional[str], description: Optional[str] = None
    ) -> Task:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Task title cannot be empty.")

        if self.users is not None:
            if not user_id or not self.users.exists(user_id):
                logger.error("User not found in public.users: %s", user_id)
                raise UserNotFoundError(
                    "User not found. Please try signing out and signing in again.",
                    details={"user_id": user_id},
                )

        description = (description or "").strip() or None
        return self.tasks.create(
            user_id=user_id, title=title, description=description, status="todo"
        )

    def get_tasks(self, user_id: Optional[str]) -> List[Task]:
        return self.tasks.list(user_id=user_id)

    def get_task(self, task_id: str) -> Task:
        t = self.tasks.get(task_id)
        if t is None:
            raise TaskNotFoundError("Task not found.", details={"id": task_id})
        return t

    def update_task(
        self,
        task_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Task:
        fields = {}
        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError("Name cannot be empty.")
            fields["title"] = title
        if description is not None:
            fields["description"] = description.strip() or None
        if status is not None:
            if status not in TASK_STATUSES:
                raise ValidationError("Invalid status. Use todo/done.")
            fields["status"] = status

        updated = self.tasks.update(task_id, fields)
        if updated is None:
            raise TaskNotFoundError("Task not found.", details={"id": task_id})
        return updated

    def delete_task(self, task_id: str) -> None:
        self.tasks.delete(task_id)

    def toggle_task_status(self, task_id: str) -> Task:
        current = self.get_task(task_id)
        new_status = "done" if current.status == "todo" else "todo"
        return self.update_task(task_id, status=new_status)

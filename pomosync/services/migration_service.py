# -*- coding: utf-8 -*-

import logging
from typing import Dict, Optional

from pomosync.domain.models import SessionLog
from pomosync.errors import CloudError
from pomosync.services.settings_service import SettingsService
from pomosync.storage.cloud import CloudPreferencesRepo, CloudSessionRepo, CloudTaskRepo
from pomosync.storage.repos import SessionRepo, TaskRepo

logger = logging.getLogger(__name__)


class DataMigrationService:
    """
    Moves what was recorded while signed out into the user's cloud tables.
    Each part is independent: one failing does not stop the others.
    """

    def __init__(
        self,
        local_tasks: TaskRepo,
        local_sessions: SessionRepo,
        settings: SettingsService,
        cloud_tasks: CloudTaskRepo,
        cloud_sessions: CloudSessionRepo,
        cloud_preferences: CloudPreferencesRepo,
    ):
        self.local_tasks = local_tasks
        self.local_sessions = local_sessions
        self.settings = settings
        self.cloud_tasks = cloud_tasks
        self.cloud_sessions = cloud_sessions
        self.cloud_preferences = cloud_preferences
        # local task id -> cloud task id, from the last migration
        self.task_ids: Dict[str, str] = {}

    def migrate_local_data(self, user_id: str) -> Dict[str, bool]:
        # tasks go first so sessions can point at the new cloud ids
        task_ids: Dict[str, str] = {}
        self.task_ids = task_ids
        result = {
            "tasks": self._migrate_tasks(user_id, task_ids),
            "sessions": self._migrate_sessions(user_id, task_ids),
            "preferences": self._migrate_preferences(user_id),
        }
        if all(result.values()):
            logger.info("Data migration completed successfully")
        else:
            logger.warning("Data migration finished with failures: %s", result)
        return result

    def _migrate_tasks(self, user_id: str, task_ids: Dict[str, str]) -> bool:
        try:
            for task in reversed(self.local_tasks.list_unsynced()):
                created = self.cloud_tasks.create(
                    user_id=user_id,
                    title=task.title,
                    description=task.description,
                    status=task.status,
                    created_at=task.created_at,
                )
                task_ids[task.id] = created.id
                # uploaded tasks leave the local store one by one
                self.local_tasks.delete(task.id)
            return True
        except CloudError:
            logger.exception("Failed to migrate tasks")
            return False

    def _migrate_sessions(self, user_id: str, task_ids: Dict[str, str]) -> bool:
        try:
            for s in self.local_sessions.list_unsynced():
                self.cloud_sessions.add(
                    type=s.type,
                    started_at=s.started_at,
                    ended_at=s.ended_at,
                    task_id=task_ids.get(s.task_id) if s.task_id else None,
                    user_id=user_id,
                )
                # kept locally for stats, but owned by the user now
                self.local_sessions.claim(user_id, [s.id])
            return True
        except CloudError:
            logger.exception("Failed to migrate sessions")
            return False

    def _migrate_preferences(self, user_id: str) -> bool:
        try:
            # local settings are still needed by the app, so nothing is cleared
            self.cloud_preferences.upsert(user_id, self.settings.settings.to_dict())
            return True
        except CloudError:
            logger.exception("Failed to migrate preferences")
            return False

    def save_session_to_cloud(self, user_id: Optional[str], session: SessionLog) -> bool:
        if not user_id:
            return False
        try:
            self.cloud_sessions.add(
                type=session.type,
                started_at=session.started_at,
                ended_at=session.ended_at,
                task_id=session.task_id,
                user_id=user_id,
            )
            return True
        except CloudError:
            logger.exception("Failed to save session to cloud")
            return False

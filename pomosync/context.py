# -*- coding: utf-8 -*-

import logging
from typing import Optional

from pomosync.config import AppConfig
from pomosync.domain.models import SessionLog, User
from pomosync.services.auth_service import AuthService
from pomosync.services.diagnostics_service import DiagnosticsService
from pomosync.services.migration_service import DataMigrationService
from pomosync.services.notification_service import NotificationService
from pomosync.services.settings_service import SettingsService
from pomosync.services.stats_service import StatsService
from pomosync.services.task_service import TaskService
from pomosync.services.timer_service import TimerService
from pomosync.storage.cloud import (
    CloudPreferencesRepo,
    CloudSessionRepo,
    CloudTaskRepo,
    CloudUserRepo,
    create_client_from_config,
)
from pomosync.storage.db import Database
from pomosync.storage.repos import AppStateRepo, SessionRepo, TaskRepo

logger = logging.getLogger(__name__)


class AppContext:
    """
    Wires storage and services together and flips the task store between
    local and cloud as the user signs in and out.
    """

    def __init__(
        self,
        config: AppConfig,
        client=None,
        notifier: Optional[NotificationService] = None,
        clock=None,
    ):
        self.config = config
        self.db = Database(db_path=config.db_path)
        self.db.init_schema()

        self.state_repo = AppStateRepo(self.db)
        self.local_tasks = TaskRepo(self.db)
        self.local_sessions = SessionRepo(self.db)

        if client is None and config.cloud_enabled:
            client = create_client_from_config(config)
        self.client = client

        self.settings_service = SettingsService(self.state_repo)
        self.task_service = TaskService(self.local_tasks)
        self.stats_service = StatsService(self.db)
        self.timer_service = TimerService(
            self.state_repo,
            self.local_sessions,
            self.settings_service,
            notifier=notifier,
            clock=clock,
        )
        self.diagnostics = DiagnosticsService(self.db, client=client, clock=clock)

        self.auth_service: Optional[AuthService] = None
        self.migration: Optional[DataMigrationService] = None
        if client is not None:
            self.auth_service = AuthService(client, redirect_url=config.auth_redirect_url)
            self.migration = DataMigrationService(
                local_tasks=self.local_tasks,
                local_sessions=self.local_sessions,
                settings=self.settings_service,
                cloud_tasks=CloudTaskRepo(client),
                cloud_sessions=CloudSessionRepo(client),
                cloud_preferences=CloudPreferencesRepo(client),
            )
            self.auth_service.add_listener(self._on_auth_changed)
            self.timer_service.set_on_session_complete(self._push_session)

    @property
    def cloud_enabled(self) -> bool:
        return self.client is not None

    @property
    def user_id(self) -> Optional[str]:
        if self.auth_service and self.auth_service.current_user:
            return self.auth_service.current_user.id
        return None

    def _on_auth_changed(self, user: Optional[User]) -> None:
        if user is None:
            logger.info("Signed out; using local task store")
            self.task_service.use_store(self.local_tasks)
            self.timer_service.user_id = None
            return

        logger.info("Signed in as %s; using cloud task store", user.email or user.id)
        self.task_service.use_store(CloudTaskRepo(self.client), CloudUserRepo(self.client))
        self.timer_service.user_id = user.id
        self.migration.migrate_local_data(user.id)

        # a run started on an offline task keeps counting for its cloud copy
        active = self.timer_service.active_task_id
        if active in self.migration.task_ids:
            self.timer_service.set_active_task(self.migration.task_ids[active])

    def _push_session(self, session: SessionLog) -> None:
        if session.user_id:
            self.migration.save_session_to_cloud(session.user_id, session)

    def close(self) -> None:
        self.db.close()

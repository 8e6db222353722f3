#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import sqlite3

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, db_path: str = "pomosync.db"):
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON;")

    def _cols(self, table: str):
        return [
            r["name"]
            for r in self.conn.execute(f"PRAGMA table_info({table});").fetchall()
        ]

    def table_names(self):
        rows = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()
        return [r["name"] for r in rows]

    def init_schema(self):
        cur = self.conn.cursor()

        # local key-value store (timer state, settings, mute flag)
        cur.execute("""
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

        cur.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                title TEXT NOT NULL,
                description TEXT,
                status TEXT NOT NULL DEFAULT 'todo',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
        """)

        # tasks migrations (older files had no owner / description)
        cols = self._cols("tasks")
        if "user_id" not in cols:
            logger.info("Migrating tasks table: adding user_id")
            cur.execute("ALTER TABLE tasks ADD COLUMN user_id TEXT;")
        if "description" not in cols:
            logger.info("Migrating tasks table: adding description")
            cur.execute("ALTER TABLE tasks ADD COLUMN description TEXT;")

        cur.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                type TEXT NOT NULL,
                started_at TEXT NOT NULL,
                ended_at TEXT,
                task_id TEXT,
                created_at TEXT NOT NULL
            );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id);")
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_sessions_task ON sessions(task_id);"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_sessions_started ON sessions(started_at);"
        )

        self.conn.commit()

    def close(self):
        self.conn.close()

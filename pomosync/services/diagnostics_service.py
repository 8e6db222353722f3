# -*- coding: utf-8 -*-
"""Connectivity smoke tests for the local database and the Supabase project."""

import logging
import time
from typing import Callable, List, Optional

from pomosync.domain.models import DiagnosticResult
from pomosync.storage.db import Database

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("app_state", "sessions", "tasks")
TEST_PASSWORD = "testpassword123"


class DiagnosticsService:
    def __init__(self, db: Database, client=None, clock: Optional[Callable[[], float]] = None):
        self.db = db
        self.client = client
        self._clock = clock or time.time

    def _no_cloud(self, name: str) -> DiagnosticResult:
        return DiagnosticResult(
            name, False, "Supabase is not configured (SUPABASE_URL / SUPABASE_ANON_KEY)."
        )

    def check_local_db(self) -> DiagnosticResult:
        try:
            tables = self.db.table_names()
        except Exception as e:
            return DiagnosticResult("local_db", False, f"Local database error: {e}")
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        if missing:
            return DiagnosticResult(
                "local_db", False, f"Missing tables: {', '.join(missing)}", tables
            )
        return DiagnosticResult("local_db", True, f"Local database OK ({self.db.db_path})", tables)

    def check_connection(self) -> DiagnosticResult:
        if self.client is None:
            return self._no_cloud("connection")
        try:
            res = (
                self.client.table("pg_catalog.pg_tables")
                .select("tablename")
                .limit(5)
                .execute()
            )
        except Exception as e:
            return DiagnosticResult("connection", False, f"Connection failed: {e}")
        names = [row.get("tablename") for row in res.data or []]
        return DiagnosticResult("connection", True, "Database connection successful!", names)

    def check_table_access(self, table: str = "users") -> DiagnosticResult:
        if self.client is None:
            return self._no_cloud("table_access")
        try:
            self.client.table(table).select("count").limit(1).execute()
        except Exception as e:
            return DiagnosticResult("table_access", False, f"Table access failed: {e}")
        return DiagnosticResult(
            "table_access",
            True,
            f"Table access successful! {table} table exists and is accessible.",
        )

    def check_user_creation(self) -> DiagnosticResult:
        if self.client is None:
            return self._no_cloud("user_creation")
        email = f"test-{int(self._clock() * 1000)}@example.com"
        try:
            res = self.client.auth.sign_up({"email": email, "password": TEST_PASSWORD})
        except Exception as e:
            return DiagnosticResult("user_creation", False, f"User creation test failed: {e}")
        user = getattr(res, "user", None)
        return DiagnosticResult(
            "user_creation",
            True,
            "User creation test successful! Check if user was created in auth.users",
            {"email": email, "user_id": getattr(user, "id", None)},
        )

    def run_all(self, include_user_creation: bool = False) -> List[DiagnosticResult]:
        results = [
            self.check_local_db(),
            self.check_connection(),
            self.check_table_access(),
        ]
        if include_user_creation:
            results.append(self.check_user_creation())
        for r in results:
            logger.log(logging.INFO if r.ok else logging.WARNING, "%s: %s", r.name, r.message)
        return results

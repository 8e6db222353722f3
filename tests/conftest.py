"""Shared fixtures: temp SQLite store, controllable clock, in-memory Supabase."""

import copy
import uuid
from types import SimpleNamespace

import pytest

from pomosync.config import AppConfig
from pomosync.services.notification_service import NotificationService
from pomosync.services.settings_service import SettingsService
from pomosync.storage.db import Database
from pomosync.storage.repos import AppStateRepo, SessionRepo, TaskRepo

T0 = 1_760_000_000.0  # fixed epoch seconds


class FakeClock:
    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---- Supabase stand-in ----

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, backend, table):
        self.backend = backend
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self._order = None
        self._limit = None

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload):
        self.op, self.payload = "upsert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matches(self, row):
        return all(row.get(k) == v for k, v in self.filters)

    def execute(self):
        if self.table in self.backend.fail_tables:
            raise RuntimeError(f"relation {self.table} unavailable")
        rows = self.backend.tables.setdefault(self.table, [])

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            out = []
            for item in items:
                row = dict(item)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", "2025-01-01T00:00:00+00:00")
                rows.append(row)
                out.append(copy.deepcopy(row))
            return FakeResponse(out)

        if self.op == "upsert":
            key = "user_id" if self.table == "preferences" else "id"
            row = dict(self.payload)
            for i, existing in enumerate(rows):
                if existing.get(key) == row.get(key):
                    rows[i] = {**existing, **row}
                    return FakeResponse([copy.deepcopy(rows[i])])
            rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for r in matched:
                r.update(self.payload)
            return FakeResponse(copy.deepcopy(matched))

        if self.op == "delete":
            self.backend.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(copy.deepcopy(matched))

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResponse(copy.deepcopy(matched))


class FakeAuth:
    def __init__(self):
        self.accounts = {}
        self.session = None
        self.confirm_email = False
        self.oauth_calls = []
        # authorization codes the provider would hand back on redirect
        self.codes = {}
        self.fail = False

    def sign_up(self, credentials):
        if self.fail:
            raise RuntimeError("signups disabled")
        user = SimpleNamespace(id=str(uuid.uuid4()), email=credentials["email"])
        self.accounts[credentials["email"]] = (credentials["password"], user)
        if self.confirm_email:
            return SimpleNamespace(user=user, session=None)
        self.session = SimpleNamespace(user=user, access_token="token")
        return SimpleNamespace(user=user, session=self.session)

    def sign_in_with_password(self, credentials):
        entry = self.accounts.get(credentials["email"])
        if not entry or entry[0] != credentials["password"]:
            raise RuntimeError("Invalid login credentials")
        self.session = SimpleNamespace(user=entry[1], access_token="token")
        return SimpleNamespace(user=entry[1], session=self.session)

    def sign_in_with_oauth(self, credentials):
        self.oauth_calls.append(credentials)
        user = SimpleNamespace(id=str(uuid.uuid4()), email="octo@example.com")
        self.codes["github-code"] = user
        return SimpleNamespace(
            provider=credentials["provider"],
            url="https://demo.supabase.co/auth/v1/authorize?provider=github",
        )

    def exchange_code_for_session(self, params):
        user = self.codes.pop(params["auth_code"], None)
        if user is None:
            raise RuntimeError("invalid flow state, no valid flow state found")
        self.session = SimpleNamespace(user=user, access_token="token")
        return SimpleNamespace(user=user, session=self.session)

    def sign_out(self):
        self.session = None


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.fail_tables = set()
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)


# ---- fixtures ----

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db(tmp_path):
    database = Database(db_path=str(tmp_path / "pomosync.db"))
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def state_repo(db):
    return AppStateRepo(db)


@pytest.fixture
def task_repo(db):
    return TaskRepo(db)


@pytest.fixture
def session_repo(db):
    return SessionRepo(db)


@pytest.fixture
def settings_service(state_repo):
    return SettingsService(state_repo)


@pytest.fixture
def supabase_fake():
    return FakeSupabase()


class Recorder:
    def __init__(self):
        self.notifications = []
        self.bells = 0

    def send(self, title, body):
        self.notifications.append((title, body))

    def bell(self):
        self.bells += 1


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def notifier(recorder):
    return NotificationService(sender=recorder.send, bell=recorder.bell)


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        db_path=str(tmp_path / "app.db"),
        supabase_url="https://demo.supabase.co",
        supabase_anon_key="anon",
    )

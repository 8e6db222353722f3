import pytest

from pomosync.config import AppConfig
from pomosync.errors import CloudError
from pomosync.storage.cloud import (
    CloudPreferencesRepo,
    CloudSessionRepo,
    CloudTaskRepo,
    CloudUserRepo,
    create_client_from_config,
)


def test_client_requires_credentials(tmp_path):
    config = AppConfig(db_path=str(tmp_path / "x.db"))
    with pytest.raises(CloudError) as exc:
        create_client_from_config(config)
    assert exc.value.code == "CLOUD_DISABLED"


def test_sdk_errors_become_cloud_errors(supabase_fake):
    supabase_fake.fail_tables.add("tasks")
    with pytest.raises(CloudError) as exc:
        CloudTaskRepo(supabase_fake).list("user-1")
    assert "task list failed" in exc.value.message
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_user_upsert_and_exists(supabase_fake):
    users = CloudUserRepo(supabase_fake)
    assert users.exists("user-1") is False
    users.upsert("user-1", "a@example.com")
    users.upsert("user-1", "b@example.com")
    assert users.exists("user-1") is True
    assert len(supabase_fake.tables["users"]) == 1
    assert supabase_fake.tables["users"][0]["email"] == "b@example.com"


def test_task_update_missing_returns_none(supabase_fake):
    assert CloudTaskRepo(supabase_fake).update("nope", {"title": "x"}) is None


def test_task_update_ignores_unknown_fields(supabase_fake):
    repo = CloudTaskRepo(supabase_fake)
    task = repo.create("user-1", "Title")
    updated = repo.update(task.id, {"title": "New", "user_id": "intruder"})
    assert updated.title == "New"
    assert updated.user_id == "user-1"


def test_task_create_keeps_created_at(supabase_fake):
    task = CloudTaskRepo(supabase_fake).create(
        "user-1", "Old", created_at="2024-05-01T10:00:00+00:00"
    )
    assert task.created_at == "2024-05-01T10:00:00+00:00"


def test_session_add(supabase_fake):
    log = CloudSessionRepo(supabase_fake).add(
        type="work",
        started_at="2025-01-01T09:00:00+00:00",
        ended_at="2025-01-01T09:25:00+00:00",
        task_id="task-1",
        user_id="user-1",
    )
    assert log.type == "work"
    assert log.user_id == "user-1"
    assert supabase_fake.tables["sessions"][0]["task_id"] == "task-1"


def test_preferences_last_write_wins(supabase_fake):
    prefs = CloudPreferencesRepo(supabase_fake)
    prefs.upsert("user-1", {"theme": "dark"})
    prefs.upsert("user-1", {"theme": "light"})
    assert supabase_fake.tables["preferences"][0]["settings"] == {"theme": "light"}
    assert len(supabase_fake.tables["preferences"]) == 1


def test_client_uses_pkce_flow(monkeypatch, config):
    calls = []
    monkeypatch.setattr(
        "pomosync.storage.cloud.create_client",
        lambda url, key, options=None: calls.append((url, key, options)) or "client",
    )
    assert create_client_from_config(config) == "client"
    url, key, options = calls[0]
    assert (url, key) == ("https://demo.supabase.co", "anon")
    assert options.flow_type == "pkce"

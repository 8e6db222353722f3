from pomosync.core.clock import iso_from_ts
from pomosync.services.stats_service import StatsService, _start_of_today_ts


def add(session_repo, type_, start, minutes, task_id=None):
    session_repo.add(type_, iso_from_ts(start), iso_from_ts(start + minutes * 60), task_id=task_id)


def test_today_totals_count_only_work(db, session_repo):
    today = _start_of_today_ts() + 1
    add(session_repo, "work", today, 25, task_id="t1")
    add(session_repo, "short_break", today + 1500, 5)
    add(session_repo, "work", today + 1800, 25, task_id="t2")
    # yesterday
    add(session_repo, "work", today - 86400, 25, task_id="t1")

    stats = StatsService(db)
    assert stats.completed_work_sessions_today() == 2
    assert stats.total_today_work_sec() == 50 * 60
    assert stats.total_task_work_sec("t1") == 50 * 60
    assert stats.total_task_work_sec("t1", since_ts=today) == 25 * 60


def test_db_info(db, task_repo, session_repo):
    task_repo.create(None, "One")
    add(session_repo, "work", _start_of_today_ts() + 1, 25)
    info = StatsService(db).get_db_info()
    assert info["tasks_count"] == 1
    assert info["sessions_count"] == 1
    assert info["db_path"] == db.db_path

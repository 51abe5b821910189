from datetime import timedelta
import pytest
from quiz_api.core.config import settings
from quiz_api.core.errors import StoreError
from quiz_api.jobs import queue as queue_module
from quiz_api.jobs import session_sweep
from quiz_api.jobs.session_sweep import purge_expired_sessions
from quiz_api.models.orm import LoginSession
from quiz_api.services.sessions import authenticate, issue_session, revoke_session, utcnow

def test_purge_removes_only_stale_sessions(db, make_user):
    user = make_user()
    now = utcnow()
    long_expired = LoginSession(user_id=user.id, active=True, expires_at=now - timedelta(days=40))
    recently_expired = LoginSession(user_id=user.id, active=True, expires_at=now - timedelta(days=1))
    db.add_all([long_expired, recently_expired]); db.commit()
    live = issue_session(db, "ana@quiz.dev", "right")

    result = purge_expired_sessions(retention_days=30, now=now, db=db)

    assert result["deleted"] == 1
    remaining = {s.id for s in db.query(LoginSession)}
    assert remaining == {recently_expired.id, live.id}
    assert authenticate(db, str(live.id)) == user.id

def test_purge_removes_old_revoked_sessions(db, make_user):
    user = make_user()
    revoked = issue_session(db, "ana@quiz.dev", "right")
    revoke_session(db, str(revoked.id))
    kept = LoginSession(user_id=user.id, active=True, expires_at=utcnow() + timedelta(days=365))
    db.add(kept); db.commit()

    result = purge_expired_sessions(retention_days=30, now=utcnow() + timedelta(days=31), db=db)

    assert result["deleted"] == 1
    assert [s.id for s in db.query(LoginSession)] == [kept.id]

class FakeJob:
    def __init__(self):
        self.meta = {}
        self.saved = []

    def save_meta(self):
        self.saved.append(dict(self.meta))

class FakeQueue:
    def __init__(self):
        self.scheduled = []

    def enqueue_in(self, delay, func, *args, **kwargs):
        self.scheduled.append((delay, func))

@pytest.fixture
def rq_job(monkeypatch):
    job, queue = FakeJob(), FakeQueue()
    monkeypatch.setattr(session_sweep, "get_current_job", lambda: job)
    monkeypatch.setattr(queue_module, "queue", queue)
    return job, queue

def test_sweep_under_rq_records_state_and_reschedules(db, make_user, rq_job):
    job, queue = rq_job
    user = make_user()
    db.add(LoginSession(user_id=user.id, active=True, expires_at=utcnow() - timedelta(days=40))); db.commit()

    result = purge_expired_sessions(retention_days=30, db=db)

    assert [m["state"] for m in job.saved] == ["running", "done"]
    assert job.meta["deleted"] == result["deleted"] == 1
    assert job.meta["cutoff"] == result["cutoff"]
    assert queue.scheduled == [(timedelta(seconds=settings.SESSION_SWEEP_INTERVAL_SECONDS), purge_expired_sessions)]

def test_failed_sweep_marks_job_and_does_not_reschedule(db, rq_job, monkeypatch):
    job, queue = rq_job

    def broken(_db, _cutoff):
        raise StoreError()

    monkeypatch.setattr(session_sweep, "_purge", broken)
    with pytest.raises(StoreError):
        purge_expired_sessions(db=db)
    assert [m["state"] for m in job.saved] == ["running", "failed"]
    assert queue.scheduled == []

def test_sweep_outside_rq_does_not_reschedule(db, monkeypatch):
    queue = FakeQueue()
    monkeypatch.setattr(session_sweep, "get_current_job", lambda: None)
    monkeypatch.setattr(queue_module, "queue", queue)
    assert purge_expired_sessions(db=db)["deleted"] == 0
    assert queue.scheduled == []

"""
Storage hygiene for the sessions table.

Only rows that authentication already rejects are removed: sessions that
expired, or were revoked, more than the retention window ago. Removing them
does not change what any token check returns.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from rq import get_current_job
from sqlalchemy import and_, delete, or_
from sqlalchemy.orm import Session
from quiz_api.core.config import settings
from quiz_api.core.database import SessionLocal, atomic
from quiz_api.models.orm import LoginSession, utcnow

logger = logging.getLogger(__name__)

def _purge(db: Session, cutoff: datetime) -> int:
    stmt = delete(LoginSession).where(or_(
        LoginSession.expires_at < cutoff,
        and_(LoginSession.active.is_(False), LoginSession.updated_at < cutoff),
    ))
    with atomic(db):
        deleted = db.execute(stmt, execution_options={"synchronize_session": False}).rowcount
    return deleted

def purge_expired_sessions(retention_days: Optional[int] = None, now: Optional[datetime] = None,
                           db: Optional[Session] = None) -> dict:
    job = get_current_job()
    if job:
        job.meta.update({"state": "running"}); job.save_meta()
    retention = settings.SESSION_RETENTION_DAYS if retention_days is None else retention_days
    cutoff = (now or utcnow()) - timedelta(days=retention)
    own = db is None
    db = db or SessionLocal()
    try:
        deleted = _purge(db, cutoff)
    except Exception:
        if job:
            job.meta.update({"state": "failed"}); job.save_meta()
        raise
    finally:
        if own: db.close()
    logger.info("Purged %d stale session(s) older than %s", deleted, cutoff.isoformat())
    result = {"deleted": deleted, "cutoff": cutoff.isoformat()}
    if job:
        job.meta.update({"state": "done", **result}); job.save_meta()
        schedule_next_sweep()
    return result

def schedule_next_sweep():
    from quiz_api.jobs.queue import queue
    return queue.enqueue_in(timedelta(seconds=settings.SESSION_SWEEP_INTERVAL_SECONDS), purge_expired_sessions)

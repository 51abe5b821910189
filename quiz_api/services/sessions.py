"""
Session authority: issues, validates and revokes login sessions.

A session is usable while `active` is true and `expires_at` lies strictly in
the future. Expiry is evaluated lazily on every check; nothing flips a stored
flag when a session expires.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from quiz_api.core.config import settings
from quiz_api.core.database import atomic, store_errors
from quiz_api.core.errors import InvalidCredentials, InvalidSession, Unauthenticated
from quiz_api.core.security import verify_against_dummy, verify_password
from quiz_api.models.orm import LoginSession, User, utcnow

logger = logging.getLogger(__name__)

def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes for tz-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

def is_usable(session: LoginSession, now: datetime) -> bool:
    return bool(session.active) and as_utc(session.expires_at) > now

def _session_id(token: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(token))
    except ValueError:
        return None

def _lookup(db: Session, token: str) -> Optional[LoginSession]:
    session_id = _session_id(token)
    return db.get(LoginSession, session_id) if session_id else None

def issue_session(db: Session, email: str, password: str, now: Optional[datetime] = None) -> LoginSession:
    """Log a user in and return the new session; its id is the bearer token."""
    now = now or utcnow()
    with atomic(db):
        user = db.scalar(select(User).where(User.email == email))
        # Unknown emails still pay for one hash check.
        valid = verify_password(password, user.hash_password) if user else verify_against_dummy(password)
        if not valid:
            logger.info("Rejected login attempt")
            raise InvalidCredentials()
        session = LoginSession(user_id=user.id, active=True, expires_at=now + timedelta(days=settings.SESSION_TTL_DAYS))
        db.add(session)
    db.refresh(session)
    logger.info("Issued session for user %s", session.user_id)
    return session

def load_session(db: Session, token: Optional[str], now: Optional[datetime] = None) -> LoginSession:
    """Single read-then-decide check run before every protected operation."""
    if not token:
        raise Unauthenticated()
    now = now or utcnow()
    with store_errors(db):
        session = _lookup(db, token)
    # Unknown, revoked and expired collapse into one error on purpose.
    if session is None or not is_usable(session, now):
        raise InvalidSession()
    return session

def authenticate(db: Session, token: Optional[str], now: Optional[datetime] = None) -> uuid.UUID:
    """Return the owning user id of a usable session."""
    return load_session(db, token, now).user_id

def revoke_session(db: Session, token: str) -> None:
    """Deactivate the session. Revoking an inactive session is a no-op."""
    with atomic(db):
        session = _lookup(db, token)
        if session is None:
            raise InvalidSession()
        if session.active:
            session.active = False
            logger.info("Revoked session for user %s", session.user_id)

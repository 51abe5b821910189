import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from quiz_api.core.config import settings
from quiz_api.core.errors import ConflictError, QuizAPIError, StoreError

logger = logging.getLogger(__name__)

def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url

def build_engine(url: str):
    # Bound parameters can carry session tokens; keep them out of logs and errors.
    if url.startswith("sqlite"):
        extra = {"poolclass": StaticPool} if _is_memory_sqlite(url) else {}
        engine = create_engine(url, future=True, echo=settings.DATABASE_ECHO, hide_parameters=True,
                               connect_args={"check_same_thread": False, "timeout": 30}, **extra)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return engine
    return create_engine(url, future=True, echo=settings.DATABASE_ECHO, hide_parameters=True,
                         pool_size=settings.DATABASE_POOL_SIZE, pool_pre_ping=True)

engine = build_engine(settings.database_url())
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db() -> None:
    """Create missing tables. Migrations are managed outside the app."""
    from quiz_api.models.orm import Base
    Base.metadata.create_all(bind=engine)

def ping_db(db: Session) -> None:
    db.execute(text("SELECT 1"))

@contextmanager
def store_errors(db: Session) -> Iterator[Session]:
    """Map driver failures on read paths to StoreError."""
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database error: %s", exc, exc_info=True)
        raise StoreError() from exc

@contextmanager
def atomic(db: Session, conflict: Optional[str] = None) -> Iterator[Session]:
    """Run the block as one transaction.

    Commits on success. Any failure rolls the whole transaction back; an
    IntegrityError becomes ConflictError when `conflict` names the constraint
    the block may violate, every other SQLAlchemy error becomes StoreError.
    """
    try:
        yield db
        db.commit()
    except QuizAPIError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if conflict:
            raise ConflictError(conflict) from exc
        logger.error("Integrity error: %s", exc.orig)
        raise StoreError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database error: %s", exc, exc_info=True)
        raise StoreError() from exc

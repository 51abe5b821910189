import os
import threading
from concurrent.futures import ThreadPoolExecutor
import pytest
from sqlalchemy import event, select
from sqlalchemy.orm import sessionmaker
from quiz_api.core.database import build_engine
from quiz_api.models.orm import Base, Question, QuestionLevel, QuestionOption, QuestionType, Subject
from quiz_api.services.options import set_option

WRITERS = 6

@pytest.fixture
def shared_store(tmp_path):
    # Every writer needs its own connection, so the in-memory test engine will not do.
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'quiz.db'}"
    engine = build_engine(url)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, future=True)
    yield Session
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

def _seed(Session, n_options):
    with Session() as db:
        subject = Subject(name="Concurrency")
        db.add(subject); db.flush()
        q = Question(subject_id=subject.id, statement="Who wins?", type=QuestionType.MULTIPLE_CHOICE, level=QuestionLevel.HARD)
        db.add(q); db.flush()
        options = [QuestionOption(question_id=q.id, option_text=f"option {i}", is_correct=False) for i in range(n_options)]
        db.add_all(options); db.commit()
        return q.id, [o.id for o in options]

def _race(Session, writes):
    """Run each write in its own thread and session; return labels in commit order."""
    barrier = threading.Barrier(len(writes))
    committed = []

    def run(label, write):
        with Session() as db:
            # fires after the flush, while this writer holds the write lock
            event.listen(db, "before_commit", lambda _s: committed.append(label))
            barrier.wait()
            write(db)

    with ThreadPoolExecutor(max_workers=len(writes)) as pool:
        futures = [pool.submit(run, label, write) for label, write in writes]
        for f in futures:
            f.result()
    return committed

def _correct(Session, question_id):
    with Session() as db:
        stmt = select(QuestionOption).where(QuestionOption.question_id == question_id, QuestionOption.is_correct.is_(True))
        return list(db.scalars(stmt))

def test_concurrent_updates_leave_last_committed_option_correct(shared_store):
    qid, option_ids = _seed(shared_store, WRITERS)
    writes = [(oid, lambda db, oid=oid: set_option(db, qid, oid, is_correct=True)) for oid in option_ids]

    committed = _race(shared_store, writes)

    assert sorted(committed) == sorted(option_ids)
    correct = _correct(shared_store, qid)
    assert [o.id for o in correct] == [committed[-1]]

def test_concurrent_creates_leave_last_committed_option_correct(shared_store):
    qid, _ = _seed(shared_store, 1)
    labels = [f"new {i}" for i in range(WRITERS)]
    writes = [(label, lambda db, label=label: set_option(db, qid, text=label, is_correct=True)) for label in labels]

    committed = _race(shared_store, writes)

    assert sorted(committed) == sorted(labels)
    correct = _correct(shared_store, qid)
    assert [o.option_text for o in correct] == [committed[-1]]
    with shared_store() as db:
        assert db.query(QuestionOption).filter_by(question_id=qid).count() == WRITERS + 1

"""
Question options with at most one correct option per question.

`set_option` covers both create and update. Marking an option correct clears
the marker on every sibling inside the same transaction, after taking a row
lock on the parent question, so concurrent writers on one question serialize
and the last one to commit decides the correct option.
"""
import logging
import uuid
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from quiz_api.core.database import atomic, store_errors
from quiz_api.core.errors import NotFoundError, ValidationError
from quiz_api.models.orm import Question, QuestionOption

logger = logging.getLogger(__name__)

def _lock_question(db: Session, question_id: uuid.UUID) -> Question:
    # FOR UPDATE is dropped by dialects without row locks (sqlite).
    question = db.scalar(select(Question).where(Question.id == question_id).with_for_update())
    if question is None:
        raise NotFoundError("Question")
    return question

def _owned_option(db: Session, question_id: uuid.UUID, option_id: uuid.UUID) -> QuestionOption:
    option = db.get(QuestionOption, option_id)
    if option is None or option.question_id != question_id:
        raise NotFoundError("Option")
    return option

def _clear_correct(db: Session, question_id: uuid.UUID, keep: Optional[uuid.UUID] = None) -> int:
    stmt = update(QuestionOption).where(QuestionOption.question_id == question_id, QuestionOption.is_correct.is_(True))
    if keep is not None:
        stmt = stmt.where(QuestionOption.id != keep)
    return db.execute(stmt.values(is_correct=False)).rowcount

def set_option(db: Session, question_id: uuid.UUID, option_id: Optional[uuid.UUID] = None,
               text: Optional[str] = None, is_correct: Optional[bool] = None) -> QuestionOption:
    """Create (no `option_id`) or update an option and return the stored row."""
    if text is not None and not text.strip():
        raise ValidationError("option_text", "Option text must not be empty")
    if option_id is None and text is None:
        raise ValidationError("option_text", "Option text is required")
    with atomic(db):
        _lock_question(db, question_id)
        option = _owned_option(db, question_id, option_id) if option_id is not None else None
        if is_correct:
            cleared = _clear_correct(db, question_id, keep=option_id)
            if cleared:
                logger.info("Cleared %d correct option(s) on question %s", cleared, question_id)
        if option is None:
            option = QuestionOption(question_id=question_id, option_text=text, is_correct=bool(is_correct))
            db.add(option)
        else:
            if text is not None:
                option.option_text = text
            if is_correct is not None:
                option.is_correct = is_correct
        db.flush()
    db.refresh(option)
    return option

def list_options(db: Session, question_id: uuid.UUID) -> List[QuestionOption]:
    with store_errors(db):
        if db.get(Question, question_id) is None:
            raise NotFoundError("Question")
        stmt = select(QuestionOption).where(QuestionOption.question_id == question_id).order_by(QuestionOption.created_at, QuestionOption.id)
        return list(db.scalars(stmt))

def delete_option(db: Session, question_id: uuid.UUID, option_id: uuid.UUID) -> None:
    """Plain delete; removing the correct option leaves none marked, which is allowed."""
    with atomic(db):
        _lock_question(db, question_id)
        db.delete(_owned_option(db, question_id, option_id))

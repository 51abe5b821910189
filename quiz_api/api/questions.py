import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, constr
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from quiz_api.core.auth import get_current_user
from quiz_api.core.database import atomic, get_db, store_errors
from quiz_api.core.errors import NotFoundError
from quiz_api.models.orm import Question, QuestionLevel, QuestionType, Subject

router = APIRouter(dependencies=[Depends(get_current_user)])

class QuestionCreate(BaseModel):
    subject_id: uuid.UUID
    statement: constr(min_length=1)
    type: QuestionType
    answer: Optional[str] = None
    level: QuestionLevel

class SubjectRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    name: str

class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    statement: str
    type: QuestionType
    answer: Optional[str]
    level: QuestionLevel
    subject: SubjectRef
    created_at: datetime
    updated_at: datetime

def _with_subject():
    return select(Question).options(selectinload(Question.subject))

@router.post("", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def create_question(payload: QuestionCreate, db: Session = Depends(get_db)):
    with atomic(db):
        if not db.get(Subject, payload.subject_id): raise NotFoundError("Subject")
        q = Question(**payload.model_dump())
        db.add(q); db.flush()
    db.refresh(q)
    return q

@router.get("", response_model=List[QuestionOut])
def list_questions(subject_id: Optional[uuid.UUID] = None, level: Optional[QuestionLevel] = None, db: Session = Depends(get_db)):
    stmt = _with_subject()
    if subject_id: stmt = stmt.where(Question.subject_id == subject_id)
    if level: stmt = stmt.where(Question.level == level)
    with store_errors(db):
        return list(db.scalars(stmt.order_by(Question.created_at, Question.id)))

@router.get("/{question_id}", response_model=QuestionOut)
def get_question(question_id: uuid.UUID, db: Session = Depends(get_db)):
    with store_errors(db):
        q = db.scalar(_with_subject().where(Question.id == question_id))
    if not q: raise NotFoundError("Question")
    return q

@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(question_id: uuid.UUID, db: Session = Depends(get_db)):
    with atomic(db):
        q = db.get(Question, question_id)
        if not q: raise NotFoundError("Question")
        db.delete(q)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, constr
from sqlalchemy import select
from sqlalchemy.orm import Session
from quiz_api.core.auth import get_current_user
from quiz_api.core.database import atomic, get_db, store_errors
from quiz_api.core.errors import ConflictError, NotFoundError, ValidationError
from quiz_api.models.orm import Subject

router = APIRouter(dependencies=[Depends(get_current_user)])

class SubjectIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=150)

class SubjectUpdate(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=150)] = None

class SubjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime

def _get_subject(db: Session, subject_id: uuid.UUID) -> Subject:
    subject = db.get(Subject, subject_id)
    if not subject: raise NotFoundError("Subject")
    return subject

def _name_taken(db: Session, name: str, exclude: Optional[uuid.UUID] = None) -> bool:
    stmt = select(Subject.id).where(Subject.name == name)
    if exclude: stmt = stmt.where(Subject.id != exclude)
    return db.scalar(stmt) is not None

@router.post("", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectIn, db: Session = Depends(get_db)):
    with atomic(db, conflict="Subject"):
        if _name_taken(db, payload.name): raise ConflictError("Subject")
        subject = Subject(name=payload.name)
        db.add(subject); db.flush()
    db.refresh(subject)
    return subject

@router.get("", response_model=List[SubjectOut])
def list_subjects(db: Session = Depends(get_db)):
    with store_errors(db):
        return list(db.scalars(select(Subject).order_by(Subject.name)))

@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)):
    with store_errors(db):
        return _get_subject(db, subject_id)

@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(subject_id: uuid.UUID, payload: SubjectUpdate, db: Session = Depends(get_db)):
    if payload.name is None: raise ValidationError("body", "No fields provided for update")
    with atomic(db, conflict="Subject"):
        subject = _get_subject(db, subject_id)
        if _name_taken(db, payload.name, exclude=subject.id): raise ConflictError("Subject")
        subject.name = payload.name
    db.refresh(subject)
    return subject

@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)):
    with atomic(db):
        db.delete(_get_subject(db, subject_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

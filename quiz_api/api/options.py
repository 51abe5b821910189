import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, constr
from sqlalchemy.orm import Session
from quiz_api.core.auth import get_current_user
from quiz_api.core.database import get_db
from quiz_api.core.errors import ValidationError
from quiz_api.services.options import delete_option, list_options, set_option

router = APIRouter(dependencies=[Depends(get_current_user)])

class OptionCreate(BaseModel):
    option_text: constr(min_length=1)
    is_correct: bool

class OptionUpdate(BaseModel):
    option_text: Optional[constr(min_length=1)] = None
    is_correct: Optional[bool] = None

class OptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    question_id: uuid.UUID
    option_text: str
    is_correct: bool
    created_at: datetime
    updated_at: datetime

@router.post("/{question_id}/options", response_model=OptionOut, status_code=status.HTTP_201_CREATED)
def create_option(question_id: uuid.UUID, payload: OptionCreate, db: Session = Depends(get_db)):
    return set_option(db, question_id, text=payload.option_text, is_correct=payload.is_correct)

@router.get("/{question_id}/options", response_model=List[OptionOut])
def get_options(question_id: uuid.UUID, db: Session = Depends(get_db)):
    return list_options(db, question_id)

@router.put("/{question_id}/options/{option_id}", response_model=OptionOut)
def update_option(question_id: uuid.UUID, option_id: uuid.UUID, payload: OptionUpdate, db: Session = Depends(get_db)):
    if payload.option_text is None and payload.is_correct is None:
        raise ValidationError("body", "No fields provided for update")
    return set_option(db, question_id, option_id, text=payload.option_text, is_correct=payload.is_correct)

@router.delete("/{question_id}/options/{option_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_option(question_id: uuid.UUID, option_id: uuid.UUID, db: Session = Depends(get_db)):
    delete_option(db, question_id, option_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

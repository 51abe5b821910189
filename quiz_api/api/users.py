import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, constr
from sqlalchemy import select
from sqlalchemy.orm import Session
from quiz_api.core.auth import get_current_user
from quiz_api.core.database import atomic, get_db, store_errors
from quiz_api.core.errors import ConflictError, NotFoundError, ValidationError
from quiz_api.core.security import hash_password
from quiz_api.models.orm import User

router = APIRouter()

class UserCreate(BaseModel):
    name: constr(min_length=1, max_length=150)
    email: EmailStr
    password: constr(min_length=1)

class UserUpdate(BaseModel):
    name: Optional[constr(min_length=1, max_length=150)] = None
    email: Optional[EmailStr] = None
    password: Optional[constr(min_length=1)] = None

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

def _get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if not user: raise NotFoundError("User")
    return user

def _email_taken(db: Session, email: str, exclude: Optional[uuid.UUID] = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude: stmt = stmt.where(User.id != exclude)
    return db.scalar(stmt) is not None

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    with atomic(db, conflict="Email"):
        if _email_taken(db, payload.email): raise ConflictError("Email")
        user = User(name=payload.name, email=payload.email, hash_password=hash_password(payload.password))
        db.add(user); db.flush()
    db.refresh(user)
    return user

@router.get("", response_model=List[UserOut], dependencies=[Depends(get_current_user)])
def list_users(db: Session = Depends(get_db)):
    with store_errors(db):
        return list(db.scalars(select(User).order_by(User.created_at, User.email)))

@router.get("/{user_id}", response_model=UserOut, dependencies=[Depends(get_current_user)])
def get_user(user_id: uuid.UUID, db: Session = Depends(get_db)):
    with store_errors(db):
        return _get_user(db, user_id)

@router.put("/{user_id}", response_model=UserOut, dependencies=[Depends(get_current_user)])
def update_user(user_id: uuid.UUID, payload: UserUpdate, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude_none=True)
    if not data: raise ValidationError("body", "Provide at least one of: name, email, password")
    with atomic(db, conflict="Email"):
        user = _get_user(db, user_id)
        if "email" in data and _email_taken(db, data["email"], exclude=user.id): raise ConflictError("Email")
        if "password" in data: user.hash_password = hash_password(data.pop("password"))
        for k, v in data.items(): setattr(user, k, v)
    db.refresh(user)
    return user

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(get_current_user)])
def delete_user(user_id: uuid.UUID, db: Session = Depends(get_db)):
    with atomic(db):
        db.delete(_get_user(db, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

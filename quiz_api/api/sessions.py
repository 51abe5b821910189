import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, constr
from sqlalchemy.orm import Session
from quiz_api.core.auth import CurrentUser, get_current_user
from quiz_api.core.config import settings
from quiz_api.core.database import get_db
from quiz_api.services.sessions import issue_session, revoke_session

router = APIRouter()

class Credentials(BaseModel):
    email: EmailStr
    password: constr(min_length=1)

class SessionOut(BaseModel):
    session_id: uuid.UUID
    expires_at: datetime

@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def login(payload: Credentials, response: Response, db: Session = Depends(get_db)):
    session = issue_session(db, payload.email, payload.password)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME, str(session.id),
        max_age=settings.SESSION_TTL_DAYS * 86400, path="/",
        httponly=True, secure=settings.is_production(), samesite="strict",
    )
    return SessionOut(session_id=session.id, expires_at=session.expires_at)

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    revoke_session(db, str(user.session_id))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response

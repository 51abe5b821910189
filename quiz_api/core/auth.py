import uuid
from typing import Optional
from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session
from quiz_api.core.config import settings
from quiz_api.core.database import get_db
from quiz_api.services.sessions import load_session

class CurrentUser(BaseModel):
    user_id: uuid.UUID
    session_id: uuid.UUID

cookie_scheme = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)
bearer = HTTPBearer(auto_error=False)

def get_session_token(cookie: Optional[str] = Depends(cookie_scheme),
                      creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Optional[str]:
    """The session token travels as a cookie or as a bearer header."""
    if cookie:
        return cookie
    return creds.credentials if creds else None

def get_current_user(token: Optional[str] = Depends(get_session_token), db: Session = Depends(get_db)) -> CurrentUser:
    session = load_session(db, token)
    return CurrentUser(user_id=session.user_id, session_id=session.id)

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import QuizAppError
from app.core.security import parse_bearer_header
from app.services.admin_auth import AdminAuthService
from app.services.responder_auth import ResponderClaims, SessionAuthenticator


def as_http_exception(error: QuizAppError) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(status_code=error.status_code, detail=error.message, headers=headers)


def get_current_admin_id(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> int:
    """Organizer ID from an admin bearer token"""
    try:
        token = parse_bearer_header(authorization or "")
        return AdminAuthService(db).verify(token)
    except QuizAppError as e:
        raise as_http_exception(e)


def get_responder_claims(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> ResponderClaims:
    """Credential and quiz a responder bearer token is bound to"""
    try:
        token = parse_bearer_header(authorization or "")
        return SessionAuthenticator(db).authenticate(token)
    except QuizAppError as e:
        raise as_http_exception(e)

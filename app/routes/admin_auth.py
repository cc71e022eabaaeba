import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import QuizAppError
from app.routes.dependencies import as_http_exception
from app.schemas.auth import AdminLoginRequest, AdminToken
from app.services.admin_auth import AdminAuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"], prefix="/admin")


@router.post("/login", response_model=AdminToken, status_code=status.HTTP_200_OK)
def admin_login(request: AdminLoginRequest, db: Session = Depends(get_db)):
    """Organizer login"""
    try:
        return AdminToken(token=AdminAuthService(db).login(request.username, request.password))
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception("Admin login failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

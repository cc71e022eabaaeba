import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import QuizAppError
from app.routes.dependencies import as_http_exception, get_current_admin_id
from app.schemas.credential import CredentialIssued, CredentialIssueRequest, CredentialView
from app.services.credential import CredentialService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["credentials"], prefix="/admin")


@router.post(
    "/quizzes/{quiz_id}/credentials",
    response_model=CredentialIssued,
    status_code=status.HTTP_201_CREATED,
)
def issue_credential(
    quiz_id: int,
    request: Optional[CredentialIssueRequest] = Body(None),
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """
    Issue (or rotate) the single respondent credential of a quiz

    The plaintext password appears in this response only and cannot be retrieved later.
    """
    request = request or CredentialIssueRequest()
    try:
        return CredentialService(db).issue(
            quiz_id, admin_id, request.username, request.expiry_hours
        )
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception(f"Failed to issue credential for quiz {quiz_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save credential",
        )


@router.get("/quizzes/{quiz_id}/credentials", response_model=List[CredentialView])
def list_credentials(
    quiz_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    try:
        return CredentialService(db).list_for_quiz(quiz_id, admin_id)
    except QuizAppError as e:
        raise as_http_exception(e)


@router.delete("/credentials/{credential_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_credential(
    credential_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    try:
        CredentialService(db).revoke(credential_id, admin_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception(f"Failed to revoke credential {credential_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete credential",
        )

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import QuizAppError
from app.routes.dependencies import as_http_exception, get_current_admin_id
from app.schemas.review import ResponseDetail, ResponseSummary
from app.services.review import ResponseReviewService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["responses"], prefix="/admin")


@router.get("/quizzes/{quiz_id}/responses", response_model=List[ResponseSummary])
def list_responses(
    quiz_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """All submitted responses of a quiz, newest first"""
    try:
        return ResponseReviewService(db).list_responses(quiz_id, admin_id)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception(f"Failed to list responses for quiz {quiz_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load responses",
        )


@router.get("/responses/{response_id}", response_model=ResponseDetail)
def get_response_detail(
    response_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """
    One response with every answer as the respondent saw it

    Question and choice text come from the snapshot taken at submission, so
    later edits to the quiz do not change what is shown here.
    """
    try:
        return ResponseReviewService(db).get_response_detail(response_id, admin_id)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception(f"Failed to load response {response_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load response",
        )

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import Deadline, get_db
from app.core.exceptions import QuizAppError
from app.routes.dependencies import as_http_exception, get_responder_claims
from app.schemas.responder import (
    QuizSubmission,
    RespondentQuiz,
    ResponderLoginRequest,
    SubmissionResult,
    TokenResponse,
)
from app.services.delivery import QuizDeliveryProjector
from app.services.responder_auth import (
    ResponderClaims,
    ResponderLoginService,
    SessionAuthenticator,
)
from app.services.submission import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["responder"])


@router.post(
    "/responder/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
)
def responder_login(request: ResponderLoginRequest, db: Session = Depends(get_db)):
    """
    Exchange a one-time quiz credential for a responder token

    401 for unknown username or wrong password, 403 if the credential is used or expired.
    """
    try:
        token = ResponderLoginService(db).login(request.username, request.password)
        return TokenResponse(token=token)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception("Responder login failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get(
    "/quizzes/{quiz_id}",
    response_model=RespondentQuiz,
    status_code=status.HTTP_200_OK,
)
def get_quiz_for_responder(
    quiz_id: int,
    claims: ResponderClaims = Depends(get_responder_claims),
    db: Session = Depends(get_db),
):
    """Quiz content for the bound respondent, without correctness information"""
    try:
        SessionAuthenticator.ensure_quiz(claims, quiz_id)
        return QuizDeliveryProjector(db).project(quiz_id)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception(f"Failed to deliver quiz {quiz_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.post(
    "/quizzes/{quiz_id}/submit",
    response_model=SubmissionResult,
    status_code=status.HTTP_200_OK,
)
def submit_quiz(
    quiz_id: int,
    submission: QuizSubmission,
    claims: ResponderClaims = Depends(get_responder_claims),
    db: Session = Depends(get_db),
):
    """
    Grade and archive the respondent's answers; the credential is consumed

    Returns the score together with the correct choice IDs per question.
    """
    try:
        deadline = Deadline(settings.REQUEST_TIMEOUT_SECONDS)
        return SubmissionService(db).submit(claims, quiz_id, submission, deadline)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        logger.exception(f"Failed to save submission for quiz {quiz_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save quiz submission",
        )

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import QuizAppError
from app.routes.dependencies import as_http_exception, get_current_admin_id
from app.schemas.quiz import (
    QuestionCreate,
    QuestionOut,
    QuestionUpdate,
    QuizCreate,
    QuizOut,
    QuizSummary,
    QuizUpdate,
)
from app.services.quiz import QuizService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-quiz"], prefix="/admin")


def _internal_error(action: str) -> HTTPException:
    logger.exception(f"Failed to {action}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


@router.post("/quizzes", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
def create_quiz(
    request: QuizCreate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """Create a quiz, optionally with its questions and choices"""
    try:
        return QuizService(db).create_quiz(admin_id, request)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        raise _internal_error("create quiz")


@router.get("/quizzes", response_model=List[QuizSummary])
def list_quizzes(
    skip: int = 0,
    limit: int = 100,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    return QuizService(db).list_quizzes(admin_id, skip, limit)


@router.get("/quizzes/{quiz_id}", response_model=QuizOut)
def get_quiz(
    quiz_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    try:
        return QuizService(db).get_quiz(quiz_id, admin_id)
    except QuizAppError as e:
        raise as_http_exception(e)


@router.put("/quizzes/{quiz_id}", response_model=QuizOut)
def update_quiz(
    quiz_id: int,
    request: QuizUpdate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """Update title, description or time limit; `questions`, when sent, replaces them all"""
    try:
        return QuizService(db).update_quiz(quiz_id, admin_id, request)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        raise _internal_error(f"update quiz {quiz_id}")


@router.delete("/quizzes/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(
    quiz_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    try:
        QuizService(db).delete_quiz(quiz_id, admin_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        raise _internal_error(f"delete quiz {quiz_id}")


@router.post(
    "/quizzes/{quiz_id}/questions",
    response_model=QuestionOut,
    status_code=status.HTTP_201_CREATED,
)
def add_question(
    quiz_id: int,
    request: QuestionCreate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    try:
        return QuizService(db).add_question(quiz_id, admin_id, request)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        raise _internal_error(f"add question to quiz {quiz_id}")


@router.put("/questions/{question_id}", response_model=QuestionOut)
def update_question(
    question_id: int,
    request: QuestionUpdate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """Replace a question; responses already submitted keep their snapshots"""
    try:
        return QuizService(db).update_question(question_id, admin_id, request)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        raise _internal_error(f"update question {question_id}")


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(
    question_id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    try:
        QuizService(db).delete_question(question_id, admin_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except QuizAppError as e:
        raise as_http_exception(e)
    except Exception:
        raise _internal_error(f"delete question {question_id}")

import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.timeutils import ensure_utc, format_duration
from app.domain.grading_domain import AnswerPayloads, PayloadError
from app.models.response import Answer
from app.repositories.quiz_repository import QuizRepository
from app.repositories.response_repository import ResponseRepository
from app.schemas.review import (
    AnswerDetail,
    ChoiceSnapshotView,
    ResponseDetail,
    ResponseSummary,
)

logger = logging.getLogger(__name__)


class ResponseReviewService:
    """Organizer review of archived responses, rendered only from answer snapshots"""

    def __init__(self, db: Session):
        self.quiz_repository = QuizRepository(db)
        self.response_repository = ResponseRepository(db)

    def list_responses(self, quiz_id: int, owner_id: int) -> List[ResponseSummary]:
        # Responses of a deleted quiz stay reviewable
        if self.quiz_repository.get_owned(quiz_id, owner_id, include_deleted=True) is None:
            raise NotFoundError("Quiz not found")
        return [
            ResponseSummary.model_validate(r)
            for r in self.response_repository.list_for_quiz(quiz_id)
        ]

    def get_response_detail(self, response_id: int, owner_id: int) -> ResponseDetail:
        response = self.response_repository.get_by_id(response_id)
        if response is None or response.quiz.admin_user_id != owner_id:
            raise NotFoundError("Response not found")

        time_taken = response.time_taken_seconds
        if time_taken is None and response.started_at is not None:
            delta = ensure_utc(response.submitted_at) - ensure_utc(response.started_at)
            time_taken = max(0, int(delta.total_seconds()))

        return ResponseDetail(
            id=response.id,
            quiz_id=response.quiz_id,
            quiz_title=response.quiz.title,
            responder_username=response.responder_username,
            score=response.score,
            started_at=response.started_at,
            submitted_at=response.submitted_at,
            time_taken_seconds=time_taken,
            time_taken_formatted=format_duration(time_taken) if time_taken is not None else None,
            answers=[self._answer_detail(answer) for answer in response.answers],
        )

    @staticmethod
    def _answer_detail(answer: Answer) -> AnswerDetail:
        try:
            selected_ids = AnswerPayloads.decode_selection(answer.answer_text)
        except PayloadError as e:
            logger.error(f"Answer {answer.id}: unreadable selection payload: {e}")
            selected_ids = [answer.choice_id] if answer.choice_id is not None else []

        try:
            choices = AnswerPayloads.decode_choices(answer.choices_snapshot)
        except PayloadError as e:
            logger.error(f"Answer {answer.id}: unreadable choices snapshot: {e}")
            choices = []

        text_by_id = {c.id: c.text for c in choices}
        return AnswerDetail(
            question_id=answer.question_id,
            question_text=answer.question_text_snapshot,
            selected_choice_text=text_by_id.get(answer.choice_id),
            selected_choice_ids=selected_ids,
            is_correct=answer.is_correct,
            all_choices=[
                ChoiceSnapshotView(id=c.id, text=c.text, is_correct=c.is_correct)
                for c in choices
            ],
            correct_choice_ids=[c.id for c in choices if c.is_correct],
        )

import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.exceptions import BadRequestError, NotFoundError
from app.core.timeutils import utcnow
from app.domain.quiz_domain import QuizDomain
from app.models.quiz import Choice, Question, Quiz
from app.repositories.quiz_repository import QuizRepository
from app.schemas.quiz import (
    QuestionCreate,
    QuestionOut,
    QuestionUpdate,
    QuizCreate,
    QuizOut,
    QuizSummary,
    QuizUpdate,
)

logger = logging.getLogger(__name__)


class QuizService:
    """Organizer-side quiz authoring, scoped to the quizzes the organizer owns"""

    def __init__(self, db: Session):
        self.db = db
        self.quiz_repository = QuizRepository(db)

    def create_quiz(self, owner_id: int, request: QuizCreate) -> QuizOut:
        for question in request.questions:
            self._validate(question)

        with transaction(self.db):
            quiz = self.quiz_repository.add(
                Quiz(
                    title=request.title.strip(),
                    description=request.description,
                    time_limit=request.time_limit,
                    admin_user_id=owner_id,
                )
            )
            for order, question in enumerate(request.questions):
                self.quiz_repository.add_question(
                    self._build_question(quiz.id, order, question)
                )
            quiz_id = quiz.id

        logger.info(f"Quiz {quiz_id} created with {len(request.questions)} question(s)")
        return self.get_quiz(quiz_id, owner_id)

    def list_quizzes(self, owner_id: int, skip: int = 0, limit: int = 100) -> List[QuizSummary]:
        return [
            QuizSummary.model_validate(q)
            for q in self.quiz_repository.list_by_owner(owner_id, skip, limit)
        ]

    def get_quiz(self, quiz_id: int, owner_id: int) -> QuizOut:
        """Full quiz including correctness flags; organizer view only"""
        quiz = self.quiz_repository.get_with_content(quiz_id)
        if quiz is None or quiz.admin_user_id != owner_id:
            raise NotFoundError("Quiz not found")
        return QuizOut.model_validate(quiz)

    def update_quiz(self, quiz_id: int, owner_id: int, request: QuizUpdate) -> QuizOut:
        """
        Change quiz details and optionally replace the whole question set.

        Only fields present in the request body are applied. Submitted answers
        are not linked to live questions, so replacing questions leaves
        archived responses intact.
        """
        fields = request.model_fields_set
        if request.questions is not None:
            for question in request.questions:
                self._validate(question)

        with transaction(self.db):
            quiz = self.quiz_repository.get_owned(quiz_id, owner_id)
            if quiz is None:
                raise NotFoundError("Quiz not found")

            if request.title is not None:
                quiz.title = request.title.strip()
            if "description" in fields:
                quiz.description = request.description
            if "time_limit" in fields:
                quiz.time_limit = request.time_limit
            if request.questions is not None:
                self.quiz_repository.replace_questions(
                    quiz,
                    [
                        self._build_question(quiz.id, order, question)
                        for order, question in enumerate(request.questions)
                    ],
                )

        logger.info(f"Quiz {quiz_id} updated (fields: {sorted(fields)})")
        return self.get_quiz(quiz_id, owner_id)

    def delete_quiz(self, quiz_id: int, owner_id: int) -> None:
        """Soft delete: the quiz disappears for organizer and respondents, responses stay"""
        with transaction(self.db):
            quiz = self.quiz_repository.get_owned(quiz_id, owner_id)
            if quiz is None:
                raise NotFoundError("Quiz not found")
            self.quiz_repository.soft_delete(quiz, utcnow())
        logger.info(f"🗑️ Quiz {quiz_id} deleted")

    def add_question(self, quiz_id: int, owner_id: int, request: QuestionCreate) -> QuestionOut:
        self._validate(request)
        with transaction(self.db):
            if self.quiz_repository.get_owned(quiz_id, owner_id) is None:
                raise NotFoundError("Quiz not found")
            order = self.quiz_repository.next_question_order(quiz_id)
            question = self.quiz_repository.add_question(
                self._build_question(quiz_id, order, request)
            )
            result = QuestionOut.model_validate(question)
        return result

    def update_question(
        self, question_id: int, owner_id: int, request: QuestionUpdate
    ) -> QuestionOut:
        """Replace a question's text, type and choices; stored answers keep their snapshots"""
        self._validate(request)
        with transaction(self.db):
            question = self._get_owned_question(question_id, owner_id)
            question.text = request.text
            question.type = request.type.value
            question.choices = [
                Choice(text=c.text, is_correct=c.is_correct, order=order)
                for order, c in enumerate(request.choices)
            ]
            self.db.flush()
            result = QuestionOut.model_validate(question)
        logger.info(f"Question {question_id} updated")
        return result

    def delete_question(self, question_id: int, owner_id: int) -> None:
        with transaction(self.db):
            question = self._get_owned_question(question_id, owner_id)
            self.quiz_repository.delete_question(question)
        logger.info(f"Question {question_id} deleted")

    def _get_owned_question(self, question_id: int, owner_id: int) -> Question:
        question = self.quiz_repository.get_question(question_id)
        if (
            question is None
            or question.quiz.admin_user_id != owner_id
            or question.quiz.deleted_at is not None
        ):
            raise NotFoundError("Question not found")
        return question

    @staticmethod
    def _validate(question: QuestionCreate) -> None:
        try:
            QuizDomain.validate_choices(question.type, QuizDomain.to_choice_drafts(question))
        except ValueError as e:
            raise BadRequestError(str(e))

    @staticmethod
    def _build_question(quiz_id: int, order: int, request: QuestionCreate) -> Question:
        return Question(
            quiz_id=quiz_id,
            text=request.text,
            type=request.type.value,
            order=order,
            choices=[
                Choice(text=c.text, is_correct=c.is_correct, order=choice_order)
                for choice_order, c in enumerate(request.choices)
            ],
        )

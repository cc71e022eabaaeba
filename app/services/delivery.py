import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.repositories.quiz_repository import QuizRepository
from app.schemas.responder import RespondentChoice, RespondentQuestion, RespondentQuiz

logger = logging.getLogger(__name__)


class QuizDeliveryProjector:
    """Builds the respondent's view of a quiz with correctness stripped out"""

    def __init__(self, db: Session):
        self.quiz_repository = QuizRepository(db)

    def project(self, quiz_id: int) -> RespondentQuiz:
        quiz = self.quiz_repository.get_by_id(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz not found")

        questions = self.quiz_repository.get_questions(quiz_id)
        choices_by_question = self.quiz_repository.get_choices_by_question(
            q.id for q in questions
        )

        # Copy field by field; ORM choices never reach the serializer
        return RespondentQuiz(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            time_limit=quiz.time_limit,
            questions=[
                RespondentQuestion(
                    id=question.id,
                    text=question.text,
                    type=question.type,
                    choices=[
                        RespondentChoice(id=choice.id, text=choice.text)
                        for choice in choices_by_question.get(question.id, [])
                    ],
                )
                for question in questions
            ],
        )

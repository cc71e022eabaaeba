from typing import List

from app.domain.grading_domain import ChoiceDraft
from app.models.quiz import QuestionType
from app.schemas.quiz import QuestionCreate

MIN_CHOICES = 2


class QuizDomain:
    """Authoring rules for questions and their choices"""

    @staticmethod
    def to_choice_drafts(question: QuestionCreate) -> List[ChoiceDraft]:
        return [ChoiceDraft(text=c.text, is_correct=c.is_correct) for c in question.choices]

    @staticmethod
    def validate_choices(question_type: QuestionType, choices: List[ChoiceDraft]) -> None:
        """
        Check the correctness pattern of a question's choices.

        single: exactly one correct choice; multi: at least one.
        Raises ValueError with a message fit for the organizer.
        """
        if len(choices) < MIN_CHOICES:
            raise ValueError(f"A question must have at least {MIN_CHOICES} choices")
        if any(not c.text.strip() for c in choices):
            raise ValueError("Choice text cannot be empty")

        correct_count = sum(1 for c in choices if c.is_correct)
        if question_type == QuestionType.SINGLE:
            if correct_count == 0:
                raise ValueError(
                    "A single-choice question must have exactly one correct answer, "
                    "but none were marked correct"
                )
            if correct_count > 1:
                raise ValueError(
                    "A single-choice question must have exactly one correct answer, "
                    "but multiple were marked correct"
                )
        elif question_type == QuestionType.MULTI:
            if correct_count == 0:
                raise ValueError(
                    "A multiple-choice question must have at least one correct answer, "
                    "but none were marked correct"
                )
        else:
            raise ValueError(f"Unknown question type '{question_type}'")

import logging
from typing import Dict, Iterable, List, Mapping

from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError
from app.domain.grading_domain import (
    AnswerDraft,
    AnswerPayloads,
    ChoiceSnapshot,
    ScoreResult,
    SubmittedAnswer,
)
from app.models.quiz import Choice, Question, QuestionType
from app.repositories.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)


class SubmissionValidator:
    """Checks that every submitted answer belongs to the bound quiz"""

    def __init__(self, db: Session):
        self.quiz_repository = QuizRepository(db)

    def validate(
        self, quiz_id: int, answers: Iterable[SubmittedAnswer]
    ) -> Dict[int, Question]:
        """
        Return the quiz's questions keyed by ID.

        Raises BadRequestError when an answer references a question outside
        the quiz. Unanswered questions and duplicate choice IDs are allowed.
        """
        questions_by_id = {q.id: q for q in self.quiz_repository.get_questions(quiz_id)}
        for answer in answers:
            if answer.question_id not in questions_by_id:
                logger.warning(
                    f"Rejected answer for question {answer.question_id} not in quiz {quiz_id}"
                )
                raise BadRequestError("Answer submitted for question not in this quiz")
        return questions_by_id


class ScoringEngine:
    """Pure grading: no storage access, same inputs always give the same result"""

    @staticmethod
    def is_correct(question_type: str, submitted: List[int], correct: Iterable[int]) -> bool:
        correct_set = set(correct)
        if not correct_set:
            return False
        if question_type == QuestionType.SINGLE.value:
            return len(submitted) == 1 and submitted[0] in correct_set
        if question_type == QuestionType.MULTI.value:
            return set(submitted) == correct_set
        return False

    @staticmethod
    def score(
        answers: Iterable[SubmittedAnswer],
        questions_by_id: Mapping[int, Question],
        correct_choice_ids_by_question: Mapping[int, Iterable[int]],
    ) -> ScoreResult:
        total_questions = len(questions_by_id)
        if total_questions == 0:
            return ScoreResult(score=0.0, correct_count=0, total_questions=0)

        # A question answered twice keeps the last submission
        submitted_by_question: Dict[int, List[int]] = {}
        for answer in answers:
            submitted_by_question[answer.question_id] = list(answer.choice_ids)

        per_question: Dict[int, bool] = {}
        for question_id, submitted in submitted_by_question.items():
            question = questions_by_id.get(question_id)
            if question is None:
                continue
            per_question[question_id] = ScoringEngine.is_correct(
                question.type,
                submitted,
                correct_choice_ids_by_question.get(question_id, ()),
            )

        correct_count = sum(1 for correct in per_question.values() if correct)
        return ScoreResult(
            score=correct_count / total_questions * 100,
            correct_count=correct_count,
            total_questions=total_questions,
            per_question=per_question,
        )


class AnswerSnapshotter:
    """Freezes question and choice content into the rows that record each answer"""

    @staticmethod
    def snapshot(
        answers: Iterable[SubmittedAnswer],
        questions_by_id: Mapping[int, Question],
        choices_by_question: Mapping[int, List[Choice]],
    ) -> List[AnswerDraft]:
        """
        One draft per submitted answer. Each row is graded on its own selection,
        so a question answered twice keeps a self-consistent record per row.
        """
        drafts: List[AnswerDraft] = []
        for answer in answers:
            question = questions_by_id.get(answer.question_id)
            if question is None:
                raise BadRequestError("Question not found for answer")

            choices = [
                ChoiceSnapshot(id=c.id, text=c.text, is_correct=bool(c.is_correct))
                for c in choices_by_question.get(answer.question_id, [])
            ]
            choice_ids = list(answer.choice_ids)
            row_correct = ScoringEngine.is_correct(
                question.type, choice_ids, [c.id for c in choices if c.is_correct]
            )
            drafts.append(
                AnswerDraft(
                    question_id=answer.question_id,
                    choice_id=choice_ids[0] if choice_ids else None,
                    answer_text=AnswerPayloads.encode_selection(choice_ids),
                    is_correct=row_correct,
                    question_text_snapshot=question.text,
                    choices_snapshot=AnswerPayloads.encode_choices(choices),
                )
            )
        return drafts


def correct_choice_ids(choices_by_question: Mapping[int, List[Choice]]) -> Dict[int, List[int]]:
    """Question ID -> IDs of its correct choices, for questions that have any"""
    correct: Dict[int, List[int]] = {}
    for question_id, choices in choices_by_question.items():
        ids = [c.id for c in choices if c.is_correct]
        if ids:
            correct[question_id] = ids
    return correct

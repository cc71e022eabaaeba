import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import Deadline, apply_deadline, transaction
from app.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    QuizAppError,
    UnauthorizedError,
)
from app.core.timeutils import parse_iso8601, utcnow
from app.domain.grading_domain import (
    AnswerDraft,
    PersistedSubmission,
    ResponseDraft,
    SubmittedAnswer,
)
from app.models.response import Answer, QuizResponse
from app.repositories.credential_repository import CredentialRepository
from app.repositories.quiz_repository import QuizRepository
from app.repositories.response_repository import ResponseRepository
from app.schemas.responder import QuizSubmission, SubmissionResult
from app.services.grading import (
    AnswerSnapshotter,
    ScoringEngine,
    SubmissionValidator,
    correct_choice_ids,
)
from app.services.responder_auth import ResponderClaims, SessionAuthenticator

logger = logging.getLogger(__name__)


class TransactionalWriter:
    """Persists a graded submission and consumes its credential atomically"""

    def __init__(self, db: Session):
        self.db = db
        self.credential_repository = CredentialRepository(db)
        self.response_repository = ResponseRepository(db)

    def commit(
        self,
        response: ResponseDraft,
        answers: List[AnswerDraft],
        deadline: Optional[Deadline] = None,
    ) -> PersistedSubmission:
        """
        Claim the credential, write the response and its answers, commit.

        The credential flip is a conditional UPDATE on `used = false` inside
        the same transaction as the inserts, so at most one submission per
        credential can ever commit. Any failure rolls the whole unit back.
        """
        with transaction(self.db):
            if deadline:
                deadline.check("credential claim")
            if not self.credential_repository.claim(
                response.credential_id,
                response.credential_generation,
                response.submitted_at,
            ):
                logger.info(
                    f"Credential {response.credential_id} was already consumed, rejecting submission"
                )
                raise ForbiddenError("This quiz has already been submitted")

            db_response = self.response_repository.add_response(
                QuizResponse(
                    quiz_id=response.quiz_id,
                    responder_credential_id=response.credential_id,
                    responder_username=response.responder_username,
                    score=response.score,
                    started_at=response.started_at,
                    submitted_at=response.submitted_at,
                    time_taken_seconds=response.time_taken_seconds,
                )
            )

            if deadline:
                deadline.check("answer write")
            db_answers = self.response_repository.add_answers(
                [
                    Answer(
                        response_id=db_response.id,
                        question_id=draft.question_id,
                        choice_id=draft.choice_id,
                        answer_text=draft.answer_text,
                        is_correct=draft.is_correct,
                        question_text_snapshot=draft.question_text_snapshot,
                        choices_snapshot=draft.choices_snapshot,
                    )
                    for draft in answers
                ]
            )

            if deadline:
                deadline.check("commit")

        return PersistedSubmission(
            response_id=db_response.id, answer_ids=[a.id for a in db_answers]
        )


class SubmissionService:
    """Grades a respondent's submission and archives it with frozen snapshots"""

    def __init__(self, db: Session):
        self.db = db
        self.quiz_repository = QuizRepository(db)
        self.credential_repository = CredentialRepository(db)
        self.validator = SubmissionValidator(db)
        self.writer = TransactionalWriter(db)

    def submit(
        self,
        claims: ResponderClaims,
        quiz_id: int,
        submission: QuizSubmission,
        deadline: Optional[Deadline] = None,
    ) -> SubmissionResult:
        SessionAuthenticator.ensure_quiz(claims, quiz_id)
        answers = [
            SubmittedAnswer(question_id=a.question_id, choice_ids=list(a.choice_ids))
            for a in submission.answers
        ]

        try:
            apply_deadline(self.db, deadline)

            quiz = self.quiz_repository.get_by_id(quiz_id)
            if quiz is None:
                raise NotFoundError("Quiz not found")

            credential = self.credential_repository.get_by_id_for_update(
                claims.credential_id
            )
            if credential is None or credential.generation != claims.generation:
                raise UnauthorizedError("Credential no longer valid")
            if credential.used:
                raise ForbiddenError("This quiz has already been submitted")

            questions_by_id = self.validator.validate(quiz_id, answers)
            choices_by_question = self.quiz_repository.get_choices_by_question(
                questions_by_id.keys()
            )
            correct_by_question = correct_choice_ids(choices_by_question)

            result = ScoringEngine.score(answers, questions_by_id, correct_by_question)
            drafts = AnswerSnapshotter.snapshot(
                answers, questions_by_id, choices_by_question
            )

            submitted_at = utcnow()
            started_at, time_taken = self._timing(submission.started_at, submitted_at)
            persisted = self.writer.commit(
                ResponseDraft(
                    quiz_id=quiz_id,
                    credential_id=credential.id,
                    credential_generation=credential.generation,
                    responder_username=credential.username,
                    score=result.score,
                    submitted_at=submitted_at,
                    started_at=started_at,
                    time_taken_seconds=time_taken,
                ),
                drafts,
                deadline=deadline,
            )
        except QuizAppError:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Database error while saving submission for quiz {quiz_id}")
            raise

        logger.info(
            f"✅ Response {persisted.response_id} saved for quiz {quiz_id}: "
            f"{result.correct_count}/{result.total_questions} correct ({result.score:.1f}%)"
        )
        return SubmissionResult(
            score=result.score,
            total_questions=result.total_questions,
            correct_answers=result.correct_count,
            correct_choices=correct_by_question,
        )

    @staticmethod
    def _timing(started_at_raw: Optional[str], submitted_at):
        if not started_at_raw:
            return None, None
        try:
            started_at = parse_iso8601(started_at_raw)
        except ValueError as e:
            logger.warning(f"Ignoring unparseable started_at {started_at_raw!r}: {e}")
            return None, None
        seconds = max(0, int((submitted_at - started_at).total_seconds()))
        return started_at, seconds

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from app.models.response import Answer, QuizResponse


class ResponseRepository:
    """Repository for stored quiz responses and their answers"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, response_id: int) -> Optional[QuizResponse]:
        """Get a response with its answers loaded"""
        return (
            self.db.query(QuizResponse)
            .options(selectinload(QuizResponse.answers), selectinload(QuizResponse.quiz))
            .filter(QuizResponse.id == response_id)
            .first()
        )

    def list_for_quiz(self, quiz_id: int) -> List[QuizResponse]:
        return (
            self.db.query(QuizResponse)
            .filter(QuizResponse.quiz_id == quiz_id)
            .order_by(QuizResponse.submitted_at.desc(), QuizResponse.id.desc())
            .all()
        )

    def add_response(self, response: QuizResponse) -> QuizResponse:
        self.db.add(response)
        self.db.flush()
        return response

    def add_answers(self, answers: List[Answer]) -> List[Answer]:
        self.db.add_all(answers)
        self.db.flush()
        return answers

    def detach_credential(self, credential_id: int) -> int:
        """Unlink historical responses from a credential about to be reset or removed"""
        result = self.db.execute(
            update(QuizResponse)
            .where(QuizResponse.responder_credential_id == credential_id)
            .values(responder_credential_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from app.core.database import Base


class QuizResponse(Base):
    __tablename__ = "quiz_responses"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    responder_credential_id = Column(
        Integer,
        ForeignKey("responder_credentials.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    responder_username = Column(String(100), nullable=False, index=True)
    score = Column(Float, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    time_taken_seconds = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    quiz = relationship("Quiz")
    answers = relationship(
        "Answer",
        back_populates="response",
        cascade="all, delete-orphan",
        order_by="Answer.id",
    )


class Answer(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, index=True)
    response_id = Column(
        Integer,
        ForeignKey("quiz_responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Plain column: the answer must outlive edits and deletion of the question
    question_id = Column(Integer, nullable=False, index=True)
    choice_id = Column(Integer, nullable=True)
    answer_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=True)
    question_text_snapshot = Column(Text, nullable=False)
    choices_snapshot = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    response = relationship("QuizResponse", back_populates="answers")

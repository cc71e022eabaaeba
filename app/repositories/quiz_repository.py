from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models.quiz import Choice, Question, Quiz


class QuizRepository:
    """Repository for Quiz, Question and Choice rows; callers own the transaction"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, quiz_id: int) -> Optional[Quiz]:
        """Get a live (not soft-deleted) quiz by ID"""
        return (
            self.db.query(Quiz)
            .filter(Quiz.id == quiz_id, Quiz.deleted_at.is_(None))
            .first()
        )

    def get_owned(
        self, quiz_id: int, owner_id: int, include_deleted: bool = False
    ) -> Optional[Quiz]:
        """Get a quiz only if it belongs to the given organizer"""
        query = self.db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.admin_user_id == owner_id)
        if not include_deleted:
            query = query.filter(Quiz.deleted_at.is_(None))
        return query.first()

    def get_with_content(self, quiz_id: int) -> Optional[Quiz]:
        """Get a quiz with its questions and choices eagerly loaded"""
        return (
            self.db.query(Quiz)
            .options(selectinload(Quiz.questions).selectinload(Question.choices))
            .filter(Quiz.id == quiz_id, Quiz.deleted_at.is_(None))
            .first()
        )

    def list_by_owner(self, owner_id: int, skip: int = 0, limit: int = 100) -> List[Quiz]:
        return (
            self.db.query(Quiz)
            .filter(Quiz.admin_user_id == owner_id, Quiz.deleted_at.is_(None))
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_questions(self, quiz_id: int) -> List[Question]:
        """All questions of a quiz in display order"""
        return (
            self.db.query(Question)
            .filter(Question.quiz_id == quiz_id)
            .order_by(Question.order, Question.id)
            .all()
        )

    def get_choices_by_question(self, question_ids: Iterable[int]) -> Dict[int, List[Choice]]:
        """Choices of the given questions, grouped by question ID in display order"""
        ids = list(question_ids)
        grouped: Dict[int, List[Choice]] = {question_id: [] for question_id in ids}
        if not ids:
            return grouped
        choices = (
            self.db.query(Choice)
            .filter(Choice.question_id.in_(ids))
            .order_by(Choice.question_id, Choice.order, Choice.id)
            .all()
        )
        for choice in choices:
            grouped[choice.question_id].append(choice)
        return grouped

    def get_question(self, question_id: int) -> Optional[Question]:
        return self.db.query(Question).filter(Question.id == question_id).first()

    def next_question_order(self, quiz_id: int) -> int:
        questions = self.get_questions(quiz_id)
        return max((q.order for q in questions), default=-1) + 1

    def add(self, quiz: Quiz) -> Quiz:
        self.db.add(quiz)
        self.db.flush()
        return quiz

    def add_question(self, question: Question) -> Question:
        self.db.add(question)
        self.db.flush()
        return question

    def replace_questions(self, quiz: Quiz, questions: List[Question]) -> None:
        """Swap the whole question set; orphaned questions and choices are deleted"""
        quiz.questions = questions
        self.db.flush()

    def delete_question(self, question: Question) -> None:
        self.db.delete(question)
        self.db.flush()

    def soft_delete(self, quiz: Quiz, deleted_at: datetime) -> None:
        quiz.deleted_at = deleted_at
        self.db.flush()

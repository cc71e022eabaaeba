from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.quiz import QuestionType


class ChoiceCreate(BaseModel):
    text: str = Field(..., min_length=1, description="Choice text")
    is_correct: bool = Field(False, description="Whether this choice is correct")


class QuestionCreate(BaseModel):
    text: str = Field(..., min_length=1, description="Question text")
    type: QuestionType = Field(..., description="'single' or 'multi'")
    choices: List[ChoiceCreate] = Field(..., description="Answer choices in display order")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Question text cannot be empty")
        return v.strip()


class QuestionUpdate(QuestionCreate):
    pass


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    time_limit: Optional[int] = Field(None, gt=0, description="Time limit in minutes")
    questions: List[QuestionCreate] = []


class QuizUpdate(BaseModel):
    """Partial update; a field left out of the body is not touched"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    time_limit: Optional[int] = Field(None, gt=0, description="Time limit in minutes")
    questions: Optional[List[QuestionCreate]] = Field(
        None, description="When present, replaces every question of the quiz"
    )


class ChoiceOut(BaseModel):
    id: int
    text: str
    is_correct: bool
    order: int

    class Config:
        from_attributes = True


class QuestionOut(BaseModel):
    id: int
    text: str
    type: QuestionType
    order: int
    choices: List[ChoiceOut] = []

    class Config:
        from_attributes = True


class QuizSummary(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    time_limit: Optional[int] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuizOut(QuizSummary):
    questions: List[QuestionOut] = []

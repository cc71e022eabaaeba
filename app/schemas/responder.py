from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.quiz import QuestionType


class ResponderLoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


# Respondent-facing quiz view. None of these types has a correctness field.
class RespondentChoice(BaseModel):
    id: int
    text: str


class RespondentQuestion(BaseModel):
    id: int
    text: str
    type: QuestionType
    choices: List[RespondentChoice]


class RespondentQuiz(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    time_limit: Optional[int] = None
    questions: List[RespondentQuestion]


class AnswerSubmission(BaseModel):
    question_id: int = Field(..., description="Question being answered")
    choice_ids: List[int] = Field(..., description="All selected choice IDs")


class QuizSubmission(BaseModel):
    answers: List[AnswerSubmission]
    started_at: Optional[str] = Field(
        None, description="ISO-8601 timestamp of when the respondent started"
    )


class SubmissionResult(BaseModel):
    score: float
    total_questions: int
    correct_answers: int
    correct_choices: Dict[int, List[int]]

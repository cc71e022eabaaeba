from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ResponseSummary(BaseModel):
    id: int
    responder_username: str
    score: float
    submitted_at: datetime
    time_taken_seconds: Optional[int] = None

    class Config:
        from_attributes = True


class ChoiceSnapshotView(BaseModel):
    id: int
    text: str
    is_correct: bool


class AnswerDetail(BaseModel):
    question_id: int
    question_text: str
    selected_choice_text: Optional[str] = None
    selected_choice_ids: List[int] = []
    is_correct: Optional[bool] = None
    all_choices: List[ChoiceSnapshotView] = []
    correct_choice_ids: List[int] = []


class ResponseDetail(BaseModel):
    id: int
    quiz_id: int
    quiz_title: Optional[str] = None
    responder_username: str
    score: float
    started_at: Optional[datetime] = None
    submitted_at: datetime
    time_taken_seconds: Optional[int] = None
    time_taken_formatted: Optional[str] = None
    answers: List[AnswerDetail]

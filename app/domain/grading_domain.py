import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

PAYLOAD_VERSION = 1


@dataclass(frozen=True)
class ChoiceDraft:
    """Correctness-bearing choice input for authoring validation"""

    text: str
    is_correct: bool


@dataclass(frozen=True)
class ChoiceSnapshot:
    """A choice exactly as it looked when an answer was submitted"""

    id: int
    text: str
    is_correct: bool


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: int
    choice_ids: List[int]


@dataclass
class ScoreResult:
    score: float
    correct_count: int
    total_questions: int
    # question ID -> whether the respondent got it right (answered questions only)
    per_question: Dict[int, bool] = field(default_factory=dict)


@dataclass
class AnswerDraft:
    """An Answer row ready to be written, snapshot fields already frozen"""

    question_id: int
    choice_id: Optional[int]
    answer_text: str
    is_correct: Optional[bool]
    question_text_snapshot: str
    choices_snapshot: str


@dataclass
class ResponseDraft:
    quiz_id: int
    credential_id: int
    credential_generation: int
    responder_username: str
    score: float
    submitted_at: datetime
    started_at: Optional[datetime] = None
    time_taken_seconds: Optional[int] = None


@dataclass
class PersistedSubmission:
    response_id: int
    answer_ids: List[int]


class PayloadError(ValueError):
    """Stored JSON payload could not be decoded"""


class AnswerPayloads:
    """
    Versioned JSON payloads kept in text columns of the answers table.

    Selection:  {"version": 1, "choiceIds": [3, 5]}
    Snapshot:   {"version": 1, "choices": [{"id": 3, "text": "A", "isCorrect": true}]}

    Rows written before versioning stored bare JSON arrays; both decoders
    accept that shape too.
    """

    @staticmethod
    def encode_selection(choice_ids: List[int]) -> str:
        return json.dumps({"version": PAYLOAD_VERSION, "choiceIds": list(choice_ids)})

    @staticmethod
    def decode_selection(raw: Optional[str]) -> List[int]:
        if not raw:
            return []
        data = AnswerPayloads._load(raw)
        if isinstance(data, dict):
            AnswerPayloads._check_version(data)
            data = data.get("choiceIds", [])
        if not isinstance(data, list):
            raise PayloadError("Selection payload is not a list of choice IDs")
        try:
            return [int(choice_id) for choice_id in data]
        except (TypeError, ValueError) as e:
            raise PayloadError(f"Invalid choice ID in selection payload: {e}")

    @staticmethod
    def encode_choices(choices: List[ChoiceSnapshot]) -> str:
        return json.dumps(
            {
                "version": PAYLOAD_VERSION,
                "choices": [
                    {"id": c.id, "text": c.text, "isCorrect": c.is_correct}
                    for c in choices
                ],
            }
        )

    @staticmethod
    def decode_choices(raw: Optional[str]) -> List[ChoiceSnapshot]:
        if not raw:
            return []
        data = AnswerPayloads._load(raw)
        if isinstance(data, dict):
            AnswerPayloads._check_version(data)
            data = data.get("choices", [])
        if not isinstance(data, list):
            raise PayloadError("Choices payload is not a list")
        try:
            return [
                ChoiceSnapshot(
                    id=int(item["id"]),
                    text=str(item.get("text", "")),
                    is_correct=bool(item.get("isCorrect", False)),
                )
                for item in data
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise PayloadError(f"Invalid choice in snapshot payload: {e}")

    @staticmethod
    def _load(raw: str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise PayloadError(f"Malformed JSON payload: {e}")

    @staticmethod
    def _check_version(data: dict) -> None:
        version = data.get("version")
        if version != PAYLOAD_VERSION:
            raise PayloadError(f"Unsupported payload version: {version}")

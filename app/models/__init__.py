from .admin_user import AdminUser
from .credential import ResponderCredential
from .quiz import Choice, Question, QuestionType, Quiz
from .response import Answer, QuizResponse

__all__ = [
    "AdminUser",
    "Quiz",
    "Question",
    "QuestionType",
    "Choice",
    "ResponderCredential",
    "QuizResponse",
    "Answer",
]

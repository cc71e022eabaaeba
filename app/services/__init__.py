from .admin_auth import AdminAuthService
from .credential import CredentialService
from .delivery import QuizDeliveryProjector
from .grading import AnswerSnapshotter, ScoringEngine, SubmissionValidator
from .quiz import QuizService
from .responder_auth import ResponderLoginService, SessionAuthenticator
from .review import ResponseReviewService
from .submission import SubmissionService, TransactionalWriter

__all__ = [
    "AdminAuthService",
    "CredentialService",
    "QuizDeliveryProjector",
    "SubmissionValidator",
    "ScoringEngine",
    "AnswerSnapshotter",
    "TransactionalWriter",
    "SubmissionService",
    "QuizService",
    "ResponderLoginService",
    "SessionAuthenticator",
    "ResponseReviewService",
]

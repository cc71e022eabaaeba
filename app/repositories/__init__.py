from .admin_user_repository import AdminUserRepository
from .credential_repository import CredentialRepository
from .quiz_repository import QuizRepository
from .response_repository import ResponseRepository

__all__ = [
    "AdminUserRepository",
    "CredentialRepository",
    "QuizRepository",
    "ResponseRepository",
]

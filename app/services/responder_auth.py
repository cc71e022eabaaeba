import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import (
    RESPONDER_TOKEN_TYPE,
    create_access_token,
    decode_access_token,
    dummy_verify,
    verify_password,
)
from app.core.timeutils import ensure_utc, utcnow
from app.repositories.credential_repository import CredentialRepository

logger = logging.getLogger(__name__)

INVALID_LOGIN_MESSAGE = "Invalid username or password"


@dataclass(frozen=True)
class ResponderClaims:
    """What a verified responder token binds the request to"""

    credential_id: int
    quiz_id: int
    generation: int = 1


class ResponderLoginService:
    """Exchanges a one-time credential for a short-lived responder token"""

    def __init__(self, db: Session):
        self.credential_repository = CredentialRepository(db)

    def login(self, username: str, password: str) -> str:
        credential = self.credential_repository.get_by_username(username)
        # Same message and same hashing cost for unknown user and bad password
        if credential is None:
            dummy_verify()
            raise UnauthorizedError(INVALID_LOGIN_MESSAGE)
        if not verify_password(password, credential.password_hash):
            raise UnauthorizedError(INVALID_LOGIN_MESSAGE)

        if credential.used:
            raise ForbiddenError("Credential has already been used")
        if ensure_utc(credential.expires_at) <= utcnow():
            raise ForbiddenError("Credential has expired")

        token = create_access_token(
            {
                "credential_id": credential.id,
                "quiz_id": credential.quiz_id,
                "gen": credential.generation,
            },
            RESPONDER_TOKEN_TYPE,
            timedelta(minutes=settings.RESPONDER_TOKEN_EXPIRE_MINUTES),
        )
        logger.info(f"Responder credential {credential.id} logged in for quiz {credential.quiz_id}")
        return token


class SessionAuthenticator:
    """Gate in front of every respondent-facing operation"""

    def __init__(self, db: Session):
        self.credential_repository = CredentialRepository(db)

    def authenticate(self, token: str) -> ResponderClaims:
        """
        Verify a responder bearer token against the stored credential.

        A valid signature is not enough: the credential row is re-read and a
        consumed credential is rejected even while its token is unexpired.

        Raises:
            UnauthorizedError: bad/expired token or credential gone
            ForbiddenError: credential already used
        """
        payload = decode_access_token(token, RESPONDER_TOKEN_TYPE)
        try:
            claims = ResponderClaims(
                credential_id=int(payload["credential_id"]),
                quiz_id=int(payload["quiz_id"]),
                generation=int(payload["gen"]),
            )
        except (KeyError, TypeError, ValueError):
            raise UnauthorizedError("Invalid or expired token: missing claims")

        credential = self.credential_repository.get_by_id(claims.credential_id)
        if (
            credential is None
            or credential.quiz_id != claims.quiz_id
            or claims.generation != credential.generation
        ):
            raise UnauthorizedError("Credential no longer valid")
        if credential.used:
            raise ForbiddenError("This quiz has already been submitted")
        return claims

    @staticmethod
    def ensure_quiz(claims: ResponderClaims, quiz_id: int) -> None:
        if claims.quiz_id != quiz_id:
            raise ForbiddenError("You are not authorized to access this quiz")

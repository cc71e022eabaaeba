import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import transaction
from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.security import generate_secret, get_password_hash
from app.core.timeutils import utcnow
from app.models.credential import ResponderCredential
from app.repositories.credential_repository import CredentialRepository
from app.repositories.quiz_repository import QuizRepository
from app.repositories.response_repository import ResponseRepository
from app.schemas.credential import CredentialIssued, CredentialView

logger = logging.getLogger(__name__)


class CredentialService:
    """Issues, lists and revokes the single respondent credential of a quiz"""

    def __init__(self, db: Session):
        self.db = db
        self.quiz_repository = QuizRepository(db)
        self.credential_repository = CredentialRepository(db)
        self.response_repository = ResponseRepository(db)

    def issue(
        self,
        quiz_id: int,
        owner_id: int,
        username: Optional[str] = None,
        expiry_hours: Optional[int] = None,
    ) -> CredentialIssued:
        """
        Create or rotate the quiz's credential and reveal its password once.

        Re-issuing rewrites the existing row in place: new username and
        secret, `used` reset, generation bumped so tokens minted for the old
        secret stop working. Responses recorded under the old state keep their
        denormalized username but lose the link to this row.

        Raises:
            NotFoundError: quiz missing or owned by someone else
            ConflictError: username already taken
        """
        if expiry_hours is not None and expiry_hours <= 0:
            raise BadRequestError("expiry_hours must be a positive number of hours")

        username = username or self._generate_username(quiz_id)
        password = generate_secret(settings.CREDENTIAL_PASSWORD_LENGTH)
        password_hash = get_password_hash(password)
        expires_at = utcnow() + timedelta(
            hours=expiry_hours or settings.CREDENTIAL_DEFAULT_EXPIRY_HOURS
        )

        try:
            with transaction(self.db):
                if self.quiz_repository.get_owned(quiz_id, owner_id) is None:
                    raise NotFoundError("Quiz not found")

                credential = self.credential_repository.get_by_quiz_id(quiz_id)
                if credential is not None:
                    detached = self.response_repository.detach_credential(credential.id)
                    if detached:
                        logger.info(
                            f"Re-issuing credential {credential.id} for quiz {quiz_id}; "
                            f"{detached} earlier response(s) unlinked"
                        )
                    credential.username = username
                    credential.password_hash = password_hash
                    credential.expires_at = expires_at
                    credential.used = False
                    credential.used_at = None
                    credential.generation = (credential.generation or 1) + 1
                    self.credential_repository.save(credential)
                else:
                    credential = self.credential_repository.add(
                        ResponderCredential(
                            quiz_id=quiz_id,
                            username=username,
                            password_hash=password_hash,
                            expires_at=expires_at,
                            used=False,
                            generation=1,
                        )
                    )
                credential_id = credential.id
        except IntegrityError as e:
            logger.warning(f"Credential for quiz {quiz_id} rejected by constraint: {e.orig}")
            if "username" in str(e.orig).lower():
                raise ConflictError(
                    "Username already exists. Please choose a different username."
                )
            raise ConflictError("Credential for this quiz was modified concurrently")

        logger.info(f"🔑 Credential {credential_id} issued for quiz {quiz_id}")
        return CredentialIssued(
            username=username,
            password=password,
            expires_at=expires_at,
            credential_id=credential_id,
        )

    def list_for_quiz(self, quiz_id: int, owner_id: int) -> List[CredentialView]:
        if self.quiz_repository.get_owned(quiz_id, owner_id) is None:
            raise NotFoundError("Quiz not found")
        return [
            CredentialView.model_validate(c)
            for c in self.credential_repository.list_for_quiz(quiz_id)
        ]

    def revoke(self, credential_id: int, owner_id: int) -> None:
        """Hard-delete a credential; 404 rather than 403 for other owners' rows"""
        with transaction(self.db):
            credential = self.credential_repository.get_by_id(credential_id)
            if credential is None or credential.quiz.admin_user_id != owner_id:
                raise NotFoundError("Credential not found")
            self.response_repository.detach_credential(credential.id)
            self.credential_repository.delete(credential)
        logger.info(f"Credential {credential_id} revoked")

    @staticmethod
    def _generate_username(quiz_id: int) -> str:
        return f"quiz{quiz_id}_user{secrets.randbelow(10000):04d}"

from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models.credential import ResponderCredential


class CredentialRepository:
    """Repository for responder credentials; callers own the transaction"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, credential_id: int) -> Optional[ResponderCredential]:
        return (
            self.db.query(ResponderCredential)
            .filter(ResponderCredential.id == credential_id)
            .first()
        )

    def get_by_id_for_update(self, credential_id: int) -> Optional[ResponderCredential]:
        """Read the credential row under a row lock (no-op on SQLite)"""
        return (
            self.db.query(ResponderCredential)
            .filter(ResponderCredential.id == credential_id)
            .with_for_update()
            .first()
        )

    def get_by_quiz_id(self, quiz_id: int) -> Optional[ResponderCredential]:
        return (
            self.db.query(ResponderCredential)
            .filter(ResponderCredential.quiz_id == quiz_id)
            .first()
        )

    def get_by_username(self, username: str) -> Optional[ResponderCredential]:
        return (
            self.db.query(ResponderCredential)
            .filter(ResponderCredential.username == username)
            .first()
        )

    def list_for_quiz(self, quiz_id: int) -> List[ResponderCredential]:
        return (
            self.db.query(ResponderCredential)
            .filter(ResponderCredential.quiz_id == quiz_id)
            .order_by(ResponderCredential.created_at.desc())
            .all()
        )

    def add(self, credential: ResponderCredential) -> ResponderCredential:
        self.db.add(credential)
        self.db.flush()
        return credential

    def save(self, credential: ResponderCredential) -> ResponderCredential:
        self.db.flush()
        return credential

    def claim(self, credential_id: int, generation: int, used_at: datetime) -> bool:
        """
        Flip an unused credential to used.

        Matching on `used` and `generation` makes this a compare-and-set: of two
        concurrent transactions only one can match the row, the other sees a
        row count of zero once the first commits. A re-issue in between
        bumps the generation, so a stale session cannot consume the new one.
        """
        result = self.db.execute(
            update(ResponderCredential)
            .where(
                ResponderCredential.id == credential_id,
                ResponderCredential.generation == generation,
                ResponderCredential.used.is_(False),
            )
            .values(used=True, used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete(self, credential: ResponderCredential) -> None:
        self.db.delete(credential)
        self.db.flush()

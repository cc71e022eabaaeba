import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import transaction
from app.core.exceptions import UnauthorizedError
from app.core.security import (
    ADMIN_TOKEN_TYPE,
    create_access_token,
    decode_access_token,
    dummy_verify,
    get_password_hash,
    verify_password,
)
from app.core.timeutils import utcnow
from app.models.admin_user import AdminUser
from app.repositories.admin_user_repository import AdminUserRepository

logger = logging.getLogger(__name__)


class AdminAuthService:
    """Organizer accounts: login, token verification, startup bootstrap"""

    def __init__(self, db: Session):
        self.db = db
        self.admin_repository = AdminUserRepository(db)

    def login(self, username: str, password: str) -> str:
        with transaction(self.db):
            admin = self.admin_repository.get_by_username(username)
            if admin is None:
                dummy_verify()
                raise UnauthorizedError("Invalid username or password")
            if not verify_password(password, admin.password_hash):
                raise UnauthorizedError("Invalid username or password")
            admin.last_login = utcnow()
            admin_id = admin.id

        return create_access_token(
            {"admin_user_id": admin_id},
            ADMIN_TOKEN_TYPE,
            timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES),
        )

    def verify(self, token: str) -> int:
        """Return the organizer ID a token belongs to; raises UnauthorizedError"""
        payload = decode_access_token(token, ADMIN_TOKEN_TYPE)
        try:
            admin_id = int(payload["admin_user_id"])
        except (KeyError, TypeError, ValueError):
            raise UnauthorizedError("Invalid or expired token: missing claims")
        if self.admin_repository.get_by_id(admin_id) is None:
            raise UnauthorizedError("Admin account no longer exists")
        return admin_id

    def create_admin(self, username: str, password: str) -> AdminUser:
        with transaction(self.db):
            admin = self.admin_repository.add(
                AdminUser(username=username, password_hash=get_password_hash(password))
            )
        return admin

    def ensure_bootstrap_admin(self) -> None:
        if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
            return
        if self.admin_repository.get_by_username(settings.ADMIN_USERNAME):
            return
        self.create_admin(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
        logger.info(f"👤 Bootstrap admin '{settings.ADMIN_USERNAME}' created")

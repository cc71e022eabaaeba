from typing import Optional

from sqlalchemy.orm import Session

from app.models.admin_user import AdminUser


class AdminUserRepository:
    """Repository for organizer accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, admin_user_id: int) -> Optional[AdminUser]:
        return self.db.query(AdminUser).filter(AdminUser.id == admin_user_id).first()

    def get_by_username(self, username: str) -> Optional[AdminUser]:
        return self.db.query(AdminUser).filter(AdminUser.username == username).first()

    def add(self, admin_user: AdminUser) -> AdminUser:
        self.db.add(admin_user)
        self.db.flush()
        return admin_user

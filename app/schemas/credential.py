from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CredentialIssueRequest(BaseModel):
    username: Optional[str] = Field(
        None, max_length=100, description="Optional username; generated when omitted"
    )
    expiry_hours: Optional[int] = Field(
        None, gt=0, description="Hours until the credential expires (default 24)"
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CredentialIssued(BaseModel):
    """Returned exactly once: the plaintext password is never retrievable again"""

    username: str
    password: str
    expires_at: datetime
    credential_id: int


class CredentialView(BaseModel):
    id: int
    username: str
    expires_at: datetime
    created_at: Optional[datetime] = None
    used: bool
    used_at: Optional[datetime] = None

    class Config:
        from_attributes = True

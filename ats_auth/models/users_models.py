"""
User Models
-----------
Records held by the credential store.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ats_auth.models.auth_models import UserPublic


class UserRole(str, Enum):
    APPLICANT = "applicant"
    RECRUITER = "recruiter"
    ADMIN = "admin"

    @classmethod
    def values(cls):
        return [role.value for role in cls]


class UserRecord(BaseModel):
    """A persisted user. Never serialize this to a client."""

    id: str = Field(..., description="User's unique identifier")
    email: str = Field(..., description="Normalized email address")
    password_hash: str = Field(..., description="bcrypt hash")
    role: str = Field(..., description="applicant, recruiter or admin")
    created_at: Optional[datetime] = None

    def to_public(self) -> UserPublic:
        return UserPublic(id=self.id, email=self.email, role=self.role)


def normalize_email(email: str) -> str:
    """Emails are stored and looked up trimmed and lower-cased."""
    return email.strip().lower()

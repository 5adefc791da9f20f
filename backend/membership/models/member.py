import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from membership.core.constants import (
    MEMBER_ROLE_MEMBER,
    MEMBER_STATUS_ACTIVE,
    MEMBER_STATUS_INVITED,
)
from membership.core.security import generate_uid
from membership.models.types import PyObjectId


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Member(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    public_id: str = Field(default_factory=generate_uid)
    workspace_id: str
    email: EmailStr
    user_id: Optional[str] = None  # null until the invited person has an account
    role: str = MEMBER_ROLE_MEMBER  # admin / member / guest
    status: str = MEMBER_STATUS_INVITED  # invited / active
    created_by: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_active(self) -> bool:
        return self.status == MEMBER_STATUS_ACTIVE and not self.is_deleted

    @property
    def is_pending(self) -> bool:
        return self.status == MEMBER_STATUS_INVITED and not self.is_deleted

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from membership.core import ensure_utc
from membership.core.constants import MEMBER_ROLE_MEMBER
from membership.models.types import PyObjectId


class InviteLink(BaseModel):
    """Single-use, time-boxed capability to join a workspace."""

    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    workspace_id: str
    invite_code: str
    role: str = MEMBER_ROLE_MEMBER
    created_by: Optional[str] = None  # nulled if the creator account is removed
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime
    is_used: bool = False
    used_at: Optional[datetime] = None
    used_by: Optional[str] = None

    @model_validator(mode="after")
    def _check_usage_fields(self) -> "InviteLink":
        self.created_at = ensure_utc(self.created_at)
        self.expires_at = ensure_utc(self.expires_at)
        self.used_at = ensure_utc(self.used_at)
        if self.is_used and self.used_at is None:
            raise ValueError("used_at must be set when the invite link is used")
        if not self.is_used and (self.used_at is not None or self.used_by is not None):
            raise ValueError("used_at/used_by must be empty while the invite link is unused")
        return self

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_redeemable(self, now: datetime) -> bool:
        return not self.is_used and not self.is_expired(now)

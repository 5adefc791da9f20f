from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class MemberInvite(BaseModel):
    email: EmailStr


class MemberInviteResponse(BaseModel):
    id: str
    public_id: str


class MemberResponse(BaseModel):
    public_id: str
    email: str
    role: str
    status: str
    user_id: Optional[str] = None
    created_at: datetime


class OperationResult(BaseModel):
    """Outcome of an operation whose primary effect succeeded.

    ``secondary_failures`` lists best-effort side effects (e.g. a seat
    decrement) that failed without undoing the primary effect.
    """

    success: bool = True
    secondary_failures: List[str] = Field(default_factory=list)

    @property
    def fully_succeeded(self) -> bool:
        return self.success and not self.secondary_failures


class MembershipJoined(BaseModel):
    success: bool = True
    workspace_public_id: Optional[str] = None
    workspace_slug: Optional[str] = None

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from membership.core.constants import MEMBER_ROLE_MEMBER


class InviteLinkCreate(BaseModel):
    role: str = Field(MEMBER_ROLE_MEMBER, description="Role granted on redemption: 'member' or 'admin'")
    expires_in: Optional[int] = Field(None, description="Days until the link expires (1-30)")


class InviteLinkCreated(BaseModel):
    invite_link: str
    invite_code: str
    expires_at: datetime


class InviteLinkRedeem(BaseModel):
    invite_code: str = Field(..., max_length=64)


class InviteLinkSummary(BaseModel):
    id: str
    invite_code: str
    role: str
    created_at: datetime
    expires_at: datetime


class InviteInfo(BaseModel):
    workspace_name: str
    workspace_slug: str
    inviter_name: Optional[str] = None
    expires_at: datetime
    is_expired: bool
    is_used: bool


class SuccessResponse(BaseModel):
    success: bool = True

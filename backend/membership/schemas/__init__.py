"""
Schema Exports

Request and response models of the membership API.
"""

from membership.schemas.invite_link import (
    InviteInfo,
    InviteLinkCreate,
    InviteLinkCreated,
    InviteLinkRedeem,
    InviteLinkSummary,
    SuccessResponse,
)
from membership.schemas.member import (
    MemberInvite,
    MemberInviteResponse,
    MemberResponse,
    MembershipJoined,
    OperationResult,
)

__all__ = [
    "InviteInfo",
    "InviteLinkCreate",
    "InviteLinkCreated",
    "InviteLinkRedeem",
    "InviteLinkSummary",
    "SuccessResponse",
    "MemberInvite",
    "MemberInviteResponse",
    "MemberResponse",
    "MembershipJoined",
    "OperationResult",
]

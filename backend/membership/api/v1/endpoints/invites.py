from typing import List

from fastapi import Depends, status

from membership.api import deps
from membership.api.router import CustomAPIRouter
from membership.api.v1.helpers.responses import (
    RESP_400,
    RESP_401,
    RESP_404,
    RESP_409,
    RESP_AUTH_400_404,
    RESP_AUTH_404,
)
from membership.core.config import settings
from membership.schemas.invite_link import (
    InviteInfo,
    InviteLinkCreate,
    InviteLinkCreated,
    InviteLinkRedeem,
    InviteLinkSummary,
    SuccessResponse,
)
from membership.schemas.member import MembershipJoined
from membership.services.invitations import InvitationEngine

router = CustomAPIRouter()


@router.post(
    "/workspaces/{workspace_public_id}/invite-links",
    response_model=InviteLinkCreated,
    status_code=status.HTTP_201_CREATED,
    responses={**RESP_AUTH_400_404},
)
async def create_invite_link(
    workspace_public_id: str,
    link_in: InviteLinkCreate,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    Create a single-use invite link. Requires the admin role.
    """
    expires_in = link_in.expires_in
    if expires_in is None:
        expires_in = settings.INVITE_LINK_DEFAULT_DAYS
    return await engine.generate_invite_link(
        workspace_public_id, current_user_id, role=link_in.role, expires_in_days=expires_in
    )


@router.get(
    "/workspaces/{workspace_public_id}/invite-links",
    response_model=List[InviteLinkSummary],
    responses={**RESP_AUTH_404},
)
async def list_invite_links(
    workspace_public_id: str,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    List unused, unexpired invite links. Requires the admin role.
    """
    return await engine.list_invite_links(workspace_public_id, current_user_id)


@router.delete(
    "/invite-links/{invite_link_id}",
    response_model=SuccessResponse,
    responses={**RESP_AUTH_404},
)
async def delete_invite_link(
    invite_link_id: str,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    return await engine.delete_invite_link(current_user_id, invite_link_id)


@router.post(
    "/invites/accept",
    response_model=MembershipJoined,
    responses={**RESP_400, **RESP_401, **RESP_404, **RESP_409},
)
async def redeem_invite_link(
    redeem_in: InviteLinkRedeem,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    Join a workspace with an invite code. No workspace role is needed; the
    code grants access.

    The redeeming account is the bearer token's subject, never a body field,
    so an anonymous call fails with 401 before the code is looked at.
    """
    return await engine.redeem_invite_link(redeem_in.invite_code, current_user_id)


@router.get(
    "/invites/{invite_code}/info",
    response_model=InviteInfo,
    responses={**RESP_404},
)
async def get_invite_info(
    invite_code: str,
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    Public preview of an invite link for the landing page.
    """
    return await engine.get_invite_info(invite_code)

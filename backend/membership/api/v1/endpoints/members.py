from typing import List

from fastapi import Depends, status

from membership.api import deps
from membership.api.router import CustomAPIRouter
from membership.api.v1.helpers.responses import RESP_409, RESP_500, RESP_AUTH_404
from membership.schemas.member import (
    MemberInvite,
    MemberInviteResponse,
    MemberResponse,
    MembershipJoined,
    OperationResult,
)
from membership.services.invitations import InvitationEngine

router = CustomAPIRouter()


@router.get(
    "/workspaces/{workspace_public_id}/members",
    response_model=List[MemberResponse],
    responses={**RESP_AUTH_404},
)
async def list_members(
    workspace_public_id: str,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    List the members of a workspace. Any member may call this.
    """
    return await engine.list_members(workspace_public_id, current_user_id)


@router.post(
    "/workspaces/{workspace_public_id}/members/invite",
    response_model=MemberInviteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**RESP_AUTH_404, **RESP_409, **RESP_500},
)
async def invite_member(
    workspace_public_id: str,
    invite_in: MemberInvite,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    Invite an email address to the workspace. Requires the admin role.

    The invitee receives a magic link; signing in through it accepts the invite.
    """
    return await engine.invite_by_email(workspace_public_id, current_user_id, invite_in.email)


@router.delete(
    "/workspaces/{workspace_public_id}/members/{member_public_id}",
    response_model=OperationResult,
    responses={**RESP_AUTH_404},
)
async def remove_member(
    workspace_public_id: str,
    member_public_id: str,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    Remove a member. Requires the admin role.

    ``secondary_failures`` lists side effects (seat release) that did not go
    through; the member is removed regardless.
    """
    return await engine.remove_member(workspace_public_id, current_user_id, member_public_id)


@router.post(
    "/members/{member_public_id}/accept",
    response_model=MembershipJoined,
    responses={**RESP_AUTH_404, **RESP_409},
)
async def accept_invite(
    member_public_id: str,
    current_user_id: str = Depends(deps.get_current_user_id),
    engine: InvitationEngine = Depends(deps.get_invitation_engine),
):
    """
    Accept an email invitation as the signed-in user.
    """
    return await engine.accept_invite(member_public_id, current_user_id)

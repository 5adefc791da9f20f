"""
Invitation Engine

Orchestrates workspace membership: email invites, invite links, acceptance,
removal and the seat adjustments that go with them. The engine keeps no state
of its own; every durable change is a store call and every precondition that
must hold under concurrency is expressed as a conditional update.

Seat policy:
    - Invite by email increments seats *before* the member row is written and
      aborts if the increment fails (never over-grant).
    - Removal decrements seats best-effort; a failure is reported in the
      OperationResult but never undoes the removal.
    - Invite link redemption does not touch seats (see _flag_unbilled_seat).
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Type

from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from membership.core import utc_now
from membership.core.config import Settings
from membership.core.constants import (
    DEPLOYMENT_MODE_CLOUD,
    DEPLOYMENT_MODES,
    INVITE_CALLBACK_PATH,
    INVITE_LINK_ROLES,
    MEMBER_ROLE_ADMIN,
    MEMBER_ROLE_MEMBER,
    MEMBER_STATUS_ACTIVE,
    MEMBER_STATUS_INVITED,
    PUBLIC_ID_LENGTH,
)
from membership.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InternalError,
    MembershipError,
    NotFoundError,
    UnauthorizedError,
)
from membership.core.metrics import (
    membership_invitations_total,
    membership_invite_links_total,
    membership_removals_total,
    membership_seat_sync_total,
)
from membership.core.security import generate_uid
from membership.models.invite_link import InviteLink
from membership.models.member import Member, normalize_email
from membership.models.subscription import SubscriptionView
from membership.models.workspace import Workspace
from membership.repositories import (
    InviteLinkRepository,
    MemberRepository,
    SubscriptionRepository,
    UserRepository,
    WorkspaceRepository,
)
from membership.schemas.invite_link import (
    InviteInfo,
    InviteLinkCreated,
    InviteLinkSummary,
    SuccessResponse,
)
from membership.schemas.member import (
    MemberInviteResponse,
    MemberResponse,
    MembershipJoined,
    OperationResult,
)
from membership.services.billing import BillingError, SeatSync
from membership.services.magic_link import MagicLinkSender
from membership.services.subscriptions import SubscriptionQuery

logger = logging.getLogger(__name__)

# Redemption never says which of absent/used/expired applied
INVALID_INVITE_LINK = "Invalid or expired invite link"


class InvitationEngine:
    def __init__(
        self,
        members: MemberRepository,
        invite_links: InviteLinkRepository,
        workspaces: WorkspaceRepository,
        users: UserRepository,
        subscriptions: SubscriptionQuery,
        seat_sync: SeatSync,
        magic_links: MagicLinkSender,
        deployment_mode: str,
        frontend_base_url: str,
        invite_code_length: int = PUBLIC_ID_LENGTH,
        invite_code_max_attempts: int = 3,
        max_link_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ):
        if deployment_mode not in DEPLOYMENT_MODES:
            raise ValueError(f"Unknown deployment mode: {deployment_mode}")
        self.members = members
        self.invite_links = invite_links
        self.workspaces = workspaces
        self.users = users
        self.subscriptions = subscriptions
        self.seat_sync = seat_sync
        self.magic_links = magic_links
        self.deployment_mode = deployment_mode
        self.frontend_base_url = frontend_base_url.rstrip("/")
        self.invite_code_length = invite_code_length
        self.invite_code_max_attempts = invite_code_max_attempts
        self.max_link_days = max_link_days
        self.clock = clock

    @classmethod
    def from_database(cls, db, settings: Settings) -> "InvitationEngine":
        """Wire the engine against a Motor database using application settings."""
        return cls(
            members=MemberRepository(db),
            invite_links=InviteLinkRepository(db),
            workspaces=WorkspaceRepository(db),
            users=UserRepository(db),
            subscriptions=SubscriptionQuery(SubscriptionRepository(db)),
            seat_sync=SeatSync(settings.STRIPE_SECRET_KEY, settings.STRIPE_TIMEOUT_SECONDS),
            magic_links=MagicLinkSender(
                settings.AUTH_BASE_URL,
                api_key=settings.AUTH_API_KEY,
                timeout=settings.AUTH_TIMEOUT_SECONDS,
            ),
            deployment_mode=settings.DEPLOYMENT_MODE,
            frontend_base_url=settings.FRONTEND_BASE_URL,
            invite_code_length=settings.INVITE_CODE_LENGTH,
            invite_code_max_attempts=settings.INVITE_CODE_MAX_ATTEMPTS,
            max_link_days=settings.INVITE_LINK_MAX_DAYS,
        )

    @property
    def is_cloud(self) -> bool:
        return self.deployment_mode == DEPLOYMENT_MODE_CLOUD

    # ------------------------------------------------------------------
    # Email invites
    # ------------------------------------------------------------------

    async def invite_by_email(
        self, workspace_public_id: str, inviter_id: Optional[str], email: str
    ) -> MemberInviteResponse:
        """
        Invite an email address to a workspace.

        Creates an ``invited`` member and asks the identity provider to send a
        magic link whose callback completes the invite. If the link cannot be
        sent the member is soft-deleted again so no undelivered invite lingers.
        """
        self._require_caller(inviter_id)
        email = normalize_email(email)

        workspace = await self._get_workspace(workspace_public_id)
        await self._assert_admin(workspace.id, inviter_id)

        if await self.members.get_by_email(workspace.id, email):
            membership_invitations_total.labels(outcome="conflict").inc()
            raise ConflictError(
                f"User with email {email} is already a member of this workspace"
            )

        seat_subscription_id = None
        if self.is_cloud:
            view = await self._require_paid_plan(workspace, NotFoundError)
            seat_subscription_id = view.seat_subscription_id
            if seat_subscription_id:
                try:
                    await self.seat_sync.increment(seat_subscription_id)
                except BillingError as e:
                    logger.error(f"Failed to update subscription seats for {workspace.public_id}: {e}")
                    membership_invitations_total.labels(outcome="billing_error").inc()
                    raise InternalError("Failed to update subscription for the new member.")

        # Any failure past the increment gives the seat back
        try:
            member = await self._create_invited_member(workspace, inviter_id, email)
            await self._dispatch_invite(member, inviter_id)
        except Exception:
            await self._revert_seat_increment(seat_subscription_id)
            raise

        membership_invitations_total.labels(outcome="sent").inc()
        logger.info(f"Invited {email} to workspace {workspace.public_id} as {member.public_id}")
        return MemberInviteResponse(id=member.id, public_id=member.public_id)

    async def _create_invited_member(self, workspace: Workspace, inviter_id: str, email: str) -> Member:
        try:
            existing_user = await self.users.get_by_email(email)
        except PyMongoError as e:
            logger.error(f"Failed to look up account for {email}: {e}")
            raise InternalError(f"Unable to invite user with email {email}")

        member = Member(
            workspace_id=workspace.id,
            email=email,
            user_id=existing_user.id if existing_user else None,
            created_by=inviter_id,
            role=MEMBER_ROLE_MEMBER,
            status=MEMBER_STATUS_INVITED,
            created_at=self.clock(),
        )

        try:
            await self.members.create(member)
        except DuplicateKeyError:
            membership_invitations_total.labels(outcome="conflict").inc()
            raise ConflictError(
                f"User with email {email} is already a member of this workspace"
            )
        except PyMongoError as e:
            logger.error(f"Failed to create invite for {email}: {e}")
            raise InternalError(f"Unable to invite user with email {email}")
        return member

    async def _dispatch_invite(self, member: Member, inviter_id: str) -> None:
        callback_url = INVITE_CALLBACK_PATH.format(member_public_id=member.public_id)
        if not await self.magic_links.send(member.email, callback_url):
            logger.error(
                f"Failed to send magic link invitation to {member.email} "
                f"(callback {callback_url}); withdrawing invite"
            )
            await self._withdraw_undelivered_invite(member, inviter_id)
            membership_invitations_total.labels(outcome="dispatch_error").inc()
            raise InternalError(
                f"Failed to send magic link invitation to user with email {member.email}."
            )

    async def accept_invite(self, member_public_id: str, user_id: Optional[str]) -> MembershipJoined:
        """
        Complete an email invite after the invitee signed in via the magic link.

        The ``invited -> active`` transition happens once. Repeating the call
        as the same account is a no-op success.
        """
        self._require_caller(user_id)

        member = await self.members.get_by_public_id(member_public_id)
        if member is None or member.is_deleted:
            raise NotFoundError(f"Invitation with public ID {member_public_id} not found")

        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if normalize_email(user.email) != member.email:
            raise ForbiddenError("This invitation was sent to a different email address")

        workspace = await self.workspaces.get_live_by_id(member.workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")

        joined = MembershipJoined(
            success=True,
            workspace_public_id=workspace.public_id,
            workspace_slug=workspace.slug,
        )

        if member.status == MEMBER_STATUS_ACTIVE:
            if member.user_id == user_id:
                return joined
            raise ConflictError("Invitation has already been accepted")

        if not await self.members.activate(member.id, user_id):
            current = await self.members.get_by_public_id(member_public_id)
            if current is not None and current.is_active and current.user_id == user_id:
                return joined
            raise ConflictError("Invitation is no longer pending")

        logger.info(f"Member {member_public_id} accepted invite to workspace {workspace.public_id}")
        return joined

    async def remove_member(
        self, workspace_public_id: str, admin_id: Optional[str], member_public_id: str
    ) -> OperationResult:
        """
        Soft-delete a member and release their seat.

        The removal is authoritative: a failed seat decrement is logged and
        listed in ``secondary_failures`` but the member stays removed.
        """
        self._require_caller(admin_id)

        workspace = await self._get_workspace(workspace_public_id)
        await self._assert_admin(workspace.id, admin_id)

        member = await self.members.get_by_public_id(member_public_id)
        if member is None or member.workspace_id != workspace.id:
            raise NotFoundError(f"Member with public ID {member_public_id} not found")

        if not await self.members.soft_delete(member.id, admin_id, self.clock()):
            raise NotFoundError(f"Member with public ID {member_public_id} not found")

        membership_removals_total.inc()
        logger.info(f"Removed member {member_public_id} from workspace {workspace.public_id}")

        result = OperationResult(success=True)
        if self.is_cloud:
            await self._release_seat(workspace, result)
        return result

    async def list_members(
        self, workspace_public_id: str, user_id: Optional[str]
    ) -> List[MemberResponse]:
        self._require_caller(user_id)

        workspace = await self._get_workspace(workspace_public_id)
        if await self.members.get_active_membership(workspace.id, user_id) is None:
            raise ForbiddenError("You are not a member of this workspace")

        members = await self.members.find_by_workspace(workspace.id)
        return [
            MemberResponse(
                public_id=m.public_id,
                email=m.email,
                role=m.role,
                status=m.status,
                user_id=m.user_id,
                created_at=m.created_at,
            )
            for m in members
        ]

    # ------------------------------------------------------------------
    # Invite links
    # ------------------------------------------------------------------

    async def generate_invite_link(
        self,
        workspace_public_id: str,
        admin_id: Optional[str],
        role: str = MEMBER_ROLE_MEMBER,
        expires_in_days: int = 7,
    ) -> InviteLinkCreated:
        """
        Create a shareable, single-use invite link.

        No seat is consumed here; the billing gate only checks that the
        workspace is on a paid plan.
        """
        self._require_caller(admin_id)
        if role not in INVITE_LINK_ROLES:
            raise BadRequestError(f"Role must be one of: {', '.join(INVITE_LINK_ROLES)}")
        if (
            isinstance(expires_in_days, bool)
            or not isinstance(expires_in_days, int)
            or not 1 <= expires_in_days <= self.max_link_days
        ):
            raise BadRequestError(f"expires_in must be between 1 and {self.max_link_days} days")

        workspace = await self._get_workspace(workspace_public_id)
        await self._assert_admin(workspace.id, admin_id)

        if self.is_cloud:
            await self._require_paid_plan(workspace, ForbiddenError)

        now = self.clock()
        expires_at = now + timedelta(days=expires_in_days)

        link = None
        for attempt in range(1, self.invite_code_max_attempts + 1):
            candidate = InviteLink(
                workspace_id=workspace.id,
                invite_code=generate_uid(self.invite_code_length),
                role=role,
                created_by=admin_id,
                created_at=now,
                expires_at=expires_at,
            )
            try:
                link = await self.invite_links.create(candidate)
                break
            except DuplicateKeyError:
                logger.warning(f"Invite code collision on attempt {attempt}, regenerating")

        if link is None:
            raise InternalError("Unable to create invite link")

        membership_invite_links_total.labels(event="created").inc()
        logger.info(
            f"Invite link {link.id} created for workspace {workspace.public_id} "
            f"(role={role}, expires_at={expires_at.isoformat()})"
        )
        return InviteLinkCreated(
            invite_link=f"{self.frontend_base_url}/invite/{link.invite_code}",
            invite_code=link.invite_code,
            expires_at=link.expires_at,
        )

    async def redeem_invite_link(self, invite_code: str, user_id: Optional[str]) -> MembershipJoined:
        """
        Join a workspace with an invite link. The code itself is the capability.

        The link is claimed with a conditional update before the member is
        written, so a link can back at most one membership. If the member
        cannot be written the claim is released.
        """
        now = self.clock()

        link = await self.invite_links.get_by_code(invite_code) if invite_code else None
        if link is None or not link.is_redeemable(now):
            membership_invite_links_total.labels(event="rejected").inc()
            raise BadRequestError(INVALID_INVITE_LINK)

        workspace = await self.workspaces.get_live_by_id(link.workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")

        if not user_id:
            raise NotFoundError("User not found")

        if await self.members.get_by_user(workspace.id, user_id):
            raise ConflictError("User is already a member of this workspace")

        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if await self.invite_links.claim(link.id, user_id, now) is None:
            membership_invite_links_total.labels(event="rejected").inc()
            raise BadRequestError(INVALID_INVITE_LINK)

        member = Member(
            workspace_id=workspace.id,
            email=user.email,
            user_id=user.id,
            created_by=link.created_by or user.id,
            role=link.role,
            status=MEMBER_STATUS_ACTIVE,
            created_at=now,
        )
        try:
            await self.members.create(member)
        except DuplicateKeyError:
            await self._release_claim(link, user_id)
            raise ConflictError("User with this email is already a member of this workspace")
        except PyMongoError as e:
            logger.error(f"Failed to create member from invite link {link.id}: {e}")
            await self._release_claim(link, user_id)
            raise InternalError("Unable to join workspace")

        membership_invite_links_total.labels(event="redeemed").inc()
        logger.info(
            f"User {user_id} joined workspace {workspace.public_id} via invite link {link.id} "
            f"as {link.role}"
        )

        if self.is_cloud:
            await self._flag_unbilled_seat(workspace, member)

        return MembershipJoined(
            success=True,
            workspace_public_id=workspace.public_id,
            workspace_slug=workspace.slug,
        )

    async def get_invite_info(self, invite_code: str) -> InviteInfo:
        """Public preview of an invite link. Read-only; works for used or expired links."""
        link = await self.invite_links.get_by_code(invite_code) if invite_code else None
        if link is None:
            raise NotFoundError("Invalid invite link")

        workspace = await self.workspaces.get_live_by_id(link.workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")

        inviter_name = None
        if link.created_by:
            try:
                inviter = await self.users.get_by_id(link.created_by)
                inviter_name = inviter.name if inviter else None
            except (PyMongoError, ValidationError) as e:
                logger.warning(f"Could not resolve inviter {link.created_by}: {e}")

        return InviteInfo(
            workspace_name=workspace.name,
            workspace_slug=workspace.slug,
            inviter_name=inviter_name or None,
            expires_at=link.expires_at,
            is_expired=link.is_expired(self.clock()),
            is_used=link.is_used,
        )

    async def list_invite_links(
        self, workspace_public_id: str, admin_id: Optional[str]
    ) -> List[InviteLinkSummary]:
        """Unused links that have not expired yet. Expired links stay stored but hidden."""
        self._require_caller(admin_id)

        workspace = await self._get_workspace(workspace_public_id)
        await self._assert_admin(workspace.id, admin_id)

        now = self.clock()
        links = await self.invite_links.find_unused_by_workspace(workspace.id)
        return [
            InviteLinkSummary(
                id=link.id,
                invite_code=link.invite_code,
                role=link.role,
                created_at=link.created_at,
                expires_at=link.expires_at,
            )
            for link in links
            if link.expires_at > now
        ]

    async def delete_invite_link(
        self, admin_id: Optional[str], invite_link_id: str
    ) -> SuccessResponse:
        self._require_caller(admin_id)

        link = await self.invite_links.get_by_id(invite_link_id)
        if link is None:
            raise NotFoundError("Invite link not found")

        await self._assert_admin(link.workspace_id, admin_id)

        if not await self.invite_links.delete(link.id):
            raise NotFoundError("Invite link not found")

        membership_invite_links_total.labels(event="deleted").inc()
        logger.info(f"Invite link {link.id} deleted by {admin_id}")
        return SuccessResponse(success=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_caller(user_id: Optional[str]) -> None:
        if not user_id:
            raise UnauthorizedError("User not authenticated")

    async def _get_workspace(self, workspace_public_id: str) -> Workspace:
        workspace = await self.workspaces.get_by_public_id(workspace_public_id)
        if workspace is None:
            raise NotFoundError(f"Workspace with public ID {workspace_public_id} not found")
        return workspace

    async def _assert_admin(self, workspace_id: str, user_id: str) -> None:
        membership = await self.members.get_active_membership(workspace_id, user_id)
        if membership is None or membership.role != MEMBER_ROLE_ADMIN:
            raise ForbiddenError("You do not have permission to manage this workspace")

    async def _require_paid_plan(
        self, workspace: Workspace, error_cls: Type[MembershipError]
    ) -> SubscriptionView:
        view = await self.subscriptions.get_view(workspace.public_id)
        if not view.has_paid_plan:
            raise error_cls(
                f"Workspace with public ID {workspace.public_id} does not have an active subscription"
            )
        return view

    async def _revert_seat_increment(self, subscription_id: Optional[str]) -> None:
        if not subscription_id:
            return
        try:
            await self.seat_sync.decrement(subscription_id)
        except BillingError as e:
            logger.warning(f"Failed to revert seat increment on {subscription_id}: {e}")

    async def _withdraw_undelivered_invite(self, member: Member, inviter_id: str) -> None:
        try:
            await self.members.soft_delete(member.id, inviter_id, self.clock())
        except PyMongoError as e:
            logger.error(f"Failed to withdraw undelivered invite {member.public_id}: {e}")

    async def _release_seat(self, workspace: Workspace, result: OperationResult) -> None:
        try:
            view = await self.subscriptions.get_view(workspace.public_id)
        except PyMongoError as e:
            logger.warning(f"Could not read subscriptions of {workspace.public_id}: {e}")
            result.secondary_failures.append("Subscription lookup failed; seat not released")
            return

        subscription_id = view.seat_subscription_id
        if not subscription_id:
            return
        try:
            await self.seat_sync.decrement(subscription_id)
        except BillingError as e:
            logger.warning(f"Failed to decrease subscription seats for {workspace.public_id}: {e}")
            result.secondary_failures.append("Failed to decrease subscription seats")

    async def _release_claim(self, link: InviteLink, user_id: str) -> None:
        try:
            if not await self.invite_links.release(link.id, user_id):
                logger.warning(f"Invite link {link.id} claim by {user_id} was already released")
        except PyMongoError as e:
            logger.error(f"Failed to release invite link {link.id} claimed by {user_id}: {e}")

    async def _flag_unbilled_seat(self, workspace: Workspace, member: Member) -> None:
        # Link redemption adds a member without adjusting seats
        try:
            view = await self.subscriptions.get_view(workspace.public_id)
        except PyMongoError as e:
            logger.warning(f"Could not read subscriptions of {workspace.public_id}: {e}")
            return
        if view.seat_subscription_id:
            membership_seat_sync_total.labels(direction="increment", outcome="skipped").inc()
            logger.warning(
                f"Member {member.public_id} joined seat-limited workspace {workspace.public_id} "
                f"via invite link; subscription seats were not adjusted"
            )

"""In-memory stand-ins for the membership repositories and external services.

The fake repositories keep documents as model copies and enforce the same
unique indexes and conditional-update semantics as the MongoDB ones, so engine
tests exercise the real control flow without a database.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

from pymongo.errors import DuplicateKeyError

from membership.core.constants import MEMBER_ROLE_ADMIN, MEMBER_STATUS_ACTIVE
from membership.models import InviteLink, Member, Subscription, User, Workspace
from membership.models.member import normalize_email
from membership.services.billing import SeatSync
from membership.services.invitations import InvitationEngine
from membership.services.magic_link import MagicLinkSender
from membership.services.subscriptions import SubscriptionQuery

WORKSPACE_ID = "ws-internal-1"
WORKSPACE_PUBLIC_ID = "wsPublic0001"
ADMIN_ID = "user-admin"
ADMIN_EMAIL = "admin@example.com"
USER_ID = "user-u"
USER_EMAIL = "u@example.com"
TEAM_STRIPE_ID = "sub_team_123"


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeMemberRepository:
    def __init__(self, docs: Dict[str, Member]):
        self.docs = docs

    def _live(self):
        return [m for m in self.docs.values() if m.deleted_at is None]

    async def get_by_id(self, id: str) -> Optional[Member]:
        m = self.docs.get(id)
        return m.model_copy() if m else None

    async def get_by_public_id(self, public_id: str) -> Optional[Member]:
        for m in self.docs.values():
            if m.public_id == public_id:
                return m.model_copy()
        return None

    async def get_by_email(self, workspace_id: str, email: str) -> Optional[Member]:
        email = normalize_email(email)
        for m in self._live():
            if m.workspace_id == workspace_id and m.email == email:
                return m.model_copy()
        return None

    async def get_by_user(self, workspace_id: str, user_id: str) -> Optional[Member]:
        for m in self._live():
            if m.workspace_id == workspace_id and m.user_id == user_id:
                return m.model_copy()
        return None

    async def get_active_membership(self, workspace_id: str, user_id: str) -> Optional[Member]:
        m = await self.get_by_user(workspace_id, user_id)
        if m and m.status == MEMBER_STATUS_ACTIVE:
            return m
        return None

    async def find_by_workspace(self, workspace_id: str, limit: int = 1000) -> List[Member]:
        members = [m.model_copy() for m in self._live() if m.workspace_id == workspace_id]
        return sorted(members, key=lambda m: m.created_at)[:limit]

    async def create(self, member: Member) -> Member:
        # Mirrors the partial unique index on (workspace_id, email)
        if member.deleted_at is None and any(
            m.workspace_id == member.workspace_id and m.email == member.email
            for m in self._live()
        ):
            raise DuplicateKeyError("E11000 duplicate key error: workspace_email_live_unique")
        if any(m.public_id == member.public_id for m in self.docs.values()):
            raise DuplicateKeyError("E11000 duplicate key error: public_id")
        self.docs[member.id] = member.model_copy()
        return member

    async def soft_delete(self, member_id: str, deleted_by: str, deleted_at: datetime) -> bool:
        m = self.docs.get(member_id)
        if m is None or m.deleted_at is not None:
            return False
        self.docs[member_id] = m.model_copy(update={"deleted_at": deleted_at, "deleted_by": deleted_by})
        return True

    async def activate(self, member_id: str, user_id: str) -> bool:
        m = self.docs.get(member_id)
        if m is None or m.deleted_at is not None or m.status != "invited":
            return False
        self.docs[member_id] = m.model_copy(update={"status": MEMBER_STATUS_ACTIVE, "user_id": user_id})
        return True


class FakeInviteLinkRepository:
    def __init__(self, docs: Dict[str, InviteLink]):
        self.docs = docs

    async def get_by_id(self, id: str) -> Optional[InviteLink]:
        link = self.docs.get(id)
        return link.model_copy() if link else None

    async def get_by_code(self, invite_code: str) -> Optional[InviteLink]:
        for link in self.docs.values():
            if link.invite_code == invite_code:
                return link.model_copy()
        return None

    async def find_unused_by_workspace(self, workspace_id: str, limit: int = 500) -> List[InviteLink]:
        links = [
            link.model_copy()
            for link in self.docs.values()
            if link.workspace_id == workspace_id and not link.is_used
        ]
        return sorted(links, key=lambda link: link.created_at, reverse=True)[:limit]

    async def create(self, link: InviteLink) -> InviteLink:
        if any(existing.invite_code == link.invite_code for existing in self.docs.values()):
            raise DuplicateKeyError("E11000 duplicate key error: invite_code")
        self.docs[link.id] = link.model_copy()
        return link

    async def claim(self, link_id: str, user_id: str, now: datetime) -> Optional[InviteLink]:
        link = self.docs.get(link_id)
        if link is None or link.is_used or link.expires_at < now:
            return None
        claimed = link.model_copy(update={"is_used": True, "used_at": now, "used_by": user_id})
        self.docs[link_id] = claimed
        return claimed.model_copy()

    async def release(self, link_id: str, user_id: str) -> bool:
        link = self.docs.get(link_id)
        if link is None or not link.is_used or link.used_by != user_id:
            return False
        self.docs[link_id] = link.model_copy(update={"is_used": False, "used_at": None, "used_by": None})
        return True

    async def delete(self, id: str) -> bool:
        return self.docs.pop(id, None) is not None


class FakeWorkspaceRepository:
    def __init__(self, docs: Dict[str, Workspace]):
        self.docs = docs

    async def get_by_public_id(self, public_id: str) -> Optional[Workspace]:
        for ws in self.docs.values():
            if ws.public_id == public_id and ws.deleted_at is None:
                return ws.model_copy()
        return None

    async def get_live_by_id(self, workspace_id: str) -> Optional[Workspace]:
        ws = self.docs.get(workspace_id)
        if ws is None or ws.deleted_at is not None:
            return None
        return ws.model_copy()


class FakeUserRepository:
    def __init__(self, docs: Dict[str, User]):
        self.docs = docs

    async def get_by_id(self, id: str) -> Optional[User]:
        user = self.docs.get(id)
        return user.model_copy() if user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        for user in self.docs.values():
            if user.email == email:
                return user.model_copy()
        return None


class FakeSubscriptionRepository:
    def __init__(self, docs: List[Subscription]):
        self.docs = docs

    async def find_by_reference_id(self, reference_id: str) -> List[Subscription]:
        return [s.model_copy() for s in self.docs if s.reference_id == reference_id]


class InMemoryStore:
    def __init__(self):
        self.members: Dict[str, Member] = {}
        self.invite_links: Dict[str, InviteLink] = {}
        self.workspaces: Dict[str, Workspace] = {}
        self.users: Dict[str, User] = {}
        self.subscriptions: List[Subscription] = []

    @classmethod
    def seeded(cls, now: datetime) -> "InMemoryStore":
        store = cls()
        store.add_workspace(WORKSPACE_ID, WORKSPACE_PUBLIC_ID, name="Acme", slug="acme")
        store.add_user(ADMIN_ID, ADMIN_EMAIL, name="Alice Admin")
        store.add_user(USER_ID, USER_EMAIL, name="Uma User")
        store.add_member(
            WORKSPACE_ID,
            ADMIN_EMAIL,
            user_id=ADMIN_ID,
            role=MEMBER_ROLE_ADMIN,
            status=MEMBER_STATUS_ACTIVE,
            created_at=now - timedelta(days=30),
        )
        return store

    def add_workspace(self, id: str, public_id: str, name: str = "Workspace", slug: str = "workspace") -> Workspace:
        ws = Workspace(_id=id, public_id=public_id, name=name, slug=slug)
        self.workspaces[id] = ws
        return ws

    def add_user(self, id: str, email: str, name: Optional[str] = None) -> User:
        user = User(_id=id, email=email, name=name)
        self.users[id] = user
        return user

    def add_member(self, workspace_id: str, email: str, **fields) -> Member:
        fields.setdefault("created_by", ADMIN_ID)
        member = Member(workspace_id=workspace_id, email=email, **fields)
        self.members[member.id] = member
        return member

    def add_invite_link(self, workspace_id: str, invite_code: str, expires_at: datetime, **fields) -> InviteLink:
        fields.setdefault("created_by", ADMIN_ID)
        link = InviteLink(workspace_id=workspace_id, invite_code=invite_code, expires_at=expires_at, **fields)
        self.invite_links[link.id] = link
        return link

    def add_subscription(self, plan: str, status: str = "active", **fields) -> Subscription:
        subscription = Subscription(
            _id=f"sub-{len(self.subscriptions) + 1}",
            reference_id=fields.pop("reference_id", WORKSPACE_PUBLIC_ID),
            plan=plan,
            status=status,
            **fields,
        )
        self.subscriptions.append(subscription)
        return subscription

    def live_members(self, workspace_id: str = WORKSPACE_ID) -> List[Member]:
        return [m for m in self.members.values() if m.workspace_id == workspace_id and m.deleted_at is None]

    def member_by_email(self, email: str) -> Optional[Member]:
        for m in self.members.values():
            if m.email == email and m.deleted_at is None:
                return m
        return None


def make_seat_sync(quantity: int = 2, error: Optional[Exception] = None):
    seat_sync = MagicMock(spec=SeatSync)
    seat_sync.increment = AsyncMock(return_value=quantity, side_effect=error)
    seat_sync.decrement = AsyncMock(return_value=quantity, side_effect=error)
    return seat_sync


def make_magic_links(sent: bool = True):
    magic_links = MagicMock(spec=MagicLinkSender)
    magic_links.send = AsyncMock(return_value=sent)
    return magic_links


def make_engine(
    store: InMemoryStore,
    clock: FakeClock,
    deployment_mode: str = "self_hosted",
    seat_sync=None,
    magic_links=None,
    **kwargs,
) -> InvitationEngine:
    return InvitationEngine(
        members=FakeMemberRepository(store.members),
        invite_links=FakeInviteLinkRepository(store.invite_links),
        workspaces=FakeWorkspaceRepository(store.workspaces),
        users=FakeUserRepository(store.users),
        subscriptions=SubscriptionQuery(FakeSubscriptionRepository(store.subscriptions)),
        seat_sync=seat_sync or make_seat_sync(),
        magic_links=magic_links or make_magic_links(),
        deployment_mode=deployment_mode,
        frontend_base_url="https://app.example.com",
        clock=clock,
        **kwargs,
    )

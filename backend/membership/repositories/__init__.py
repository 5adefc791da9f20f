"""
Repository Pattern for Database Access

Thin abstraction over the MongoDB collections the membership service reads
and writes.
"""

from membership.repositories.base import BaseRepository
from membership.repositories.invite_links import InviteLinkRepository
from membership.repositories.members import MemberRepository
from membership.repositories.subscriptions import SubscriptionRepository
from membership.repositories.users import UserRepository
from membership.repositories.workspaces import WorkspaceRepository

__all__ = [
    "BaseRepository",
    "InviteLinkRepository",
    "MemberRepository",
    "SubscriptionRepository",
    "UserRepository",
    "WorkspaceRepository",
]

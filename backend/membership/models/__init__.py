from membership.models.invite_link import InviteLink
from membership.models.member import Member
from membership.models.subscription import Subscription, SubscriptionView
from membership.models.user import User
from membership.models.workspace import Workspace

__all__ = [
    "InviteLink",
    "Member",
    "Subscription",
    "SubscriptionView",
    "User",
    "Workspace",
]

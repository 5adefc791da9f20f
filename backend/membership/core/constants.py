"""
Shared Constants

Centralized constants used across the application to ensure consistency.
"""

from typing import List

# Member roles
MEMBER_ROLE_ADMIN = "admin"
MEMBER_ROLE_MEMBER = "member"
MEMBER_ROLE_GUEST = "guest"

MEMBER_ROLES: List[str] = [MEMBER_ROLE_ADMIN, MEMBER_ROLE_MEMBER, MEMBER_ROLE_GUEST]

# Roles an invite link may grant
INVITE_LINK_ROLES: List[str] = [MEMBER_ROLE_MEMBER, MEMBER_ROLE_ADMIN]

# Member statuses
MEMBER_STATUS_INVITED = "invited"
MEMBER_STATUS_ACTIVE = "active"

MEMBER_STATUSES: List[str] = [MEMBER_STATUS_INVITED, MEMBER_STATUS_ACTIVE]

# Deployment modes
DEPLOYMENT_MODE_SELF_HOSTED = "self_hosted"
DEPLOYMENT_MODE_CLOUD = "cloud"

DEPLOYMENT_MODES: List[str] = [DEPLOYMENT_MODE_SELF_HOSTED, DEPLOYMENT_MODE_CLOUD]

# Subscription plans and statuses
PLAN_TEAM = "team"
PLAN_PRO = "pro"

ACTIVE_SUBSCRIPTION_STATUSES: List[str] = ["active", "trialing"]

# Public identifiers
PUBLIC_ID_LENGTH = 12
PUBLIC_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Callback the identity provider redirects to after magic-link sign-in
INVITE_CALLBACK_PATH = "/boards?type=invite&memberPublicId={member_public_id}"

# Collections
MEMBERS_COLLECTION = "members"
INVITE_LINKS_COLLECTION = "workspace_invite_links"
WORKSPACES_COLLECTION = "workspaces"
USERS_COLLECTION = "users"
SUBSCRIPTIONS_COLLECTION = "subscriptions"

"""Shared fixtures for API endpoint tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from membership.services.invitations import InvitationEngine


@pytest.fixture
def engine():
    """Invitation engine double; each operation is an AsyncMock."""
    mock = MagicMock(spec=InvitationEngine)
    for name in [
        "invite_by_email",
        "remove_member",
        "list_members",
        "accept_invite",
        "generate_invite_link",
        "redeem_invite_link",
        "get_invite_info",
        "list_invite_links",
        "delete_invite_link",
    ]:
        setattr(mock, name, AsyncMock())
    return mock

"""Tests for index creation."""

import asyncio

from membership.core.init_db import create_indexes
from tests.mocks.mongodb import create_mock_collection, create_mock_db


def test_members_get_partial_unique_email_index():
    members = create_mock_collection()
    db = create_mock_db({"members": members})

    asyncio.run(create_indexes(db))

    unique_email = [
        c for c in members.create_index.call_args_list if c.kwargs.get("name") == "workspace_email_live_unique"
    ]
    assert len(unique_email) == 1
    assert unique_email[0].kwargs["unique"] is True
    assert unique_email[0].kwargs["partialFilterExpression"] == {"deleted_at": {"$type": "null"}}


def test_invite_code_is_unique():
    links = create_mock_collection()
    db = create_mock_db({"workspace_invite_links": links})

    asyncio.run(create_indexes(db))

    links.create_index.assert_any_await("invite_code", unique=True)

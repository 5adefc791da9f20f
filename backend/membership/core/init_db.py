import logging

import pymongo

from membership.core.constants import (
    INVITE_LINKS_COLLECTION,
    MEMBERS_COLLECTION,
    SUBSCRIPTIONS_COLLECTION,
)
from membership.db.mongodb import get_database

logger = logging.getLogger(__name__)


async def create_indexes(db):
    """Creates the indexes the membership collections rely on."""
    logger.info("Creating database indexes...")

    # Members
    await db[MEMBERS_COLLECTION].create_index("public_id", unique=True)
    await db[MEMBERS_COLLECTION].create_index(
        [("workspace_id", pymongo.ASCENDING), ("user_id", pymongo.ASCENDING)]
    )
    # At most one live member per (workspace, email). Two invites racing past
    # the pre-check collide here and surface as DuplicateKeyError.
    await db[MEMBERS_COLLECTION].create_index(
        [("workspace_id", pymongo.ASCENDING), ("email", pymongo.ASCENDING)],
        unique=True,
        partialFilterExpression={"deleted_at": {"$type": "null"}},
        name="workspace_email_live_unique",
    )

    # Invite links
    await db[INVITE_LINKS_COLLECTION].create_index("invite_code", unique=True)
    await db[INVITE_LINKS_COLLECTION].create_index("workspace_id")
    await db[INVITE_LINKS_COLLECTION].create_index(
        [("workspace_id", pymongo.ASCENDING), ("is_used", pymongo.ASCENDING)]
    )

    # Subscriptions (read model)
    await db[SUBSCRIPTIONS_COLLECTION].create_index("reference_id")

    logger.info("Database indexes created")


async def init_db():
    db = await get_database()
    await create_indexes(db)

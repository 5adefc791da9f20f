from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from membership.core.config import settings
from membership.core.errors import UnauthorizedError
from membership.core.security import decode_access_token
from membership.db.mongodb import get_database
from membership.services.invitations import InvitationEngine

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Resolve the caller's user id from the identity provider's bearer token."""
    if credentials is None:
        raise UnauthorizedError("Could not validate credentials")

    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        raise UnauthorizedError("Could not validate credentials")
    return user_id


async def get_invitation_engine(
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> InvitationEngine:
    return InvitationEngine.from_database(db, settings)

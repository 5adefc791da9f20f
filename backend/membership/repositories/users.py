"""
User Repository

Identity lookup against the accounts written by the identity provider.
"""

from typing import Optional

from membership.core.constants import USERS_COLLECTION
from membership.models.member import normalize_email
from membership.models.user import User
from membership.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    collection_name = USERS_COLLECTION
    model_class = User

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (normalized) email."""
        return await self.find_one({"email": normalize_email(email)})

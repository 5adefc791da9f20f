"""
Base Repository Pattern

Generic base class shared by the membership repositories.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Generic base repository providing common read/write operations.

    Type Parameters:
        T: The Pydantic model class this repository manages

    Usage:
        class MemberRepository(BaseRepository[Member]):
            collection_name = "members"
            model_class = Member
    """

    collection_name: str
    model_class: Type[T]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection: AsyncIOMotorCollection = db[self.collection_name]

    def _to_model(self, data: Optional[Dict[str, Any]]) -> Optional[T]:
        if data is None:
            return None
        return self.model_class(**data)

    def _to_model_list(self, docs: List[Dict[str, Any]]) -> List[T]:
        return [self.model_class(**doc) for doc in docs]

    async def get_by_id(self, id: str) -> Optional[T]:
        """Get a document by ID and return as model instance."""
        data = await self.collection.find_one({"_id": id})
        return self._to_model(data)

    async def find_one(self, query: Dict[str, Any]) -> Optional[T]:
        data = await self.collection.find_one(query)
        return self._to_model(data)

    async def find_many(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort_by: Optional[str] = None,
        sort_order: int = 1,
    ) -> List[T]:
        """Find multiple documents and return as model instances."""
        cursor = self.collection.find(query)
        if sort_by:
            cursor = cursor.sort(sort_by, sort_order)
        cursor = cursor.skip(skip).limit(limit)
        docs = await cursor.to_list(limit)
        return self._to_model_list(docs)

    async def exists(self, query: Dict[str, Any]) -> bool:
        return await self.collection.find_one(query) is not None

    async def create(self, model: T) -> T:
        """Insert a model. Unique index violations propagate as DuplicateKeyError."""
        await self.collection.insert_one(model.model_dump(by_alias=True))
        return model

    async def delete(self, id: str) -> bool:
        """Hard-delete a document by ID. False when nothing matched."""
        result = await self.collection.delete_one({"_id": id})
        return result.deleted_count > 0

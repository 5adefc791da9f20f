"""Mock MongoDB objects for testing repository logic without a real database."""

from unittest.mock import AsyncMock, MagicMock


def create_mock_collection(**method_returns):
    """Create a mock MongoDB collection with AsyncMock methods.

    Args:
        **method_returns: Override default return values.
            Supported keys: find_one, find (list), find_one_and_update,
            modified_count (int), deleted_count (int).
    """
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=method_returns.get("find_one"))
    collection.insert_one = AsyncMock(
        return_value=MagicMock(inserted_id="mock-id")
    )
    collection.update_one = AsyncMock(
        return_value=MagicMock(modified_count=method_returns.get("modified_count", 1))
    )
    collection.find_one_and_update = AsyncMock(
        return_value=method_returns.get("find_one_and_update")
    )
    collection.delete_one = AsyncMock(
        return_value=MagicMock(deleted_count=method_returns.get("deleted_count", 1))
    )
    collection.create_index = AsyncMock(return_value="index")

    # find() returns a chainable cursor mock
    cursor = MagicMock()
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=method_returns.get("find", []))
    collection.find = MagicMock(return_value=cursor)

    return collection


def create_mock_db(collection_map=None):
    """Create a mock database with named collections.

    Collections are reachable both as attributes and by subscription
    (``db["members"]``), the way repositories access them.

    Args:
        collection_map: Dict mapping collection names to mock collections.
    """
    collection_map = dict(collection_map or {})
    db = MagicMock()
    for name, coll in collection_map.items():
        setattr(db, name, coll)
    db.__getitem__.side_effect = lambda name: collection_map.setdefault(
        name, create_mock_collection()
    )
    return db

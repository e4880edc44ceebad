from typing import Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from app.core.exceptions import PersistenceError
from app.core.mongodb import get_key_value_collection


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local slots; contents are lost on restart."""

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    async def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    async def remove(self, key: str) -> None:
        self._slots.pop(key, None)


class MongoKeyValueStore:
    """One document per slot: ``{"_id": key, "value": <serialized string>}``."""

    def __init__(self, collection: Optional[AsyncIOMotorCollection] = None) -> None:
        self._collection = collection

    @property
    def collection(self) -> AsyncIOMotorCollection:
        if self._collection is None:
            self._collection = get_key_value_collection()
        return self._collection

    async def get(self, key: str) -> Optional[str]:
        try:
            item = await self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read slot '{key}': {e}") from e
        if not item:
            return None
        return item.get("value")

    async def set(self, key: str, value: str) -> None:
        try:
            await self.collection.replace_one(
                {"_id": key}, {"_id": key, "value": value}, upsert=True
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to write slot '{key}': {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await self.collection.delete_one({"_id": key})
        except PyMongoError as e:
            raise PersistenceError(f"Failed to remove slot '{key}': {e}") from e

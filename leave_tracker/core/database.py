"""
Document store manager for the leave tracker.
- Single lazily-established MongoDB connection (pool size 1)
- Permanent fallback to an in-process store when MongoDB is unavailable
- One collection interface shared by both backends
"""
import copy
import itertools
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from leave_tracker.constants.constants import (
    DEFAULT_EMPLOYEE_NAMES,
    LEAVES_COLLECTION,
    USERS_COLLECTION,
    UserRole,
)
from leave_tracker.core.config import Settings
from leave_tracker.models.base import utcnow
from leave_tracker.models.identifiers import DocumentId, same_id

logger = logging.getLogger(__name__)

Sort = Sequence[Tuple[str, int]]

# Fields compared by string form in the in-memory backend.
ID_FIELDS = ("_id", "user_id")


class StoreMode(str, Enum):
    uninitialized = "uninitialized"
    live = "live"
    degraded = "degraded"


class MongoCollection:
    """Collection operations against MongoDB."""

    def __init__(self, collection):
        self._collection = collection

    async def find(self, filter: Optional[Dict[str, Any]] = None, sort: Optional[Sort] = None) -> List[Dict[str, Any]]:
        cursor = self._collection.find(filter or {})
        if sort:
            cursor = cursor.sort(list(sort))
        return await cursor.to_list(None)

    async def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one(filter)

    async def insert_one(self, document: Dict[str, Any]) -> Any:
        result = await self._collection.insert_one(document)
        return result.inserted_id

    async def insert_many(self, documents: Iterable[Dict[str, Any]]) -> List[Any]:
        result = await self._collection.insert_many(list(documents))
        return list(result.inserted_ids)

    async def update_one(self, filter: Dict[str, Any], changes: Dict[str, Any]) -> int:
        result = await self._collection.update_one(filter, {"$set": changes})
        return result.matched_count

    async def delete_one(self, filter: Dict[str, Any]) -> int:
        result = await self._collection.delete_one(filter)
        return result.deleted_count

    async def delete_many(self, filter: Optional[Dict[str, Any]] = None) -> int:
        result = await self._collection.delete_many(filter or {})
        return result.deleted_count

    async def count_documents(self, filter: Optional[Dict[str, Any]] = None) -> int:
        return await self._collection.count_documents(filter or {})


class MemoryCollection:
    """Collection operations against a process-local list.

    No locking: concurrent writers follow last-write-wins.
    """

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

    @staticmethod
    def _matches(document: Dict[str, Any], filter: Optional[Dict[str, Any]]) -> bool:
        for key, expected in (filter or {}).items():
            if key in ID_FIELDS:
                if not same_id(document.get(key), expected):
                    return False
            elif document.get(key) != expected:
                return False
        return True

    async def find(self, filter: Optional[Dict[str, Any]] = None, sort: Optional[Sort] = None) -> List[Dict[str, Any]]:
        found = [copy.deepcopy(d) for d in self.documents if self._matches(d, filter)]
        for field, direction in reversed(list(sort or [])):
            found.sort(key=lambda d: (d.get(field) is not None, d.get(field)), reverse=direction < 0)
        return found

    async def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for document in self.documents:
            if self._matches(document, filter):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document: Dict[str, Any]) -> Any:
        stored = copy.deepcopy(document)
        stored.setdefault("_id", next(self._ids))
        self.documents.append(stored)
        document["_id"] = stored["_id"]
        return stored["_id"]

    async def insert_many(self, documents: Iterable[Dict[str, Any]]) -> List[Any]:
        return [await self.insert_one(d) for d in documents]

    async def update_one(self, filter: Dict[str, Any], changes: Dict[str, Any]) -> int:
        for document in self.documents:
            if self._matches(document, filter):
                document.update(copy.deepcopy(changes))
                return 1
        return 0

    async def delete_one(self, filter: Dict[str, Any]) -> int:
        for index, document in enumerate(self.documents):
            if self._matches(document, filter):
                del self.documents[index]
                return 1
        return 0

    async def delete_many(self, filter: Optional[Dict[str, Any]] = None) -> int:
        kept = [d for d in self.documents if not self._matches(d, filter)]
        deleted = len(self.documents) - len(kept)
        self.documents = kept
        return deleted

    async def count_documents(self, filter: Optional[Dict[str, Any]] = None) -> int:
        return sum(1 for d in self.documents if self._matches(d, filter))


def default_employee_documents() -> List[Dict[str, Any]]:
    return [
        {"name": name, "role": UserRole.employee.value, "created_at": utcnow()}
        for name in DEFAULT_EMPLOYEE_NAMES
    ]


class DocumentStoreManager:
    """Owns the MongoDB connection or its in-memory replacement."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: Optional[AsyncMongoClient] = None
        self.database = None
        self.mode = StoreMode.uninitialized
        self._memory: Dict[str, MemoryCollection] = {}

    async def init(self):
        """Connect on first use; any failure degrades for the process lifetime."""
        if self.mode is not StoreMode.uninitialized:
            return

        if not self.settings.USE_DOCUMENT_DATABASE:
            logger.warning("MONGODB_URI not set, using in-memory fallback")
            await self._degrade()
            return

        try:
            self.client = AsyncMongoClient(
                self.settings.MONGODB_URI,
                serverSelectionTimeoutMS=self.settings.MONGODB_TIMEOUT_MS,
                connectTimeoutMS=self.settings.MONGODB_TIMEOUT_MS,
                maxPoolSize=1,
                minPoolSize=0,
                tz_aware=True,
            )
            await self.client.admin.command("ping")
            self.database = self.client[self.settings.MONGODB_DB_NAME]
            self.mode = StoreMode.live
            logger.info("MongoDB connected successfully")
        except (PyMongoError, ValueError, TypeError) as e:
            logger.error(f"MongoDB connection error: {e}")
            await self._discard_client()
            await self._degrade()

    async def _degrade(self):
        self.mode = StoreMode.degraded
        self._memory = {
            USERS_COLLECTION: MemoryCollection(USERS_COLLECTION),
            LEAVES_COLLECTION: MemoryCollection(LEAVES_COLLECTION),
        }
        if self.settings.SEED_DEFAULT_EMPLOYEES:
            await self._memory[USERS_COLLECTION].insert_many(default_employee_documents())

    async def _discard_client(self):
        if self.client is not None:
            try:
                await self.client.close()
            except PyMongoError as e:
                logger.warning(f"Error closing MongoDB client: {e}")
        self.client = None
        self.database = None

    async def collection(self, name: str):
        """Collection handle for ``name`` on whichever backend is active."""
        await self.init()
        if self.mode is StoreMode.live:
            return MongoCollection(self.database[name])
        if name not in self._memory:
            self._memory[name] = MemoryCollection(name)
        return self._memory[name]

    @property
    def is_ephemeral(self) -> bool:
        return self.mode is StoreMode.degraded

    @property
    def native_ids(self) -> bool:
        return self.mode is StoreMode.live

    def query_id(self, raw: Any) -> Any:
        """Identifier value to use in a filter on the active backend."""
        return DocumentId.from_external(raw).for_backend(self.native_ids)

    async def close(self):
        """Cleanup the connection"""
        await self._discard_client()
        if self.mode is StoreMode.live:
            self.mode = StoreMode.uninitialized


async def aget_store(request: Request) -> DocumentStoreManager:
    """
    FastAPI dependency for the application's document store
    Usage:
    @router.get("/")
    async def endpoint(store: DocumentStoreManager = Depends(aget_store)):
        ...
    """
    return request.app.state.document_store

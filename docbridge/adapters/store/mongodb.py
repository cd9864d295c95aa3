"""MongoDB document store adapter.

Implements DocumentStorePort using pymongo's AsyncMongoClient. One client
is created lazily per store instance and shared by every operation; the
driver manages its own connection pool.
"""

import asyncio
import logging
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from docbridge.core.errors import DuplicateKeyError
from docbridge.core.models import NativeId, UpdateOutcome
from docbridge.core.ports import Document, DocumentStorePort

logger = logging.getLogger(__name__)

# Type alias for MongoDB documents (schemaless by design)
MongoDocument = dict[str, Any]


def to_bson(value: Any) -> Any:
    """Convert core values (NativeId) into driver values (ObjectId), recursively."""
    if isinstance(value, NativeId):
        return ObjectId(value.value)
    if isinstance(value, dict):
        return {key: to_bson(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_bson(item) for item in value]
    return value


def from_bson(value: Any) -> Any:
    """Convert driver values (ObjectId) into core values (NativeId), recursively."""
    if isinstance(value, ObjectId):
        return NativeId(str(value))
    if isinstance(value, dict):
        return {key: from_bson(item) for key, item in value.items()}
    if isinstance(value, list):
        return [from_bson(item) for item in value]
    return value


class MongoDocumentStore(DocumentStorePort):
    """MongoDB-backed document store with a lazily created shared client."""

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        database: str = "docbridge",
        server_selection_timeout_ms: int = 5000,
        max_pool_size: int = 100,
        tz_aware: bool = True,
        client: AsyncMongoClient[MongoDocument] | None = None,
    ):
        """Initialize the store.

        Args:
            url: MongoDB connection URI.
            database: Database name.
            server_selection_timeout_ms: How long operations wait for a
                reachable server before raising.
            max_pool_size: Maximum connections in the driver's pool.
            tz_aware: Return timezone-aware datetimes.
            client: Pre-built client to use instead of creating one.
        """
        self.url = url
        self.database = database
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.max_pool_size = max_pool_size
        self.tz_aware = tz_aware
        self._client = client
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> AsyncMongoClient[MongoDocument]:
        """Create the client on first use."""
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is None:
                self._client = AsyncMongoClient(
                    self.url,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    maxPoolSize=self.max_pool_size,
                    tz_aware=self.tz_aware,
                )
                logger.info(f"MongoDB client created for database {self.database}")
        return self._client

    async def _database(self) -> AsyncDatabase[MongoDocument]:
        client = await self._get_client()
        return client[self.database]

    async def _collection(self, name: str) -> AsyncCollection[MongoDocument]:
        db = await self._database()
        return db[name]

    async def insert_one(self, collection: str, document: Document) -> NativeId | str:
        """Insert a document, letting the driver generate an ObjectId if needed."""
        coll = await self._collection(collection)
        try:
            result = await coll.insert_one(to_bson(document))
        except MongoDuplicateKeyError as e:
            record_id = document.get("_id")
            logger.warning(f"Duplicate key inserting into {collection}: {record_id}")
            raise DuplicateKeyError(collection, record_id) from e
        return from_bson(result.inserted_id)

    async def find(
        self,
        collection: str,
        query: Document,
        projection: dict[str, int] | None = None,
        sort: list[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        """Run a query and return every matching document."""
        coll = await self._collection(collection)
        cursor = coll.find(to_bson(query), projection)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        documents = await cursor.to_list(None)
        return [from_bson(doc) for doc in documents]

    async def find_one(
        self,
        collection: str,
        query: Document,
        projection: dict[str, int] | None = None,
    ) -> Document | None:
        coll = await self._collection(collection)
        document = await coll.find_one(to_bson(query), projection)
        if document is None:
            return None
        return from_bson(document)

    async def update_one(
        self,
        collection: str,
        query: Document,
        update: Document,
        upsert: bool = False,
    ) -> UpdateOutcome:
        coll = await self._collection(collection)
        try:
            result = await coll.update_one(to_bson(query), to_bson(update), upsert=upsert)
        except MongoDuplicateKeyError as e:
            record_id = query.get("_id")
            logger.warning(f"Duplicate key updating {collection}: {record_id}")
            raise DuplicateKeyError(collection, record_id) from e
        return UpdateOutcome(
            matched=result.matched_count,
            modified=result.modified_count,
            upserted_id=from_bson(result.upserted_id),
        )

    async def update_many(self, collection: str, query: Document, update: Document) -> int:
        coll = await self._collection(collection)
        try:
            result = await coll.update_many(to_bson(query), to_bson(update))
        except MongoDuplicateKeyError as e:
            raise DuplicateKeyError(collection, None) from e
        return result.matched_count

    async def delete_one(self, collection: str, query: Document) -> int:
        coll = await self._collection(collection)
        result = await coll.delete_one(to_bson(query))
        return result.deleted_count

    async def delete_many(self, collection: str, query: Document) -> int:
        coll = await self._collection(collection)
        result = await coll.delete_many(to_bson(query))
        return result.deleted_count

    async def count(self, collection: str, query: Document) -> int:
        coll = await self._collection(collection)
        return await coll.count_documents(to_bson(query))

    async def create_index(self, collection: str, field: str, unique: bool = False) -> str:
        coll = await self._collection(collection)
        name = await coll.create_index([(field, ASCENDING)], unique=unique)
        logger.debug(f"Index {name} ensured on {collection}.{field} (unique={unique})")
        return name

    async def ping(self) -> None:
        client = await self._get_client()
        await client.admin.command("ping")

    async def close(self) -> None:
        """Close the shared client, if one was created."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB client closed")


__all__ = ["MongoDocumentStore", "from_bson", "to_bson"]

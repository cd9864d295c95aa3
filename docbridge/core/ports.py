"""Port interfaces for docbridge.

These abstract base classes define the boundary between the ORM core and
the document database driver. Implementations live in the adapters/
package (MongoDB) and in tests/fakes (in-memory).

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - DocumentStorePort: collection-level CRUD, counting and indexing

Documents crossing this port are plain dicts keyed by stored field names
(the identifier lives in "_id"). Native identifiers are carried as
NativeId values; adapters convert them to and from the driver's own type.
Query, projection and sort arguments use MongoDB's query language, as
produced by core.query.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import NativeId, UpdateOutcome

Document = dict[str, Any]


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class DocumentStorePort(ABC):
    """Port for reading and writing documents in named collections.

    Implementations must handle:
    - Identifier generation when an inserted document has no "_id"
    - Conversion between NativeId and the driver's identifier type
    - Reporting identifier collisions as core DuplicateKeyError
    - Connection reuse across operations (one client per data source)

    Implementations must NOT retry failed operations or wrap driver errors
    other than duplicate keys; those propagate to the caller unchanged.
    """

    @abstractmethod
    async def insert_one(self, collection: str, document: Document) -> NativeId | str:
        """Insert a single document.

        Args:
            collection: Collection name.
            document: Document to insert. If it has no "_id", the store
                assigns a newly generated NativeId.

        Returns:
            The stored identifier.

        Raises:
            DuplicateKeyError: If "_id" (or a unique-indexed field) collides
                with an existing document.
            Exception: If the database is unavailable.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        query: Document,
        projection: dict[str, int] | None = None,
        sort: list[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        """Return all documents matching `query`.

        Args:
            collection: Collection name.
            query: MongoDB query document; {} matches everything.
            projection: Optional projection document.
            sort: Optional list of (field, 1 | -1) pairs.
            skip: Number of matching documents to skip.
            limit: Maximum number of documents; 0 means no limit.

        Returns:
            Matching documents, empty if none.

        Raises:
            Exception: If the database is unavailable.
        """

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        query: Document,
        projection: dict[str, int] | None = None,
    ) -> Document | None:
        """Return the first document matching `query`, or None."""

    @abstractmethod
    async def update_one(
        self,
        collection: str,
        query: Document,
        update: Document,
        upsert: bool = False,
    ) -> UpdateOutcome:
        """Apply an update document ($set / $unset) to the first match.

        Args:
            collection: Collection name.
            query: Selects the document to update.
            update: MongoDB update document.
            upsert: Insert a new document built from `query` and `update`
                when nothing matches.

        Returns:
            Matched / modified counts and the upserted id, if any.

        Raises:
            DuplicateKeyError: If the write violates a unique index.
            Exception: If the database is unavailable.
        """

    @abstractmethod
    async def update_many(self, collection: str, query: Document, update: Document) -> int:
        """Apply an update document to every match.

        Returns:
            Number of matched documents.
        """

    @abstractmethod
    async def delete_one(self, collection: str, query: Document) -> int:
        """Delete the first document matching `query`.

        Returns:
            Number of deleted documents (0 or 1).
        """

    @abstractmethod
    async def delete_many(self, collection: str, query: Document) -> int:
        """Delete every document matching `query` ({} deletes all).

        Returns:
            Number of deleted documents.
        """

    @abstractmethod
    async def count(self, collection: str, query: Document) -> int:
        """Count documents matching `query`."""

    @abstractmethod
    async def create_index(self, collection: str, field: str, unique: bool = False) -> str:
        """Create an ascending single-field index if it does not exist.

        Returns:
            The index name.
        """

    @abstractmethod
    async def ping(self) -> None:
        """Check that the database is reachable.

        Raises:
            Exception: If the database is unavailable.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""

"""Explicit association queries between record types.

Relations are plain objects returned by DataSource.has_many() and
DataSource.belongs_to(); traversal is an ordinary method call taking the
parent identifier and an optional child filter.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .errors import NotFoundError
from .models import Filter, Record, RelationDescriptor
from .repository import FilterLike, Model, identifier_of

logger = logging.getLogger(__name__)


def scoped_where(
    where: Mapping[str, Any] | None, foreign_key: str, parent_id: Any
) -> dict[str, Any]:
    """Restrict a child `where` clause to the children of one parent."""
    scope = {foreign_key: parent_id}
    if not where:
        return scope
    if foreign_key in where:
        return {"and": [scope, dict(where)]}
    return {**where, **scope}


class HasMany:
    """A parent record type owning zero or more child records.

    A parent without an identifier (e.g. a record fetched with the id
    projected out) owns no children.
    """

    def __init__(self, descriptor: RelationDescriptor, parent: Model, child: Model):
        self.descriptor = descriptor
        self.parent = parent
        self.child = child

    @property
    def foreign_key(self) -> str:
        return self.descriptor.foreign_key

    async def find(self, parent: Any, query_filter: FilterLike = None) -> list[Record]:
        """Return the children of `parent` that match `query_filter`.

        Args:
            parent: Parent record or parent identifier.
            query_filter: Optional filter applied to the children.
        """
        parent_id = identifier_of(parent)
        if parent_id is None:
            return []
        current = Filter.coerce(query_filter)
        scoped = Filter(
            where=scoped_where(current.where, self.foreign_key, parent_id),
            fields=current.fields,
            order=current.order,
            limit=current.limit,
            skip=current.skip,
        )
        return await self.child.find(scoped)

    async def count(self, parent: Any, where: Mapping[str, Any] | None = None) -> int:
        parent_id = identifier_of(parent)
        if parent_id is None:
            return 0
        return await self.child.count(scoped_where(where, self.foreign_key, parent_id))

    async def create(self, parent: Any, data: Mapping[str, Any] | None = None) -> Record:
        """Create a child record linked to `parent`.

        Raises:
            NotFoundError: If `parent` has no identifier.
        """
        parent_id = identifier_of(parent)
        if parent_id is None:
            raise NotFoundError(self.parent.name, None)
        payload = dict(data or {})
        payload[self.foreign_key] = parent_id
        return await self.child.create(payload)

    async def destroy_all(self, parent: Any, where: Mapping[str, Any] | None = None) -> int:
        """Delete the children of `parent` matching `where`."""
        parent_id = identifier_of(parent)
        if parent_id is None:
            return 0
        deleted = await self.child.destroy_all(
            scoped_where(where, self.foreign_key, parent_id)
        )
        logger.debug(
            f"Deleted {deleted} {self.child.name} record(s) via {self.descriptor.name}"
        )
        return deleted


class BelongsTo:
    """A child record type referencing its parent through a foreign key."""

    def __init__(self, descriptor: RelationDescriptor, child: Model, parent: Model):
        self.descriptor = descriptor
        self.child = child
        self.parent = parent

    @property
    def foreign_key(self) -> str:
        return self.descriptor.foreign_key

    async def get(self, child: Mapping[str, Any]) -> Record | None:
        """Return the parent of `child`, or None if it has no parent."""
        parent_id = child.get(self.foreign_key)
        if parent_id is None:
            return None
        return await self.parent.find_by_id(parent_id)

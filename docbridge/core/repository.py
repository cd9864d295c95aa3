"""CRUD façade for a single record type.

Model turns ORM-style calls (create, find, find_by_id, update_or_create,
destroy_all, ...) into store port calls: identifiers go through the
normalizer, filters through the query translator, and stored documents are
mapped back into Records.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .errors import NotFoundError, ValidationError
from .identifiers import to_presentation, to_storage
from .models import Filter, NativeId, Record, SchemaDescriptor
from .ports import Document, DocumentStorePort
from .query import ID_FIELD, translate_filter, translate_where

logger = logging.getLogger(__name__)

FilterLike = Filter | Mapping[str, Any] | None


class Model:
    """Data access for one record type, bound to a document store.

    Instances are created by DataSource.define(); the schema is resolved
    once there and never re-read from configuration at call time.
    """

    def __init__(self, schema: SchemaDescriptor, store: DocumentStorePort):
        """Initialize the model.

        Args:
            schema: Explicit schema of the record type.
            store: DocumentStorePort implementation for persistence.
        """
        self.schema = schema
        self.store = store
        self._reference_fields: set[str] = {
            f.name for f in schema.fields if f.type is NativeId
        }

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def collection(self) -> str:
        return self.schema.collection

    @property
    def reference_fields(self) -> frozenset[str]:
        """Fields holding identifiers of other records (foreign keys)."""
        return frozenset(self._reference_fields)

    def add_reference_field(self, name: str) -> None:
        """Mark `name` as holding record identifiers (called for relations)."""
        self._reference_fields.add(name)

    # ── CREATE ────────────────────────────────────────────

    async def create(self, data: Mapping[str, Any] | None = None) -> Record:
        """Insert a new record.

        Args:
            data: Field values. An "id" is optional; without one the store
                generates a native identifier.

        Returns:
            The persisted Record, carrying its identifier.

        Raises:
            ValidationError: If the data violates the schema.
            DuplicateKeyError: If the supplied id already exists.
        """
        document = self._to_document(data or {})
        self._validate(document, partial=False)
        stored_id = await self.store.insert_one(self.collection, document)
        document[ID_FIELD] = stored_id
        logger.debug(
            f"Created {self.name} {stored_id}",
            extra={"model": self.name, "record_id": str(stored_id)},
        )
        return self._to_record(document)

    # ── READ ──────────────────────────────────────────────

    async def find(self, query_filter: FilterLike = None) -> list[Record]:
        """Return all records matching the filter (empty list if none)."""
        native = translate_filter(Filter.coerce(query_filter), self._reference_fields)
        documents = await self.store.find(
            self.collection,
            native.query,
            projection=native.projection,
            sort=native.sort,
            skip=native.skip,
            limit=native.limit,
        )
        return [self._to_record(doc) for doc in documents]

    async def all(self, query_filter: FilterLike = None) -> list[Record]:
        """Alias of find()."""
        return await self.find(query_filter)

    async def find_one(self, query_filter: FilterLike = None) -> Record | None:
        """Return the first record matching the filter, or None."""
        current = Filter.coerce(query_filter)
        limited = Filter(
            where=current.where,
            fields=current.fields,
            order=current.order,
            limit=1,
            skip=current.skip,
        )
        records = await self.find(limited)
        return records[0] if records else None

    async def find_by_id(self, record_id: Any) -> Record | None:
        """Look up a record by identifier.

        The id is normalized first, so the string form of a native id finds
        the same record as the NativeId itself.

        Returns:
            The Record, or None if no record has this id.
        """
        document = await self.store.find_one(self.collection, self._id_query(record_id))
        if document is None:
            return None
        return self._to_record(document)

    async def get(self, record_id: Any) -> Record:
        """Like find_by_id(), but a missing record is an error.

        Raises:
            NotFoundError: If no record has this id.
        """
        record = await self.find_by_id(record_id)
        if record is None:
            raise NotFoundError(self.name, record_id)
        return record

    async def exists(self, record_id: Any) -> bool:
        return await self.store.count(self.collection, self._id_query(record_id)) > 0

    async def count(self, where: Mapping[str, Any] | None = None) -> int:
        return await self.store.count(
            self.collection, translate_where(where, self._reference_fields)
        )

    # ── UPDATE ────────────────────────────────────────────

    async def update_or_create(self, data: Mapping[str, Any]) -> Record:
        """Upsert a record by identifier.

        Without an id, or with an id no record has yet, this is create() and
        the full schema is validated. Otherwise the given fields are set on
        the stored record; fields absent from `data` are preserved.

        Returns:
            The record as stored after the write.

        Raises:
            ValidationError: If the data violates the schema. An insert
                must satisfy `required` fields, an update only the fields
                it sets.
        """
        document = self._to_document(data)
        if ID_FIELD not in document:
            return await self.create(data)

        record_id = document.pop(ID_FIELD)
        query = {ID_FIELD: record_id}
        if not await self.store.count(self.collection, query):
            return await self.create(data)
        if not document:
            return await self.get(record_id)
        self._validate(document, partial=True)
        outcome = await self.store.update_one(self.collection, query, {"$set": document})
        if outcome.matched == 0:
            # Deleted since the existence check.
            return await self.create(data)
        stored = await self.store.find_one(self.collection, query)
        if stored is None:
            raise NotFoundError(self.name, record_id)
        return self._to_record(stored)

    async def update_attributes(self, record_id: Any, data: Mapping[str, Any]) -> Record:
        """Set fields on an existing record.

        Raises:
            NotFoundError: If no record has this id.
        """
        document = self._to_document(data)
        document.pop(ID_FIELD, None)
        if not document:
            return await self.get(record_id)
        self._validate(document, partial=True)
        query = self._id_query(record_id)
        outcome = await self.store.update_one(self.collection, query, {"$set": document})
        if outcome.matched == 0:
            raise NotFoundError(self.name, record_id)
        stored = await self.store.find_one(self.collection, query)
        if stored is None:
            raise NotFoundError(self.name, record_id)
        return self._to_record(stored)

    async def update_all(self, where: Mapping[str, Any] | None, data: Mapping[str, Any]) -> int:
        """Set fields on every matching record.

        Returns:
            Number of matched records.
        """
        document = self._to_document(data)
        document.pop(ID_FIELD, None)
        if not document:
            return await self.count(where)
        self._validate(document, partial=True)
        matched = await self.store.update_many(
            self.collection,
            translate_where(where, self._reference_fields),
            {"$set": document},
        )
        logger.info(f"Updated {matched} {self.name} record(s)")
        return matched

    # ── DELETE ────────────────────────────────────────────

    async def destroy_by_id(self, record_id: Any) -> bool:
        """Delete a record by identifier; False if it did not exist."""
        deleted = await self.store.delete_one(self.collection, self._id_query(record_id))
        return deleted > 0

    async def destroy_all(self, where: Mapping[str, Any] | None = None) -> int:
        """Delete matching records, or every record when `where` is empty.

        Returns:
            Number of deleted records.
        """
        deleted = await self.store.delete_many(
            self.collection, translate_where(where, self._reference_fields)
        )
        logger.info(f"Deleted {deleted} {self.name} record(s)")
        return deleted

    # ── MAPPING ───────────────────────────────────────────

    def _id_query(self, record_id: Any) -> Document:
        return {ID_FIELD: to_storage(record_id)}

    def _to_document(self, data: Mapping[str, Any]) -> Document:
        """Convert record fields into a stored document."""
        document: Document = {}
        for key, value in data.items():
            if key in ("id", ID_FIELD):
                if value is not None:
                    document[ID_FIELD] = to_storage(value)
            elif key in self._reference_fields and value is not None:
                document[key] = to_storage(value)
            else:
                document[key] = value
        return document

    def _to_record(self, document: Document) -> Record:
        """Convert a stored document into a Record."""
        fields = dict(document)
        data: dict[str, Any] = {}
        if ID_FIELD in fields:
            data["id"] = to_presentation(fields.pop(ID_FIELD), self.schema.id_type)
        data.update(fields)
        return Record(self.name, data)

    def _validate(self, document: Document, partial: bool) -> None:
        errors: dict[str, str] = {}
        for spec in self.schema.fields:
            if spec.name not in document:
                if spec.required and not partial:
                    errors[spec.name] = "is required"
                continue
            value = document[spec.name]
            if value is None and spec.required:
                errors[spec.name] = "is required"
                continue
            reason = spec.check(value)
            if reason is not None:
                errors[spec.name] = reason
        if errors:
            raise ValidationError(self.name, errors)


def identifier_of(record: Mapping[str, Any] | Any) -> Any:
    """Return the identifier of a record, mapping, or raw id value."""
    if isinstance(record, Mapping):
        return record.get("id", record.get(ID_FIELD))
    return record


__all__ = ["FilterLike", "Model", "identifier_of"]

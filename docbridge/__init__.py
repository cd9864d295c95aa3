"""docbridge: an async ORM-style adapter for MongoDB.

Record types are declared with explicit schema descriptors, queried with
declarative filters, and linked through has-many / belongs-to relations.
The core package is storage-agnostic; the MongoDB driver lives behind the
DocumentStorePort in adapters/store/.
"""

from .core import (
    BelongsTo,
    DataSource,
    DocBridgeError,
    DuplicateKeyError,
    FieldSpec,
    Filter,
    HasMany,
    IdType,
    Model,
    NativeId,
    NotFoundError,
    Record,
    SchemaDescriptor,
    SchemaError,
    StringId,
    ValidationError,
)

__all__ = [
    "BelongsTo",
    "DataSource",
    "DocBridgeError",
    "DuplicateKeyError",
    "FieldSpec",
    "Filter",
    "HasMany",
    "IdType",
    "Model",
    "NativeId",
    "NotFoundError",
    "Record",
    "SchemaDescriptor",
    "SchemaError",
    "StringId",
    "ValidationError",
]

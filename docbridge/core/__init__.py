"""Core domain logic for docbridge.

This package contains zero external dependencies: models, the identifier
normalizer, the query translator, the CRUD façade and relations. The
MongoDB driver is reached only through the DocumentStorePort.
"""

from .datasource import DataSource
from .errors import (
    DocBridgeError,
    DuplicateKeyError,
    NotFoundError,
    SchemaError,
    ValidationError,
)
from .models import (
    FieldSpec,
    Filter,
    IdType,
    NativeId,
    Record,
    SchemaDescriptor,
    StringId,
)
from .relations import BelongsTo, HasMany
from .repository import Model

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

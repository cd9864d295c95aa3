"""Domain models for docbridge.

All models in this module use only Python standard library types, so the
core stays independent of the MongoDB driver. Native identifiers are carried
as NativeId values and converted to bson.ObjectId by the store adapter.
"""

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeAlias

logger = logging.getLogger(__name__)

NATIVE_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


@dataclass(frozen=True)
class NativeId:
    """The document database's 12-byte identifier, as 24 lowercase hex chars."""

    value: str

    def __post_init__(self) -> None:
        """Validate and canonicalize the hex representation."""
        if not isinstance(self.value, str) or not NATIVE_ID_PATTERN.match(self.value):
            raise ValueError(f"Not a native identifier: {self.value!r}")
        object.__setattr__(self, "value", self.value.lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StringId:
    """An arbitrary caller-supplied string identifier."""

    value: str

    def __str__(self) -> str:
        return self.value


Identifier: TypeAlias = NativeId | StringId


class IdType(Enum):
    """How a record type presents its identifier.

    - NATIVE: ids are NativeId values (generated when not supplied)
    - STRING: ids are presented as plain strings, even when stored natively
    """

    NATIVE = "native"
    STRING = "string"


@dataclass(frozen=True)
class FieldSpec:
    """A declared field of a record type.

    `type` is checked on writes; `object` accepts anything. `index` and
    `unique` are index hints applied by DataSource.ensure_indexes().
    """

    name: str
    type: type = object
    index: bool = False
    unique: bool = False
    required: bool = False
    length: int | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("field name must be a non-empty string")
        if self.name in {"id", "_id"}:
            raise ValueError(
                "the identifier is not a declared field; use SchemaDescriptor.id_type"
            )
        if self.length is not None and self.length <= 0:
            raise ValueError(f"length must be positive, got {self.length}")

    def check(self, value: Any) -> str | None:
        """Return a reason string if `value` violates this field, else None."""
        if value is None:
            return None
        if not _is_instance(value, self.type):
            return f"expected {self.type.__name__}, got {type(value).__name__}"
        if self.length is not None and isinstance(value, str) and len(value) > self.length:
            return f"longer than {self.length} characters"
        return None


def _is_instance(value: Any, expected: type) -> bool:
    if expected is object:
        return True
    if expected is NativeId:
        return isinstance(value, (NativeId, str))
    if expected is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is date and isinstance(value, datetime):
        return True
    return isinstance(value, expected)


@dataclass(frozen=True)
class SchemaDescriptor:
    """Explicit description of a record type, resolved when it is defined."""

    name: str
    fields: tuple[FieldSpec, ...] = ()
    id_type: IdType = IdType.NATIVE
    collection: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("schema name must be a non-empty string")
        if isinstance(self.fields, list):
            object.__setattr__(self, "fields", tuple(self.fields))
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate fields in {self.name}: {', '.join(duplicates)}")
        if not self.collection:
            object.__setattr__(self, "collection", self.name)

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def indexed_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.index or f.unique)


@dataclass
class Filter:
    """Declarative query: conditions, projection, order and pagination.

    An empty `where` matches every record in the collection.
    """

    where: dict[str, Any] = field(default_factory=dict)
    fields: Sequence[str] | Mapping[str, bool] | None = None
    order: str | Sequence[str] | None = None
    limit: int | None = None
    skip: int = 0

    def __post_init__(self) -> None:
        if self.where is None:
            self.where = {}
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")
        if self.skip < 0:
            raise ValueError(f"skip must be non-negative, got {self.skip}")

    @classmethod
    def coerce(cls, value: "Filter | Mapping[str, Any] | None") -> "Filter":
        """Build a Filter from a Filter, a plain mapping, or None.

        Keys other than where/fields/order/limit/skip (e.g. "include") are
        ignored.
        """
        if value is None:
            return cls()
        if isinstance(value, Filter):
            return value
        unknown = set(value) - {"where", "fields", "order", "limit", "skip"}
        if unknown:
            logger.debug(f"Ignoring unsupported filter keys: {', '.join(sorted(unknown))}")
        return cls(
            where=dict(value.get("where") or {}),
            fields=value.get("fields"),
            order=value.get("order"),
            limit=value.get("limit"),
            skip=value.get("skip") or 0,
        )


class Record(Mapping[str, Any]):
    """A persisted record: a read-only mapping that always exposes `id`.

    Equality follows Mapping semantics, so a Record compares equal to a plain
    dict with the same items.
    """

    def __init__(self, model: str, data: Mapping[str, Any]):
        self.model = model
        self._data = dict(data)

    @property
    def id(self) -> NativeId | str | None:
        return self._data.get("id")

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"Record({self.model!r}, {self._data!r})"


class RelationKind(Enum):
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"


@dataclass(frozen=True)
class RelationDescriptor:
    """A declared association between two record types.

    The foreign key always lives on the child record: for HAS_MANY the
    source is the parent, for BELONGS_TO the source is the child.
    """

    name: str
    kind: RelationKind
    source: str
    target: str
    foreign_key: str


@dataclass(frozen=True)
class NativeQuery:
    """A filter translated into the document database's query language."""

    query: dict[str, Any]
    projection: dict[str, int] | None = None
    sort: list[tuple[str, int]] | None = None
    skip: int = 0
    limit: int = 0


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of a single-document update."""

    matched: int
    modified: int
    upserted_id: NativeId | str | None = None

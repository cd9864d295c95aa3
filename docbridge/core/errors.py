"""Error types raised by the docbridge core.

Driver failures (connection loss, server selection timeouts, etc.) are not
wrapped: they propagate from the adapter unchanged. Only conditions that the
ORM contract names get their own type.
"""


class DocBridgeError(Exception):
    """Base class for all docbridge errors."""


class DuplicateKeyError(DocBridgeError):
    """A record with the same identifier already exists in the collection."""

    def __init__(self, collection: str, record_id: object):
        self.collection = collection
        self.record_id = record_id
        super().__init__(
            f"Duplicate key in collection {collection!r}: id {record_id!s} already exists"
        )


class NotFoundError(DocBridgeError):
    """A lookup by identifier yielded no record."""

    def __init__(self, model: str, record_id: object):
        self.model = model
        self.record_id = record_id
        super().__init__(f"{model} with id {record_id!s} not found")


class ValidationError(DocBridgeError):
    """A record failed schema validation before a write."""

    def __init__(self, model: str, errors: dict[str, str]):
        self.model = model
        self.errors = errors
        details = "; ".join(f"{name}: {reason}" for name, reason in errors.items())
        super().__init__(f"Invalid {model} record: {details}")


class SchemaError(DocBridgeError):
    """A model or relation definition is inconsistent."""

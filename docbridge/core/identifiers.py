"""Identifier normalization.

Strings that look like a native identifier (24 hex characters) are stored
and queried as NativeId; anything else is kept as a plain string id. A
malformed-looking string is never an error: it simply falls back to string
semantics, so collections keyed by arbitrary strings keep working.
"""

from typing import Any

from .models import NATIVE_ID_PATTERN, Identifier, IdType, NativeId, StringId


def is_native_id_format(value: Any) -> bool:
    """Return True if `value` is a string in native identifier format."""
    return isinstance(value, str) and NATIVE_ID_PATTERN.match(value) is not None


def normalize_id(value: Any) -> Identifier:
    """Classify a caller-supplied identifier.

    Args:
        value: A NativeId, StringId, or raw value. Non-string raw values
            are converted with str().

    Returns:
        NativeId if the value is (or lexically matches) a native id,
        StringId otherwise.
    """
    if isinstance(value, (NativeId, StringId)):
        return value
    text = value if isinstance(value, str) else str(value)
    if is_native_id_format(text):
        return NativeId(text)
    return StringId(text)


def to_storage(value: Any) -> NativeId | str:
    """Normalize an identifier into the form handed to the store."""
    identifier = normalize_id(value)
    if isinstance(identifier, NativeId):
        return identifier
    return identifier.value


def to_presentation(stored: Any, id_type: IdType) -> NativeId | str | None:
    """Map a stored identifier back to what a record of `id_type` exposes."""
    if stored is None:
        return None
    if id_type is IdType.STRING:
        return str(stored)
    if isinstance(stored, NativeId):
        return stored
    return stored if isinstance(stored, str) else str(stored)

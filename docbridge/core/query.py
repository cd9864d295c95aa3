"""Translation of declarative filters into MongoDB query documents.

Supported `where` conditions per field:

- plain value or {"eq": v}: equality
- {"neq": v}, {"gt": v}, {"gte": v}, {"lt": v}, {"lte": v}
- {"inq": [...]}, {"nin": [...]}, {"between": [low, high]}
- {"exists": bool}
- {"like": pattern}, {"nlike": pattern}, {"regexp": pattern}, with an
  optional "options" flag string (e.g. "i")

plus top-level {"and": [where, ...]} and {"or": [where, ...]}.

Translation never raises: a mapping containing unknown operator names is
compared as a literal sub-document, and an invalid regular expression
becomes a condition that matches nothing.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .identifiers import to_storage
from .models import Filter, NativeId, NativeQuery, StringId

logger = logging.getLogger(__name__)

ID_FIELD = "_id"

_COMPARISON_OPERATORS = {
    "eq": "$eq",
    "neq": "$ne",
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
}
_LIST_OPERATORS = {"inq": "$in", "nin": "$nin"}
_PATTERN_OPERATORS = {"like", "nlike", "regexp"}
_KNOWN_OPERATORS = (
    set(_COMPARISON_OPERATORS)
    | set(_LIST_OPERATORS)
    | _PATTERN_OPERATORS
    | {"between", "exists", "options"}
)
_LOGICAL_OPERATORS = {"and": "$and", "or": "$or"}

_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}

# A field condition no document can satisfy.
MATCH_NOTHING: dict[str, Any] = {"$in": []}


def storage_field(name: str) -> str:
    """Map a record field name onto its stored document key."""
    return ID_FIELD if name in ("id", ID_FIELD) else name


def translate_where(
    where: Mapping[str, Any] | None,
    id_fields: Iterable[str] = (),
) -> dict[str, Any]:
    """Translate a `where` clause into a MongoDB query document.

    Args:
        where: Per-field conditions. None or {} matches everything.
        id_fields: Additional fields (besides the identifier) whose values
            hold identifiers and must be normalized, e.g. foreign keys.

    Returns:
        Query document suitable for find(), count_documents(), etc.
    """
    if not where:
        return {}
    id_keys = {ID_FIELD, *id_fields}
    query: dict[str, Any] = {}
    for key, condition in where.items():
        if key in _LOGICAL_OPERATORS:
            clauses = [
                translate_where(clause, id_keys)
                for clause in _as_list(condition)
                if isinstance(clause, Mapping)
            ]
            query[_LOGICAL_OPERATORS[key]] = clauses
            continue
        name = storage_field(key)
        query[name] = _translate_condition(condition, name in id_keys)
    return query


def translate_fields(
    fields: Sequence[str] | Mapping[str, bool] | None,
) -> dict[str, int] | None:
    """Translate a `fields` clause into a projection document.

    A list of names is an inclusion list. A mapping of name -> bool
    includes the truthy names; when none are truthy, the falsy names are
    excluded instead. The identifier is returned unless explicitly mapped
    to False.
    """
    if not fields:
        return None
    if isinstance(fields, str):
        fields = [fields]
    if not isinstance(fields, Mapping):
        fields = {name: True for name in fields}

    included = [storage_field(n) for n, keep in fields.items() if keep]
    excluded = [storage_field(n) for n, keep in fields.items() if not keep]
    projection: dict[str, int] = {}
    if included:
        for name in included:
            if name != ID_FIELD:
                projection[name] = 1
        if ID_FIELD in excluded:
            projection[ID_FIELD] = 0
        elif not projection:
            # Only the identifier was requested.
            projection[ID_FIELD] = 1
    else:
        for name in excluded:
            projection[name] = 0
    return projection or None


def translate_order(order: str | Sequence[str] | None) -> list[tuple[str, int]] | None:
    """Translate "field [ASC|DESC]" entries into a sort specification."""
    if not order:
        return None
    entries = [order] if isinstance(order, str) else list(order)
    sort: list[tuple[str, int]] = []
    for entry in entries:
        for part in str(entry).split(","):
            tokens = part.split()
            if not tokens:
                continue
            direction = -1 if len(tokens) > 1 and tokens[1].upper() == "DESC" else 1
            sort.append((storage_field(tokens[0]), direction))
    return sort or None


def translate_filter(query_filter: Filter, id_fields: Iterable[str] = ()) -> NativeQuery:
    """Translate a complete Filter into a NativeQuery."""
    return NativeQuery(
        query=translate_where(query_filter.where, id_fields),
        projection=translate_fields(query_filter.fields),
        sort=translate_order(query_filter.order),
        skip=query_filter.skip,
        limit=query_filter.limit or 0,
    )


def _translate_condition(condition: Any, is_id: bool) -> Any:
    if not isinstance(condition, Mapping) or not condition:
        return _value(condition, is_id)
    if not set(condition) <= _KNOWN_OPERATORS or set(condition) == {"options"}:
        # Not an operator document: compare as a literal sub-document.
        return {k: _value(v, False) for k, v in condition.items()}

    options = str(condition.get("options") or "")
    translated: dict[str, Any] = {}
    for op, operand in condition.items():
        if op in _COMPARISON_OPERATORS:
            translated[_COMPARISON_OPERATORS[op]] = _value(operand, is_id)
        elif op in _LIST_OPERATORS:
            translated[_LIST_OPERATORS[op]] = [_value(v, is_id) for v in _as_list(operand)]
        elif op == "between":
            bounds = _as_list(operand)
            if len(bounds) != 2:
                logger.debug(f"Ignoring malformed between condition: {operand!r}")
                return dict(MATCH_NOTHING)
            translated["$gte"] = _value(bounds[0], is_id)
            translated["$lte"] = _value(bounds[1], is_id)
        elif op == "exists":
            translated["$exists"] = bool(operand)
        elif op in _PATTERN_OPERATORS:
            pattern = _compile(operand, options)
            if pattern is None:
                return dict(MATCH_NOTHING)
            if op == "nlike":
                translated["$not"] = pattern
            else:
                translated["$regex"] = pattern
    return translated


def _compile(pattern: Any, options: str) -> re.Pattern[str] | None:
    """Compile a like/nlike/regexp operand, or None if it is not a valid regex."""
    if isinstance(pattern, re.Pattern):
        return pattern
    if pattern is None:
        logger.debug("Missing pattern matches nothing")
        return None
    flags = 0
    for flag in options:
        flags |= _REGEX_FLAGS.get(flag, 0)
    try:
        return re.compile(str(pattern), flags)
    except re.error as e:
        logger.debug(f"Invalid pattern {pattern!r} matches nothing: {e}")
        return None


def _value(value: Any, is_id: bool) -> Any:
    if isinstance(value, StringId):
        return value.value
    if is_id and isinstance(value, (str, NativeId)):
        return to_storage(value)
    return value


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]

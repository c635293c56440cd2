"""In-memory query engine for schemaless records.

A query maps field names to either a literal (exact equality) or an
operator mapping such as ``{"$gte": "2024-01-01", "$lte": "2024-01-31"}``.
A record matches when every field constraint holds; there is no OR/NOT.

    find(orders, {"status": {"$in": ["Done", "Delivered"]}, "client_name": "Alice"})
"""

from __future__ import annotations

import operator
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from cafe.domain.exceptions import ValidationError

Record = Mapping[str, Any]
Criteria = Mapping[str, Any]


class _Missing:
    """Marker for a field absent from a record."""

    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


def _same_kind(left: Any, right: Any) -> bool:
    # bool is an int subclass; True must not equal 1 in a query.
    return isinstance(left, bool) == isinstance(right, bool)


def _equals(left: Any, right: Any) -> bool:
    if left is MISSING:
        return False
    return _same_kind(left, right) and left == right


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(value: Any, bound: Any) -> bool:
        if value is MISSING or value is None or not _same_kind(value, bound):
            return False
        try:
            return bool(compare(value, bound))
        except TypeError:
            return False

    return check


def _member(value: Any, options: Any) -> bool:
    candidates = _as_collection(options)
    if value is MISSING:
        return False
    return any(_equals(value, option) for option in candidates)


def _as_collection(options: Any) -> Iterable[Any]:
    if isinstance(options, (str, bytes)) or not isinstance(options, Iterable):
        raise ValidationError(
            f"$in/$nin expect a list of values, got {type(options).__name__}"
        )
    return options


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": _ordered(operator.gt),
    "$gte": _ordered(operator.ge),
    "$lt": _ordered(operator.lt),
    "$lte": _ordered(operator.le),
    "$ne": lambda value, other: not _equals(value, other),
    "$in": _member,
    "$nin": lambda value, options: not _member(value, options),
}


def is_operator_spec(value: Any) -> bool:
    """True for a mapping whose keys are all ``$``-prefixed operators."""
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(isinstance(key, str) and key.startswith("$") for key in value)
    )


def _check_field(value: Any, constraint: Any) -> bool:
    if not is_operator_spec(constraint):
        return _equals(value, constraint)

    for op_name, argument in constraint.items():
        check = OPERATORS.get(op_name)
        if check is None:
            raise ValidationError(f"Unsupported query operator: {op_name}")
        if not check(value, argument):
            return False
    return True


def matches(record: Record, criteria: Criteria | None) -> bool:
    for field_name, constraint in (criteria or {}).items():
        if not _check_field(record.get(field_name, MISSING), constraint):
            return False
    return True


def find(records: Iterable[Record], criteria: Criteria | None = None) -> list[Record]:
    """Return the records satisfying every constraint in ``criteria``.

    Input order is preserved. An empty or missing query matches everything.
    """
    return [record for record in records if matches(record, criteria)]


def count(records: Iterable[Record], criteria: Criteria | None = None) -> int:
    return len(find(records, criteria))


def exists(records: Iterable[Record], criteria: Criteria | None = None) -> bool:
    return count(records, criteria) > 0

"""
utils/filtering.py
------------------
Generic predicate-match filtering for subscription lists.
"""

from operator import attrgetter
from typing import Any, Callable, Iterable, TypeVar, Union

T = TypeVar("T")

FieldSelector = Union[str, Callable[[Any], Any]]


def filter_by_field(records: Iterable[T], field: FieldSelector, target: Any) -> list[T]:
    """
    Return every record whose selected field equals ``target``.

    Args:
        records: Any iterable of records; it is not modified.
        field: Attribute name, or a callable mapping a record to its value.
        target: Value compared with ``==``.

    Returns:
        A new list in input order (empty when nothing matches).
    """
    selector = attrgetter(field) if isinstance(field, str) else field
    return [r for r in records if selector(r) == target]


def filter_by_category(records: Iterable[T], category) -> list[T]:
    return filter_by_field(records, "category", category)


def filter_by_status(records: Iterable[T], status) -> list[T]:
    return filter_by_field(records, "status", status)


def filter_by_type(records: Iterable[T], subscription_type) -> list[T]:
    return filter_by_field(records, "subscription_type", subscription_type)

"""Search, faceted filtering, sorting and pagination over in-memory collections.

A collection is described once by a ``CollectionSpec``; ``run_query`` applies
search -> filters -> sort -> pagination and reports, for every filter that is
not already active, how many records would remain if it were added.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Iterable, Mapping, Sequence, TypeVar

T = TypeVar("T")

ASC = "ASC"
DESC = "DESC"


@dataclass(frozen=True)
class QueryParams:
    """User-supplied list parameters; every field is optional."""
    page: int | None = None
    entries_per_page: int | None = None
    sort_by: str | None = None
    sort_direction: str | None = None
    active_filters: tuple[str, ...] = ()
    search_key: str | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    data: list[T]
    page: int
    entry_count: int
    entries_per_page: int
    total_entries: int  # size of the collection before search and filters
    total_pages: int
    matching_count: int
    filter_count: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CollectionSpec(Generic[T]):
    """Declarative description of a listable collection.

    ``filters`` and ``sort_keys`` are ordered mappings; ``filters`` order is
    the order of the facet counts. Sort keys return the ascending key.
    """
    name: str
    search_fields: Callable[[T], Iterable[str]]
    filters: Mapping[str, Callable[[T], bool]]
    sort_keys: Mapping[str, Callable[[T], Any]]
    default_sort: str
    default_direction: str = DESC
    default_entries_per_page: int = 20
    max_entries_per_page: int = 100


def parse_active_filters(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Parse ``"[a,b]"`` (or ``"a,b"``) into ``("a", "b")``."""
    if value is None:
        return ()
    if not isinstance(value, str):
        return tuple(v.strip() for v in value if v and v.strip())
    stripped = value.replace("[", "").replace("]", "")
    return tuple(part.strip() for part in stripped.split(",") if part.strip())


def search(spec: CollectionSpec[T], records: Iterable[T], search_key: str | None) -> list[T]:
    """Keep records where any search field contains ``search_key`` (case-insensitive)."""
    key = (search_key or "").lower()
    if not key:
        return list(records)
    return [
        record for record in records
        if any(value and key in value.lower() for value in spec.search_fields(record))
    ]


def apply_filters(spec: CollectionSpec[T], records: Iterable[T], active: Iterable[str]) -> list[T]:
    predicates = [spec.filters[name] for name in active if name in spec.filters]
    if not predicates:
        return list(records)
    return [record for record in records if all(predicate(record) for predicate in predicates)]


def facet_counts(spec: CollectionSpec[T], searched: Sequence[T], active: Sequence[str]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for name in spec.filters:
        if name in active:
            continue
        counts[name] = len(apply_filters(spec, searched, [name, *active]))
    return counts


def sort_records(
    spec: CollectionSpec[T],
    records: Iterable[T],
    sort_by: str | None,
    sort_direction: str | None,
) -> list[T]:
    """Stable sort; descending order is the reverse of the ascending key."""
    key_name = sort_by if sort_by in spec.sort_keys else spec.default_sort
    direction = (sort_direction or "").upper()
    if direction not in (ASC, DESC):
        direction = spec.default_direction
    return sorted(records, key=spec.sort_keys[key_name], reverse=direction == DESC)


def paginate(
    items: Sequence[T],
    *,
    total_entries: int,
    page: int | None,
    entries_per_page: int | None,
    default_entries_per_page: int,
    max_entries_per_page: int,
) -> Page[T]:
    current = page if page is not None and page > 0 else 0
    if entries_per_page is None or entries_per_page < 1 or entries_per_page > max_entries_per_page:
        per_page = default_entries_per_page
    else:
        per_page = entries_per_page

    start = current * per_page
    data = list(items[start:start + per_page])
    return Page(
        data=data,
        page=current,
        entry_count=len(data),
        entries_per_page=per_page,
        total_entries=total_entries,
        total_pages=math.ceil(len(items) / per_page),
        matching_count=len(items),
    )


def run_query(spec: CollectionSpec[T], records: Sequence[T], params: QueryParams) -> Page[T]:
    active = list(params.active_filters)
    searched = search(spec, records, params.search_key)
    counts = facet_counts(spec, searched, active)
    filtered = apply_filters(spec, searched, active)
    ordered = sort_records(spec, filtered, params.sort_by, params.sort_direction)
    page = paginate(
        ordered,
        total_entries=len(records),
        page=params.page,
        entries_per_page=params.entries_per_page,
        default_entries_per_page=spec.default_entries_per_page,
        max_entries_per_page=spec.max_entries_per_page,
    )
    return replace(page, filter_count=counts)

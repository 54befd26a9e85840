"""Filtering, searching and sorting of already-loaded lists"""

from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")

LIVE_STATUS_RANK = {"live": 0, "upcoming": 1, "ended": 2}


def _value(v) -> str:
    return v.value if isinstance(v, Enum) else str(v)


def filter_by_status(
    records: Iterable[T],
    selected: Sequence[str],
    all_values: Sequence[str],
    status_of: Callable[[T], str],
) -> list[T]:
    """
    Keep records whose status is selected.

    Selecting every value disables the filter; an empty selection matches
    nothing.
    """
    records = list(records)
    selected_set = {_value(s) for s in selected}
    if selected_set >= {_value(v) for v in all_values}:
        return records
    return [r for r in records if _value(status_of(r)) in selected_set]


def matches_search(query: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match over optional fields"""
    query = (query or "").strip().lower()
    if not query:
        return True
    return any(field and query in field.lower() for field in fields)


def sort_newest_first(records: Iterable[T], key: Callable[[T], Optional[datetime]] = None) -> list[T]:
    key = key or (lambda r: getattr(r, "created_at", None))

    def sort_key(record: T) -> float:
        created = key(record)
        return created.timestamp() if created else float("-inf")

    return sorted(records, key=sort_key, reverse=True)


def sort_lives(lives: Iterable[T]) -> list[T]:
    """Live sessions first, then upcoming, then ended; latest schedule first within each"""

    def sort_key(live) -> tuple[int, float]:
        rank = LIVE_STATUS_RANK.get(_value(live.status), len(LIVE_STATUS_RANK))
        return rank, -live.scheduled_at.timestamp()

    return sorted(lives, key=sort_key)


def filter_label(
    selected: Sequence[str],
    all_values: Sequence[str],
    formatter: Callable[[str], str],
    all_label: str = "All Statuses",
) -> str:
    known = [_value(v) for v in all_values]
    chosen = [v for v in known if v in {_value(s) for s in selected}]
    if len(chosen) == len(known):
        return all_label
    if not chosen:
        return "None Selected"
    if len(chosen) == 1:
        return formatter(chosen[0])
    return f"{len(chosen)} Selected"

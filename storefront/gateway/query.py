"""
Typed query builder for the REST gateway.

Filters are values rendered to PostgREST query parameters; httpx does the
URL encoding, so no filter is ever spliced into a URL by hand.

Usage:
    q = Query().eq("user_id", user.id).order_by("created_at", descending=True)
    result = await gateway.query("orders", q, token)
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

_COLUMN_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Operator(str, Enum):
    """PostgREST comparison operators"""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"
    IS = "is"


def _validate_column(column: str) -> str:
    if not _COLUMN_RE.match(column):
        raise ValueError(f"Invalid column name: {column!r}")
    return column


def _render_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _quote_list_item(value: Any) -> str:
    rendered = _render_value(value)
    # Reserved characters inside in.(...) lists must be double-quoted
    if any(ch in rendered for ch in ',()"\\ '):
        escaped = rendered.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return rendered


@dataclass(frozen=True)
class Filter:
    """A single column filter"""
    column: str
    operator: Operator
    value: Any

    def __post_init__(self):
        _validate_column(self.column)
        if self.operator == Operator.IN and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError("The 'in' operator requires a collection value")
        if self.operator == Operator.IS and self.value not in (None, True, False):
            raise ValueError("The 'is' operator accepts only None, True or False")

    def to_param(self) -> tuple[str, str]:
        """Render as a (column, 'op.value') query parameter"""
        if self.operator == Operator.IN:
            items = ",".join(_quote_list_item(v) for v in self.value)
            return self.column, f"in.({items})"
        return self.column, f"{self.operator.value}.{_render_value(self.value)}"


@dataclass(frozen=True)
class Order:
    column: str
    descending: bool = False

    def __post_init__(self):
        _validate_column(self.column)

    def to_param(self) -> str:
        return f"{self.column}.{'desc' if self.descending else 'asc'}"


@dataclass(frozen=True)
class Query:
    """Immutable description of a table read"""
    select: str = "*"
    filters: tuple[Filter, ...] = field(default_factory=tuple)
    order: Optional[Order] = None
    limit: Optional[int] = None
    single: bool = False

    def where(self, column: str, operator: Operator, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, operator, value),))

    def eq(self, column: str, value: Any) -> "Query":
        return self.where(column, Operator.EQ, value)

    def in_(self, column: str, values) -> "Query":
        return self.where(column, Operator.IN, tuple(values))

    def order_by(self, column: str, descending: bool = False) -> "Query":
        return replace(self, order=Order(column, descending))

    def limit_to(self, limit: int) -> "Query":
        if limit <= 0:
            raise ValueError("limit must be positive")
        return replace(self, limit=limit)

    def one(self) -> "Query":
        """Expect exactly one row back"""
        return replace(self, single=True)

    def to_params(self) -> list[tuple[str, str]]:
        params = [("select", self.select)]
        params.extend(f.to_param() for f in self.filters)
        if self.order:
            params.append(("order", self.order.to_param()))
        if self.limit:
            params.append(("limit", str(self.limit)))
        return params


def filters_to_params(filters: dict[str, Any] | tuple[Filter, ...]) -> list[tuple[str, str]]:
    """Render write filters; a plain dict means equality on each column"""
    if isinstance(filters, dict):
        filters = tuple(Filter(column, Operator.EQ, value) for column, value in filters.items())
    return [f.to_param() for f in filters]

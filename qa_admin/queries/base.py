"""Base query builder class.

Provides common query operations that all query builders inherit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

T = TypeVar("T")


class BaseQuery(Generic[T]):
    """Base class for composable query builders.

    Subclasses set `model_class`, map sortable names to columns in
    `ordering_fields` and add their own filter methods. Every method returns
    a new builder, so partially built queries can be reused.
    """

    model_class: type[T]
    ordering_fields: ClassVar[dict[str, Any]] = {}
    default_ordering: ClassVar[tuple[str, str]] = ("created_at", "desc")

    def __init__(self, db: Session):
        self.db = db
        self._query: Query = db.query(self.model_class)

    def _clone(self) -> Self:
        new = self.__class__.__new__(self.__class__)
        new.db = self.db
        new._query = self._query
        return new

    def _filter(self, *criteria) -> Self:
        clone = self._clone()
        clone._query = clone._query.filter(*criteria)
        return clone

    # -------------------------------------------------------------------------
    # Common filters
    # -------------------------------------------------------------------------

    def created_between(self, start_at=None, end_at=None) -> Self:
        """Inclusive bounds on ``created_at``; a missing bound is not applied."""
        created_col = self.model_class.created_at
        clone = self._clone()
        if start_at is not None:
            clone._query = clone._query.filter(created_col >= start_at)
        if end_at is not None:
            clone._query = clone._query.filter(created_col <= end_at)
        return clone

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def order_by(self, field: str | None, direction: str | None = "asc", *, nulls_last: bool = False) -> Self:
        """Apply ordering to the query.

        Unknown fields fall back to `default_ordering` instead of failing.
        """
        column = self.ordering_fields.get(field or "")
        if column is None:
            field, direction = self.default_ordering
            column = self.ordering_fields[field]
        ordering = desc(column) if (direction or "").lower() == "desc" else asc(column)
        if nulls_last:
            ordering = ordering.nulls_last()
        clone = self._clone()
        clone._query = clone._query.order_by(ordering)
        return clone

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def paginate(self, limit: int = 50, offset: int = 0) -> Self:
        clone = self._clone()
        if limit > 0:
            clone._query = clone._query.limit(limit)
        if offset > 0:
            clone._query = clone._query.offset(offset)
        return clone

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def all(self) -> list[T]:
        return self._query.all()

from __future__ import annotations

import enum
import uuid
from typing import Any, TypeVar

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query, Session

from qa_admin.errors import NotFoundError, ValidationError

E = TypeVar("E", bound=enum.Enum)


def coerce_uuid(value: uuid.UUID | str | None) -> uuid.UUID | None:
    if value is None or value == "":
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValidationError("invalid_id", f"Invalid id: {value}") from exc


def validate_enum(value: E | str | None, enum_cls: type[E], label: str) -> E | None:
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"invalid_{label}",
            f"Invalid {label}: {value}",
            field_errors={label: [f"Must be one of: {allowed}"]},
        ) from exc


def get_or_404(db: Session, model, object_id: uuid.UUID | str, detail: str | None = None, options=None):
    query = db.query(model)
    if options:
        query = query.options(*options)
    obj = query.filter(model.id == coerce_uuid(object_id)).first()
    if obj is None:
        name = getattr(model, "__name__", "Object")
        raise NotFoundError(f"{name.lower()}_not_found", detail or f"{name} not found")
    return obj


def apply_is_active_filter(query: Query, model, is_active: bool | None) -> Query:
    if is_active is None:
        return query
    return query.filter(model.is_active.is_(is_active))


def apply_ordering(query: Query, order_by: str, order_dir: str, allowed: dict[str, Any]) -> Query:
    column = allowed.get(order_by)
    if column is None:
        raise ValidationError(
            "invalid_order_by",
            f"Invalid order_by: {order_by}",
            field_errors={"order_by": [f"Must be one of: {', '.join(sorted(allowed))}"]},
        )
    if order_dir == "asc":
        return query.order_by(asc(column))
    return query.order_by(desc(column))


def apply_pagination(query: Query, limit: int, offset: int) -> Query:
    if limit > 0:
        query = query.limit(limit)
    if offset > 0:
        query = query.offset(offset)
    return query

from __future__ import annotations

from typing import Any


def list_response(items: list[Any], limit: int, offset: int) -> dict[str, Any]:
    return {"items": items, "count": len(items), "limit": limit, "offset": offset}


class ListResponseMixin:
    @classmethod
    def list_response(cls, db, *args, limit: int = 50, offset: int = 0, **kwargs) -> dict[str, Any]:
        items = cls.list(db, *args, limit=limit, offset=offset, **kwargs)
        return list_response(items, limit, offset)

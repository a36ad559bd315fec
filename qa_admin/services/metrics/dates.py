"""Calendar-day filters to UTC instants.

Users pick dates in the dashboard's local calendar, which sits at a fixed
offset from UTC. A day's start is local ``00:00:00.000`` and its end local
``23:59:59.999``; both are shifted back by the offset before querying.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta

from qa_admin.config import settings

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
_START_OF_DAY = time(0, 0, 0, 0)
_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateRange:
    start_at: datetime | None
    end_at: datetime | None

    @property
    def is_open(self) -> bool:
        return self.start_at is None and self.end_at is None


def day_boundary(
    value: str | None,
    *,
    end_of_day: bool = False,
    offset_hours: float | None = None,
) -> datetime | None:
    """Return the UTC instant for the start or end of a local calendar day.

    Unparsable input returns None so the caller drops the filter instead of
    failing the whole query.
    """
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        day = datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        logger.warning("Ignoring unparsable date filter %r", raw)
        return None

    offset = settings.display_utc_offset_hours if offset_hours is None else offset_hours
    local = datetime.combine(day, _END_OF_DAY if end_of_day else _START_OF_DAY, tzinfo=UTC)
    return local - timedelta(hours=offset)


def resolve_date_range(
    start_date: str | None,
    end_date: str | None,
    *,
    offset_hours: float | None = None,
) -> DateRange:
    # start > end is passed through; the query simply matches nothing.
    return DateRange(
        start_at=day_boundary(start_date, offset_hours=offset_hours),
        end_at=day_boundary(end_date, end_of_day=True, offset_hours=offset_hours),
    )


def format_utc(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

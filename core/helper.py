from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC.

    Naive values are taken as UTC, which is what the database hands back for
    backends without timezone support.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_pagination_meta(page: int, page_size: int, count: int) -> dict:
    page_count = (count + page_size - 1) // page_size if count else 0
    return {
        "page": page,
        "page_size": page_size,
        "count": count,
        "page_count": page_count,
    }


def occupancy_rate(tickets_sold: int, capacity: int) -> float:
    if not capacity:
        return 0.0
    return round(tickets_sold / capacity * 100, 2)

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from ..core.constants import FIRESTORE_IN_LIMIT


def snapshot_to_dict(snap) -> Optional[Dict[str, Any]]:
    """Flatten a document snapshot into a dict carrying its id."""

    if snap is None or not snap.exists:
        return None
    data = snap.to_dict() or {}
    data["id"] = snap.id
    return data


def stream_dicts(query) -> List[Dict[str, Any]]:
    return [d for d in (snapshot_to_dict(s) for s in query.stream()) if d is not None]


def chunked(values: Sequence[str], size: int = FIRESTORE_IN_LIMIT) -> Iterator[List[str]]:
    for i in range(0, len(values), size):
        yield list(values[i : i + size])


def unique(values: Iterable[Optional[str]]) -> List[str]:
    seen: Dict[str, None] = {}
    for v in values:
        if v:
            seen.setdefault(v, None)
    return list(seen)


def as_datetime(value: Any) -> Optional[datetime]:
    """Normalize stored timestamps.

    Firestore returns timestamps as timezone-aware `DatetimeWithNanoseconds`;
    older documents written by other clients may hold ISO strings or plain
    dates. Naive datetimes are written as-is and the client stores them as
    UTC, so aware values are brought back to UTC before dropping the zone.
    Everything is returned naive.
    """

    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    raise TypeError(f"Unsupported timestamp value type: {type(value)!r}")


def as_date(value: Any) -> Optional[date]:
    dt = as_datetime(value)
    return dt.date() if dt else None


def date_key(day: date) -> datetime:
    """Dates are stored as midnight timestamps so range filters work."""
    return datetime.combine(day, time.min)


def compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None so optional fields are only written when set."""
    return {k: v for k, v in data.items() if v is not None}

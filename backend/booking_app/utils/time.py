from datetime import datetime, timezone


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    """Normalize to naive UTC; naive input is taken to be UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def utc_naive_to_aware(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc)


def parse_instant(value: object) -> datetime | None:
    """Parse an ISO-8601 string (or datetime) into a naive UTC datetime, None if unparseable."""
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return to_utc_naive(parsed)


def is_future(dt: datetime, *, now: datetime | None = None) -> bool:
    return dt > (now or utc_now_naive())

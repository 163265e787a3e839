from datetime import datetime, timedelta

from booking_app.utils.time import utc_now_naive


def in_hours(hours: float) -> datetime:
    return utc_now_naive() + timedelta(hours=hours)


def iso_in_hours(hours: float) -> str:
    return in_hours(hours).isoformat() + "Z"

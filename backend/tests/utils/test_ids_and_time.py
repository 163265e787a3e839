from datetime import datetime, timedelta, timezone

from booking_app.utils.ids import generate_id
from booking_app.utils.time import is_future, parse_instant, to_utc_naive, utc_now_naive


def test_generated_ids_carry_prefix_and_are_unique() -> None:
    ids = {generate_id("res") for _ in range(200)}
    assert len(ids) == 200
    assert all(i.startswith("res_") and i.count("_") == 2 for i in ids)


def test_parse_instant_normalizes_to_naive_utc() -> None:
    assert parse_instant("2025-11-20T14:00:00Z") == datetime(2025, 11, 20, 14, 0)
    assert parse_instant("2025-11-20T23:00:00+09:00") == datetime(2025, 11, 20, 14, 0)
    assert parse_instant("2025-11-20T14:00") == datetime(2025, 11, 20, 14, 0)
    assert parse_instant("garbage") is None
    assert parse_instant("") is None
    assert parse_instant(12) is None


def test_to_utc_naive_and_is_future() -> None:
    aware = datetime(2025, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=9)))
    assert to_utc_naive(aware) == datetime(2025, 1, 1, 0, 0)
    now = utc_now_naive()
    assert is_future(now + timedelta(seconds=1), now=now)
    assert not is_future(now, now=now)

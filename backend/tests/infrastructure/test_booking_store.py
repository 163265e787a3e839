import pytest
from booking_app.database import build_engine, build_session_factory, init_db
from booking_app.infrastructure.repositories import SqlAlchemyBookingStore
from booking_app.models import ReservationStatus, Slot, UserRole
from sqlalchemy import update

from support import in_hours


async def _service_with_slot(store: SqlAlchemyBookingStore, *, capacity: int = 2) -> Slot:
    service = await store.create_service(name="Massage", description="", duration_minutes=30)
    assert service is not None
    slot = await store.create_slot(service_id=service.id, starts_at=in_hours(24), capacity=capacity)
    assert slot is not None
    return slot


@pytest.mark.asyncio
async def test_seed_users_exist_once() -> None:
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    await init_db(engine)
    store = SqlAlchemyBookingStore(build_session_factory(engine))

    users = await store.list_users()
    assert sorted((u.email, u.role) for u in users) == [
        ("admin@example.com", UserRole.ADMIN),
        ("user@example.com", UserRole.USER),
    ]
    await engine.dispose()


@pytest.mark.asyncio
async def test_create_assigns_prefixed_unique_ids(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store)
    other = await store.create_slot(service_id=slot.service_id, starts_at=in_hours(48), capacity=1)
    assert other is not None
    assert slot.id.startswith("slt_")
    assert slot.service_id.startswith("svc_")
    assert slot.id != other.id
    assert slot.available == slot.capacity


@pytest.mark.asyncio
async def test_create_reservation_takes_a_seat_atomically(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store, capacity=2)

    reservation = await store.create_reservation(slot.id, "alice@example.com")

    assert reservation is not None
    assert reservation.id.startswith("res_")
    assert reservation.status == ReservationStatus.CONFIRMED
    refreshed = await store.get_slot(slot.id)
    assert refreshed is not None and refreshed.available == 1
    assert await store.has_double_booking(slot.id, "alice@example.com")
    assert not await store.has_double_booking(slot.id, "bob@example.com")


@pytest.mark.asyncio
async def test_create_reservation_never_goes_below_zero(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store, capacity=1)
    await store.create_reservation(slot.id, "alice@example.com")
    # the gateway itself does not gate; the seat count still clamps
    await store.create_reservation(slot.id, "bob@example.com")

    refreshed = await store.get_slot(slot.id)
    assert refreshed is not None and refreshed.available == 0


@pytest.mark.asyncio
async def test_cancel_reservation_returns_seat_and_clamps(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store, capacity=2)
    reservation = await store.create_reservation(slot.id, "alice@example.com")
    assert reservation is not None

    # corrupt the counter so the slot already looks empty
    async with store.session_factory.begin() as session:
        await session.execute(update(Slot).where(Slot.id == slot.id).values(available=2))

    assert await store.cancel_reservation(reservation.id) is True
    refreshed = await store.get_slot(slot.id)
    assert refreshed is not None and refreshed.available == 2
    cancelled = await store.get_reservation(reservation.id)
    assert cancelled is not None and cancelled.status == ReservationStatus.CANCELLED


@pytest.mark.asyncio
async def test_cancel_twice_does_not_free_a_second_seat(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store, capacity=3)
    first = await store.create_reservation(slot.id, "alice@example.com")
    await store.create_reservation(slot.id, "bob@example.com")
    assert first is not None

    assert await store.cancel_reservation(first.id)
    assert await store.cancel_reservation(first.id)

    refreshed = await store.get_slot(slot.id)
    assert refreshed is not None and refreshed.available == 2


@pytest.mark.asyncio
async def test_missing_targets_report_not_found(store: SqlAlchemyBookingStore) -> None:
    assert await store.cancel_reservation("res_missing") is False
    assert await store.delete_slot("slt_missing") is False
    assert await store.delete_service("svc_missing") is False
    assert await store.get_reservation("res_missing") is None


@pytest.mark.asyncio
async def test_reservations_by_email_skip_cancelled(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store, capacity=3)
    kept = await store.create_reservation(slot.id, "alice@example.com")
    dropped = await store.create_reservation(slot.id, "alice@example.com")
    await store.create_reservation(slot.id, "bob@example.com")
    assert kept is not None and dropped is not None
    await store.cancel_reservation(dropped.id)

    mine = await store.list_reservations_by_email("alice@example.com")
    assert [r.id for r in mine] == [kept.id]
    assert len(await store.list_confirmed_by_slot(slot.id)) == 2
    assert len(await store.list_reservations()) == 3


@pytest.mark.asyncio
async def test_delete_service_cascades_slots_and_cancels_their_reservations(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store)
    second = await store.create_slot(service_id=slot.service_id, starts_at=in_hours(30), capacity=1)
    assert second is not None
    reservation = await store.create_reservation(slot.id, "alice@example.com")
    assert reservation is not None

    assert await store.delete_service(slot.service_id) is True

    assert await store.get_service(slot.service_id) is None
    assert await store.list_slots_by_service(slot.service_id) == []
    assert await store.list_slots() == []
    orphan = await store.get_reservation(reservation.id)
    assert orphan is not None
    assert orphan.status == ReservationStatus.CANCELLED
    assert orphan.slot_id == slot.id


@pytest.mark.asyncio
async def test_delete_slot_keeps_other_slots(store: SqlAlchemyBookingStore) -> None:
    slot = await _service_with_slot(store)
    other = await store.create_slot(service_id=slot.service_id, starts_at=in_hours(30), capacity=1)
    assert other is not None

    assert await store.delete_slot(slot.id) is True
    assert [s.id for s in await store.list_slots_by_service(slot.service_id)] == [other.id]


@pytest.mark.asyncio
async def test_slots_by_service_sorted_by_start(store: SqlAlchemyBookingStore) -> None:
    service = await store.create_service(name="Yoga", description="", duration_minutes=60)
    assert service is not None
    late = await store.create_slot(service_id=service.id, starts_at=in_hours(10), capacity=1)
    early = await store.create_slot(service_id=service.id, starts_at=in_hours(1), capacity=1)
    assert late is not None and early is not None
    assert [s.id for s in await store.list_slots_by_service(service.id)] == [early.id, late.id]


@pytest.mark.asyncio
async def test_user_lookup_by_email(store: SqlAlchemyBookingStore) -> None:
    created = await store.create_user(email="carol@example.com")
    assert created is not None and created.role == UserRole.USER
    found = await store.get_user_by_email("carol@example.com")
    assert found is not None and found.email == "carol@example.com"
    assert await store.get_user_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_duplicate_user_degrades_to_none(store: SqlAlchemyBookingStore) -> None:
    assert await store.create_user(email="admin@example.com") is None


@pytest.mark.asyncio
async def test_storage_failures_degrade_to_empty_values(caplog: pytest.LogCaptureFixture) -> None:
    # no schema: every statement fails inside the database
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    broken = SqlAlchemyBookingStore(build_session_factory(engine))

    assert await broken.get_slot("slt_1") is None
    assert await broken.list_slots() == []
    assert await broken.create_reservation("slt_1", "alice@example.com") is None
    assert await broken.cancel_reservation("res_1") is False
    assert await broken.has_double_booking("slt_1", "alice@example.com") is False
    assert "storage failure" in caplog.text
    await engine.dispose()


@pytest.mark.asyncio
async def test_past_slots_can_be_stored_directly(store: SqlAlchemyBookingStore) -> None:
    service = await store.create_service(name="Sauna", description="", duration_minutes=15)
    assert service is not None
    slot = await store.create_slot(service_id=service.id, starts_at=in_hours(-1), capacity=1)
    assert slot is not None
    assert slot.starts_at < in_hours(0)


@pytest.mark.asyncio
async def test_create_reservation_on_missing_slot_records_nothing(store: SqlAlchemyBookingStore) -> None:
    assert await store.create_reservation("slt_missing", "alice@example.com") is None
    assert await store.list_reservations() == []


@pytest.mark.asyncio
async def test_integer_overflow_degrades_to_none(
    store: SqlAlchemyBookingStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    service = await store.create_service(name="Sauna", description="", duration_minutes=15)
    assert service is not None

    slot = await store.create_slot(service_id=service.id, starts_at=in_hours(3), capacity=2**70)

    assert slot is None
    assert await store.list_slots_by_service(service.id) == []
    assert "storage failure in create_slot" in caplog.text

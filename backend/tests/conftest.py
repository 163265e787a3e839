from typing import AsyncIterator

import pytest_asyncio
from booking_app.database import build_engine, build_session_factory, init_db
from booking_app.infrastructure.repositories import SqlAlchemyBookingStore


@pytest_asyncio.fixture
async def store() -> AsyncIterator[SqlAlchemyBookingStore]:
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield SqlAlchemyBookingStore(build_session_factory(engine))
    await engine.dispose()

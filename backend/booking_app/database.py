import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from .config import get_settings
from .models import Base, User, UserRole
from .utils.time import utc_now_naive

logger = logging.getLogger(__name__)

SEED_USERS: tuple[tuple[str, UserRole], ...] = (
    ("admin@example.com", UserRole.ADMIN),
    ("user@example.com", UserRole.USER),
)


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url:
            # one shared connection, otherwise every session sees an empty database
            return create_async_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_async_engine(database_url, echo=echo)
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


async def init_db(bind: AsyncEngine) -> None:
    """Create the schema and seed the default users on first initialization."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_session_factory(bind)
    async with factory.begin() as session:
        existing = await session.scalar(select(func.count()).select_from(User))
        if existing:
            return
        now = utc_now_naive()
        for email, role in SEED_USERS:
            session.add(User(email=email, role=role, created_at=now))
        logger.info("seeded %d default users", len(SEED_USERS))


settings = get_settings()

engine = build_engine(settings.database_url, echo=settings.echo_sql)

async_session = build_session_factory(engine)

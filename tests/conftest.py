import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from uninest.api.deps import get_db, get_notification_publisher
from uninest.api.main import app
from uninest.api.rate_limit import limiter
from uninest.core.database import Base
from uninest.core.security import create_access_token
from uninest.models import (
    GenderEnum,
    GuestFrequencyEnum,
    RoommateProfile,
    SleepScheduleEnum,
    StudyHabitsEnum,
    University,
    User,
    UserRoleEnum,
)


def _database_url(tmp_path) -> str:
    return os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'uninest_test.db'}",
    )


class RecordingPublisher:
    """Publisher double that remembers every live push."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.published: list[tuple[Any, dict]] = []

    async def publish(self, user_id: Any, payload: dict) -> bool:
        if self.fail:
            raise ConnectionError("socket server unavailable")
        self.published.append((user_id, payload))
        return True


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(_database_url(tmp_path), echo=False)

    if engine.dialect.name == "sqlite":
        # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN.
        @event.listens_for(engine.sync_engine, "connect")
        def do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN")

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def setup_database(test_engine: AsyncEngine) -> AsyncGenerator[None, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory(
    test_engine: AsyncEngine, setup_database: None
) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def university(db_session: AsyncSession) -> University:
    university = University(name="Tallinn University of Technology", city="Tallinn")
    db_session.add(university)
    await db_session.commit()
    return university


@pytest.fixture
def make_user(db_session: AsyncSession, university: University):
    async def _make_user(
        first_name: str = "Test",
        last_name: str = "Student",
        gender: GenderEnum | None = GenderEnum.FEMALE,
        role: UserRoleEnum = UserRoleEnum.STUDENT,
        is_blocked: bool = False,
        with_university: bool = True,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=f"{uuid.uuid4().hex[:12]}@uni.test",
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            role=role,
            university_id=university.id if with_university else None,
            is_blocked=is_blocked,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_profile(db_session: AsyncSession):
    async def _make_profile(user: User, **overrides: Any) -> RoommateProfile:
        values: dict[str, Any] = {
            "user_id": user.id,
            "university_id": user.university_id,
            "min_budget": Decimal("500.00"),
            "max_budget": Decimal("800.00"),
            "cleanliness_level": 4,
            "noise_level": 2,
            "sleep_schedule": SleepScheduleEnum.NORMAL,
            "study_habits": StudyHabitsEnum.MIXED,
            "smoking_allowed": False,
            "pets_allowed": False,
            "guests_allowed": GuestFrequencyEnum.SOMETIMES,
            "major": "Computer Science",
            "interests": ["hiking", "chess"],
            "preferred_areas": [],
            "is_active": True,
        }
        values.update(overrides)
        profile = RoommateProfile(id=uuid.uuid4(), **values)
        db_session.add(profile)
        await db_session.commit()
        return profile

    return _make_profile


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict[str, str]:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def failing_publisher() -> RecordingPublisher:
    return RecordingPublisher(fail=True)


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    publisher: RecordingPublisher,
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_publisher] = lambda: publisher
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

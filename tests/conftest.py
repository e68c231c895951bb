import os

# Keep bcrypt cheap and keep the module-level engine off PostgreSQL
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from typing import AsyncGenerator, Awaitable, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from cookbook.main import app
from cookbook.database import Base, get_session_factory
from cookbook.models import Role
from cookbook.schemas.recipe import RecipeCreate
from cookbook.schemas.user import UserCreate, Identity
from cookbook.services import (
    AuthService, FollowService, RatingAggregator, ReviewService, RecipeService, UserService
)

PASSWORD = "testpassword123"


@pytest.fixture
async def sessions(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """A fresh file-backed SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def auth_service(sessions) -> AuthService:
    return AuthService(sessions)


@pytest.fixture
def follow_service(sessions) -> FollowService:
    return FollowService(sessions)


@pytest.fixture
def aggregator(sessions) -> RatingAggregator:
    return RatingAggregator(sessions)


@pytest.fixture
def review_service(sessions, aggregator) -> ReviewService:
    return ReviewService(sessions, aggregator)


@pytest.fixture
def recipe_service(sessions) -> RecipeService:
    return RecipeService(sessions)


@pytest.fixture
def user_service(sessions) -> UserService:
    return UserService(sessions)


@pytest.fixture
def make_user(auth_service) -> Callable[..., Awaitable[Identity]]:
    """Register a user and return its authenticated identity."""

    async def _make_user(name: str, password: str = PASSWORD, admin: bool = False) -> Identity:
        user_id = await auth_service.register(UserCreate(name=name, password=password))
        if admin:
            await auth_service.grant_role(user_id, Role.ADMINISTRATOR)
        return await auth_service.authenticate(user_id, password)

    return _make_user


@pytest.fixture
async def alice(make_user) -> Identity:
    return await make_user("alice")


@pytest.fixture
async def bob(make_user) -> Identity:
    return await make_user("bob")


@pytest.fixture
async def recipe_id(recipe_service, alice) -> int:
    """A recipe owned by alice."""
    return await recipe_service.create(
        alice,
        RecipeCreate(
            name="Shakshuka",
            category="Breakfast",
            cook_time="PT20M",
            prep_time="PT10M",
            ingredients=["eggs", "tomatoes", "cumin"],
        ),
    )


@pytest.fixture
async def client(sessions) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client bound to the per-test database."""

    def override_get_session_factory():
        return sessions

    app.dependency_overrides[get_session_factory] = override_get_session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

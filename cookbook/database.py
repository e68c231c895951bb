import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import insert as sa_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from cookbook.config import settings
from cookbook.core.exceptions import Conflict, TransientError, UnsupportedBackend
from cookbook.core.logging import get_logger

logger = get_logger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with the driver-level statement timeout applied."""
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=settings.db_echo,
            connect_args={"timeout": settings.statement_timeout_seconds},
        )
    return create_async_engine(
        database_url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        connect_args={"command_timeout": settings.statement_timeout_seconds},
    )


# Create async engine
engine = build_engine(settings.database_url)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# Base class for models
class Base(DeclarativeBase):
    pass


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency for getting the session factory services open transactions on."""
    return AsyncSessionLocal


@asynccontextmanager
async def transaction(sessions: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Run a block as one atomic unit of work.

    Commits when the block exits normally and rolls back on any exception.
    Service errors raised inside the block propagate unchanged; storage errors
    are logged and replaced with ``Conflict`` or ``TransientError`` so no
    driver detail reaches the caller.
    """
    try:
        async with sessions.begin() as session:
            yield session
    except IntegrityError as exc:
        logger.warning("Transaction rolled back on integrity violation: {}", exc.orig)
        raise Conflict("The change conflicts with a concurrent update") from exc
    except SQLAlchemyError as exc:
        logger.warning("Transaction rolled back on storage error: {}", exc)
        raise TransientError("Storage is temporarily unavailable") from exc
    except asyncio.TimeoutError as exc:
        logger.warning("Transaction rolled back on timeout")
        raise TransientError("Storage operation timed out") from exc


def insert_ignoring_conflicts(session: AsyncSession, model, **values):
    """Build an insert that skips rows violating a unique constraint.

    ``ON CONFLICT DO NOTHING`` on PostgreSQL and SQLite, ``INSERT IGNORE`` on
    MySQL/MariaDB. Any other dialect raises ``UnsupportedBackend``.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    elif dialect in ("mysql", "mariadb"):
        return sa_insert(model.__table__).values(**values).prefix_with("IGNORE")
    else:
        raise UnsupportedBackend(f"Conflict-tolerant insert is not supported on {dialect}")
    return insert(model.__table__).values(**values).on_conflict_do_nothing()


async def init_db():
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

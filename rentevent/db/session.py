"""Database session management and the unit of work."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker

from rentevent.core.config import settings
from rentevent.core.errors import ConflictError, TransactionFailureError
from rentevent.core.logging_config import get_logger
from rentevent.db.base import Base


logger = get_logger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine; SQLite gets the cross-thread flag."""
    return create_async_engine(
        database_url,
        echo=echo,
        future=True,
        connect_args={"check_same_thread": False} if "sqlite" in database_url else {}
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.is_debug_mode)
AsyncSessionLocal = build_sessionmaker(engine)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create all tables that do not exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_schema_initialized", tables=sorted(Base.metadata.tables))


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Transactional scope: commit on exit, roll back on any error.

    Unique-key violations surface as ConflictError, every other database
    error as TransactionFailureError. Service errors raised inside the scope
    propagate unchanged after the rollback.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("unit_of_work_conflict", error=str(exc.orig))
        raise ConflictError(
            "Unique constraint violated",
            details={"error": str(exc.orig)}
        ) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "unit_of_work_failed",
            error_type=type(exc).__name__,
            error=str(exc),
            exc_info=True,
        )
        raise TransactionFailureError(
            "Database transaction failed",
            details={"error_type": type(exc).__name__}
        ) from exc
    except BaseException:
        await session.rollback()
        raise

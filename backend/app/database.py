"""
Userbase Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine/session factories, the unit of work, and
       startup schema management.
Why:   Centralizes all database connection logic in one place.
How:   create_app() builds one engine and one session factory per application.
       Every service operation runs inside unit_of_work(), which commits on
       success, rolls back on error, and always closes the session.
Who:   Used by main.py (composition, lifespan) and UserService.

Unit of work:
    read-write  → commit on success
    read-only   → any flush raises ReadOnlyTransactionError; rollback on exit

    Driver errors are translated on the way out so the layers above only see
    the application exception hierarchy:
        IntegrityError                       → ConflictError
        OperationalError / InterfaceError    → BackendUnavailableError
        connection invalidated (DBAPIError)  → BackendUnavailableError
        any other SQLAlchemyError            → DatabaseError
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Session

from app.config import Settings
from app.exceptions import (
    BackendUnavailableError,
    ConflictError,
    DatabaseError,
    ReadOnlyTransactionError,
    UserbaseError,
)

logger = logging.getLogger(__name__)

READ_ONLY_KEY = "read_only"


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models; owns the shared metadata."""
    pass


# ── Factories ─────────────────────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database URL.

    Pool sizing is left at SQLAlchemy's defaults for the dialect; only
    pre-ping (stale connection detection) and SQL echo are configurable.
    """
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=settings.db_pool_pre_ping,
        echo=settings.db_echo,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows stay readable after commit while the
    # service converts them to schemas
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Read-only Enforcement ─────────────────────────────────────────────────
@event.listens_for(Session, "before_flush")
def _reject_flush_in_read_only(session: Session, flush_context, instances) -> None:
    if session.info.get(READ_ONLY_KEY):
        raise ReadOnlyTransactionError(
            context={
                "new": len(session.new),
                "dirty": len(session.dirty),
                "deleted": len(session.deleted),
            }
        )


# ── Error Translation ─────────────────────────────────────────────────────
def translate_error(exc: SQLAlchemyError) -> UserbaseError:
    """Map a SQLAlchemy exception onto the application hierarchy."""
    error_type = type(exc).__name__
    if isinstance(exc, IntegrityError):
        return ConflictError(
            message="The request conflicts with an existing record",
            context={"error_type": error_type},
        )
    if isinstance(exc, (OperationalError, InterfaceError)) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        return BackendUnavailableError(context={"error_type": error_type})
    return DatabaseError(context={"error_type": error_type})


# ── Unit of Work ──────────────────────────────────────────────────────────
@asynccontextmanager
async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
    read_only: bool = False,
) -> AsyncIterator[AsyncSession]:
    """
    Scope one logical operation to one session and one transaction.

    How it works:
        1. Creates a new session from the factory (flagged read-only if asked)
        2. Yields it to the caller, who performs queries through a repository
        3. On success: commits (read-write) or rolls back (read-only)
        4. On error: rolls back and re-raises, translating SQLAlchemy errors
        5. Always: closes the session (returns connection to pool)

    Example:
        async with unit_of_work(factory, read_only=True) as session:
            users = await UserRepository(session).find_all()

    Raises:
        ConflictError, BackendUnavailableError, DatabaseError for driver
        failures; any other exception propagates unchanged.
    """
    session = session_factory()
    session.info[READ_ONLY_KEY] = read_only
    try:
        yield session
        if read_only:
            await session.rollback()
        else:
            await session.commit()
    except SQLAlchemyError as exc:
        await _rollback_quietly(session)
        translated = translate_error(exc)
        logger.error(
            "Database error (%s): %s",
            type(exc).__name__,
            str(exc).splitlines()[0] if str(exc) else "",
        )
        raise translated from exc
    except Exception:
        await _rollback_quietly(session)
        raise
    finally:
        await session.close()


async def _rollback_quietly(session: AsyncSession) -> None:
    # A dead connection cannot roll back; the original error is what matters
    try:
        await session.rollback()
    except SQLAlchemyError as exc:
        logger.warning("Rollback failed: %s", type(exc).__name__)


# ── Schema Management ─────────────────────────────────────────────────────
async def apply_schema_mode(engine: AsyncEngine, mode: str) -> None:
    """
    Prepare tables at startup according to DB_SCHEMA_MODE.

    none        → no-op
    update      → CREATE TABLE for missing tables only
    create      → DROP all, then CREATE
    create-drop → same as create (the drop happens in drop_schema at shutdown)
    """
    if mode == "none":
        return

    # Models register themselves on Base.metadata at import
    from app.models import user  # noqa: F401

    async with engine.begin() as conn:
        if mode in ("create", "create-drop"):
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready (mode=%s)", mode)


async def drop_schema(engine: AsyncEngine) -> None:
    from app.models import user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Schema dropped")

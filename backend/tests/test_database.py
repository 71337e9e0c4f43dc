"""
Userbase Backend — Unit of Work Tests
=======================================

What:  Commit/rollback behavior, read-only enforcement, driver error
       translation, and schema modes.
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, ProgrammingError

from app.database import apply_schema_mode, drop_schema, translate_error, unit_of_work
from app.exceptions import (
    BackendUnavailableError,
    ConflictError,
    DatabaseError,
    ReadOnlyTransactionError,
)
from app.models.user import User
from app.repositories.user_repository import UserRepository


async def _count(session_factory) -> int:
    async with unit_of_work(session_factory, read_only=True) as session:
        return await UserRepository(session).count()


class TestUnitOfWork:

    @pytest.mark.asyncio
    async def test_commits_on_success(self, session_factory):
        async with unit_of_work(session_factory) as session:
            session.add(User(id="1"))
        assert await _count(session_factory) == 1

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, session_factory):
        with pytest.raises(RuntimeError):
            async with unit_of_work(session_factory) as session:
                session.add(User(id="1"))
                await session.flush()
                raise RuntimeError("boom")
        assert await _count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_read_only_rejects_flush(self, session_factory):
        with pytest.raises(ReadOnlyTransactionError):
            async with unit_of_work(session_factory, read_only=True) as session:
                session.add(User(id="1"))
                await session.flush()
        assert await _count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_read_only_discards_pending_changes(self, session_factory):
        async with unit_of_work(session_factory) as session:
            session.add(User(id="1", first_name="Ann"))

        async with unit_of_work(session_factory, read_only=True) as session:
            user = await UserRepository(session).find_one("1")
            user.first_name = "Changed"

        async with unit_of_work(session_factory, read_only=True) as session:
            user = await UserRepository(session).find_one("1")
            assert user.first_name == "Ann"

    @pytest.mark.asyncio
    async def test_duplicate_insert_becomes_conflict(self, session_factory):
        async with unit_of_work(session_factory) as session:
            session.add(User(id="1"))

        with pytest.raises(ConflictError):
            async with unit_of_work(session_factory) as session:
                session.add(User(id="1"))


class TestTranslateError:

    def test_integrity_error(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        assert isinstance(translate_error(exc), ConflictError)

    def test_operational_error(self):
        exc = OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert isinstance(translate_error(exc), BackendUnavailableError)

    def test_interface_error(self):
        exc = InterfaceError("SELECT 1", {}, Exception("connection closed"))
        assert isinstance(translate_error(exc), BackendUnavailableError)

    def test_invalidated_connection(self):
        exc = ProgrammingError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)
        assert isinstance(translate_error(exc), BackendUnavailableError)

    def test_other_errors(self):
        exc = ProgrammingError("SELEC 1", {}, Exception("syntax error"))
        translated = translate_error(exc)
        assert type(translated) is DatabaseError
        assert translated.context == {"error_type": "ProgrammingError"}


class TestSchemaModes:

    @staticmethod
    async def _tables(engine):
        async with engine.connect() as conn:
            return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    @pytest.mark.asyncio
    async def test_update_keeps_data(self, engine, session_factory):
        async with unit_of_work(session_factory) as session:
            session.add(User(id="1"))

        await apply_schema_mode(engine, "update")

        assert await _count(session_factory) == 1

    @pytest.mark.asyncio
    async def test_create_recreates_empty(self, engine, session_factory):
        async with unit_of_work(session_factory) as session:
            session.add(User(id="1"))

        await apply_schema_mode(engine, "create")

        assert await _count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_drop_schema(self, engine):
        assert "users" in await self._tables(engine)
        await drop_schema(engine)
        assert "users" not in await self._tables(engine)

    @pytest.mark.asyncio
    async def test_none_is_noop(self, engine):
        await drop_schema(engine)
        await apply_schema_mode(engine, "none")
        assert "users" not in await self._tables(engine)

"""
Userbase Backend — User Service
=================================

What:  One delegation point per user operation.
Why:   Owns transaction boundaries so routes stay HTTP-only and repositories
       stay SQL-only.
How:   Each call opens unit_of_work() (read-only for queries), runs one
       repository operation, and converts rows to UserSchema before the
       session closes.
Who:   Built once in create_app() and injected into the users routes.

Design Decision:
    UserService is stateless apart from its session factory. It receives that
    factory in the constructor, so tests can point it at any database.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import unit_of_work
from app.exceptions import ConflictError, NotFoundError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserSchema

logger = logging.getLogger(__name__)


class UserService:
    """
    Business layer for users.

    Responsibilities:
        - find_all / find_one / find_by_email: plain lookups (read-only)
        - get: lookup that must succeed (NotFoundError otherwise)
        - save: upsert
        - create: insert that must not overwrite (ConflictError otherwise)
        - delete: removal that must hit a row (NotFoundError otherwise)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # ── Queries ───────────────────────────────────────────────────────────

    async def find_all(self) -> List[UserSchema]:
        async with unit_of_work(self.session_factory, read_only=True) as session:
            users = await UserRepository(session).find_all()
            return [UserSchema.model_validate(user) for user in users]

    async def find_one(self, user_id: str) -> Optional[UserSchema]:
        async with unit_of_work(self.session_factory, read_only=True) as session:
            user = await UserRepository(session).find_one(user_id)
            return UserSchema.model_validate(user) if user else None

    async def get(self, user_id: str) -> UserSchema:
        """
        Fetch a user that must exist.

        Raises:
            NotFoundError: No user has this id (→ 404)
        """
        user = await self.find_one(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def find_by_email(self, email: str) -> Optional[UserSchema]:
        async with unit_of_work(self.session_factory, read_only=True) as session:
            user = await UserRepository(session).find_by_email(email)
            return UserSchema.model_validate(user) if user else None

    # ── Commands ──────────────────────────────────────────────────────────

    async def save(self, user: UserSchema) -> UserSchema:
        """
        Upsert: insert when the id is unused, otherwise replace every field.

        Returns:
            The user as persisted.
        """
        async with unit_of_work(self.session_factory) as session:
            saved = await UserRepository(session).save(_to_row(user))
            result = UserSchema.model_validate(saved)
        logger.info("User %s saved", result.id)
        return result

    async def create(self, user: UserSchema) -> UserSchema:
        """
        Insert a new user.

        The existence check and the insert share one transaction; a concurrent
        insert of the same id still ends in ConflictError through the
        primary-key IntegrityError.

        Raises:
            ConflictError: The id is already taken (→ 409)
        """
        async with unit_of_work(self.session_factory) as session:
            repository = UserRepository(session)
            if await repository.find_one(user.id) is not None:
                raise ConflictError(
                    message=f"user with ID '{user.id}' already exists",
                    context={"resource": "user", "resource_id": user.id},
                )
            saved = await repository.save(_to_row(user))
            result = UserSchema.model_validate(saved)
        logger.info("User %s created", result.id)
        return result

    async def delete(self, user: UserSchema) -> None:
        """
        Remove the user with the same id as `user`.

        Raises:
            NotFoundError: No such user (→ 404)
        """
        async with unit_of_work(self.session_factory) as session:
            deleted = await UserRepository(session).delete(_to_row(user))
        if not deleted:
            raise NotFoundError(resource="user", resource_id=user.id)
        logger.info("User %s deleted", user.id)


def _to_row(user: UserSchema) -> User:
    return User(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )

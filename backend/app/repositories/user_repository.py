"""
Userbase Backend — User Repository
====================================

What:  Explicit queries for every persistence operation on User.
Who:   Constructed by UserService inside a unit of work.

Query plans:
    find_all       SELECT * FROM users ORDER BY id
    find_one       primary-key lookup (identity map first)
    find_by_email  SELECT * FROM users WHERE email = :email ORDER BY id LIMIT 1
                   → uses idx_users_email
    count          SELECT count(id) FROM users
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """User data access bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> List[User]:
        result = await self.session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def find_one(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        # email is not unique; the lowest id wins so the answer is stable
        result = await self.session.execute(
            select(User).where(User.email == email).order_by(User.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def save(self, user: User) -> User:
        """
        Insert or update keyed on the identifier.

        An existing row has every non-key column overwritten, including
        columns the caller left as None (full replace, not a patch).

        Returns:
            The persisted row, attached to this session.
        """
        existing = await self.session.get(User, user.id)
        if existing is None:
            self.session.add(user)
            persisted = user
            logger.debug("Inserting user %s", user.id)
        else:
            existing.first_name = user.first_name
            existing.last_name = user.last_name
            existing.email = user.email
            persisted = existing
            logger.debug("Updating user %s", user.id)
        await self.session.flush()
        return persisted

    async def delete(self, user: User) -> bool:
        """
        Remove the row whose id matches `user.id`.

        Returns:
            True if a row was deleted, False if none existed (no-op).
        """
        existing = await self.session.get(User, user.id)
        if existing is None:
            return False
        await self.session.delete(existing)
        await self.session.flush()
        return True

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(User.id)))
        return result.scalar() or 0

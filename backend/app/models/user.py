"""
Userbase Backend — User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from the shared DeclarativeBase; apply_schema_mode() creates
       the table from this definition.
Who:   Used by UserRepository for every read and write.

Table Design:
    - id: caller-assigned string primary key. The API never generates ids;
      uniqueness is enforced only by the primary-key constraint.
    - first_name / last_name: plain text, nullable.
    - email: alternate lookup key. Indexed for find_by_email, deliberately
      NOT unique (two users may share an address).
"""

from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """
    A person known to the service.

    Lifecycle:
        1. Created by UserRepository.save() when the id is unused
        2. Overwritten in full by save() with an existing id
        3. Removed by UserRepository.delete()
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Caller-assigned identifier",
    )

    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Alternate lookup key; not unique",
    )

    __table_args__ = (
        Index("idx_users_email", "email"),
    )

    def __repr__(self) -> str:
        """Developer-friendly string representation for debugging."""
        return f"<User(id='{self.id}', email='{self.email}')>"

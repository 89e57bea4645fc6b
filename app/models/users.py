"""Users table model."""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import Boolean
from sqlalchemy import Enum
from sqlalchemy import String
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.models.base import BigIntPK
from app.models.timestamp import TimestampMixin
from user.user import Role


class User(Base, TimestampMixin):
    """Represents a user account in the system.

    Attributes:
        id: Primary key identifier
        email: Unique, lowercased email
        first_name: Given name as entered
        last_name: Family name as entered
        role: USER, COACH, or DELETED for banned accounts
        phone_number: Unique phone number
        username: Unique username derived from the names
        hashed_password: bcrypt hash of the password
        is_verified: Whether the email has been confirmed
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role_enum"),
        nullable=False,
        server_default=Role.USER.value,
    )
    phone_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    username: Mapped[str] = mapped_column(
        String(120), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=sa.text("false"),
        comment="Set once the email verification code is confirmed",
    )

    coach: Mapped["Coach"] = relationship(  # noqa
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    __table_args__ = (sa.Index("ix_users_first_name_last_name", "first_name", "last_name"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"

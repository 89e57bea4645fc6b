"""User lookup module."""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.custom_logging import logger
from app.models.users import User


async def _first_user(db: AsyncSession, *criteria) -> User | None:
    try:
        result = await db.execute(select(User).where(*criteria))
    except SQLAlchemyError as e:
        logger.error(f"Database error while looking up user: {e!s}")
        raise
    return result.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """
    Retrieve a user by email address.

    Args:
        db (AsyncSession): The database session to use for queries.
        email (str): Normalized (lowercased) email address.

    Returns:
        User | None: The user object if found, otherwise None. Users with the
        DELETED role are returned too, callers decide what that means.
    """
    return await _first_user(db, User.email == email)


async def get_user_by_phone_number(db: AsyncSession, phone_number: str) -> User | None:
    """Retrieve a user by phone number, regardless of role."""
    return await _first_user(db, User.phone_number == phone_number)


async def count_users_by_name(db: AsyncSession, first_name: str, last_name: str) -> int:
    """
    Count users whose first and last names match exactly (case-sensitive).

    Args:
        db (AsyncSession): The database session to use for queries.
        first_name (str): First name as stored.
        last_name (str): Last name as stored.

    Returns:
        int: Number of matching users.
    """
    stmt = (
        select(func.count())
        .select_from(User)
        .where(User.first_name == first_name, User.last_name == last_name)
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error(f"Database error while counting users by name: {e!s}")
        raise
    return result.scalar_one()

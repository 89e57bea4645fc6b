"""Password hashing module."""

from __future__ import annotations

from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verifies if the plain password matches the hashed password.

    Args:
        plain_password (str): The plain text password that needs to be verified.
        hashed_password (str): The hashed password stored in the database.

    Returns:
        bool: True if passwords match, False otherwise.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hashes a plain password with a per-password salt.

    Args:
        password (str): The plain password to be hashed.

    Returns:
        str: The bcrypt hash, cost factor taken from ``BCRYPT_ROUNDS``.
    """
    return pwd_context.hash(password)

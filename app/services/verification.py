"""Email verification codes: generation and storage."""

import hashlib
import secrets
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.custom_logging import logger
from app.models.timestamp import utcnow
from app.models.verification_codes import VerificationCode


def hash_code(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


async def generate_verification_code(
    db: AsyncSession,
    email: str,
    purpose: str = "verification",
) -> str:
    """
    Create a numeric one-time code for ``email`` and store its hash.

    Any earlier code for the same email and purpose is discarded, so only
    the most recent email sent is usable. The plain code is returned for
    the caller to deliver and is never stored.

    Args:
        db (AsyncSession): The database session.
        email (str): Address the code will be sent to.
        purpose (str): What the code confirms.

    Returns:
        str: The code, ``VERIFICATION_CODE_LENGTH`` digits long.
    """
    code = "".join(
        secrets.choice("0123456789") for _ in range(settings.VERIFICATION_CODE_LENGTH)
    )
    expires_at = utcnow() + timedelta(minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES)

    await db.execute(
        delete(VerificationCode).where(
            VerificationCode.email == email,
            VerificationCode.purpose == purpose,
        )
    )
    db.add(
        VerificationCode(
            email=email,
            code_hash=hash_code(code),
            purpose=purpose,
            expires_at=expires_at,
        )
    )
    await db.commit()

    logger.debug(f"Stored {purpose} code for {email}, expires at {expires_at:%H:%M:%S}")
    return code

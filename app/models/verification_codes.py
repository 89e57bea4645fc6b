from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy import String
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

from app.models.base import Base
from app.models.base import BigIntPK
from app.models.timestamp import utcnow


class VerificationCode(Base):
    """Hashed one-time code sent to an email address.

    Attributes:
        email: Address the code was sent to
        code_hash: SHA-256 hex digest of the code
        purpose: What the code confirms, e.g. "verification"
        expires_at: Moment after which the code is rejected
    """

    __tablename__ = "verification_codes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    purpose: Mapped[str] = mapped_column(
        String(32), nullable=False, default="verification"
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<VerificationCode(email='{self.email}', expires_at={self.expires_at})>"

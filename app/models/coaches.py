"""Coach profile table model."""

from __future__ import annotations

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.models.base import BigIntPK
from app.models.timestamp import TimestampMixin


class Coach(Base, TimestampMixin):
    """Profile row that exists for every user with the COACH role."""

    __tablename__ = "coaches"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    user: Mapped["User"] = relationship(back_populates="coach")  # noqa

    def __repr__(self) -> str:
        return f"<Coach(id={self.id}, user_id={self.user_id})>"

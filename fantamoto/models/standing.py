"""Cumulative championship standings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.utils import dt_iso
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .championship import CalendarEntry, Championship
    from .user import User


class Standing(Base):
    """A user's cumulative score and rank within a championship."""

    __tablename__ = "standings"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    championship_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("championships.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    """Championship the row ranks in."""

    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    """Ranked user."""

    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Sum of every reconciled race delta."""

    position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """1-based rank; ``None`` until the first reconciliation."""

    update_calendar_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("calendar.id", ondelete="SET NULL"), nullable=True
    )
    """Last race whose delta has been folded into ``score``."""

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    """Optimistic concurrency counter managed by the ORM."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    championship: Mapped["Championship"] = relationship(back_populates="standings")
    user: Mapped["User"] = relationship()
    update_calendar: Mapped[Optional["CalendarEntry"]] = relationship()

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint(
            "championship_id", "user_id", name="uq_standing_championship_user"
        ),
    )

    def __init__(
        self,
        *,
        championship_id: int,
        user_id: int,
        score: int = 0,
        position: Optional[int] = None,
        update_calendar_id: Optional[int] = None,
    ) -> None:
        self.championship_id = championship_id
        self.user_id = user_id
        self.score = score
        self.position = position
        self.update_calendar_id = update_calendar_id

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Standing(user_id={self.user_id}, position={self.position}, "
            f"score={self.score}, update_calendar_id={self.update_calendar_id})>"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "championship_id": self.championship_id,
            "user_id": self.user_id,
            "score": self.score,
            "position": self.position,
            "update_calendar_id": self.update_calendar_id,
            "updated_at": dt_iso(self.updated_at),
        }

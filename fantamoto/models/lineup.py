from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.utils import dt_iso
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .championship import CalendarEntry
    from .rider import Rider
    from .user import User


class Lineup(Base):
    """A user's rider picks for one race: one for qualifying, one for the race."""

    __tablename__ = "lineups"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    championship_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("championships.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    calendar_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("calendar.id", ondelete="CASCADE"), nullable=False, index=True
    )
    qualifying_rider_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=False
    )
    race_rider_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=False
    )
    inserted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    user: Mapped["User"] = relationship()
    calendar: Mapped["CalendarEntry"] = relationship()
    qualifying_rider: Mapped["Rider"] = relationship(
        foreign_keys=[qualifying_rider_id]
    )
    race_rider: Mapped["Rider"] = relationship(foreign_keys=[race_rider_id])

    __table_args__ = (
        UniqueConstraint(
            "championship_id",
            "user_id",
            "calendar_id",
            name="uq_lineup_championship_user_calendar",
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Lineup(user_id={self.user_id}, calendar_id={self.calendar_id}, "
            f"qualifying={self.qualifying_rider_id}, race={self.race_rider_id})>"
        )

    @property
    def rider_ids(self) -> tuple[int, int]:
        """The two rider slots, qualifying first."""
        return (self.qualifying_rider_id, self.race_rider_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "championship_id": self.championship_id,
            "user_id": self.user_id,
            "calendar_id": self.calendar_id,
            "qualifying_rider_id": self.qualifying_rider_id,
            "race_rider_id": self.race_rider_id,
            "inserted_at": dt_iso(self.inserted_at),
            "modified_at": dt_iso(self.modified_at),
        }

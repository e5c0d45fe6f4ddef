from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_TYPE, Base


class RaceResult(Base):
    """Classification of one rider at one race weekend.

    Rows are written by the results ingestion job. A ``None`` position means
    the rider was not classified in that session.
    """

    __tablename__ = "race_results"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    championship_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("championships.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    calendar_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("calendar.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rider_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=False
    )
    qualifying_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    qualifying_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sprint_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    sprint_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    race_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    race_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "championship_id",
            "calendar_id",
            "rider_id",
            name="uq_race_result_championship_calendar_rider",
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<RaceResult(calendar_id={self.calendar_id}, rider_id={self.rider_id}, "
            f"race_position={self.race_position}, race_points={self.race_points})>"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "championship_id": self.championship_id,
            "calendar_id": self.calendar_id,
            "rider_id": self.rider_id,
            "qualifying_position": self.qualifying_position,
            "qualifying_points": self.qualifying_points,
            "sprint_position": self.sprint_position,
            "sprint_points": self.sprint_points,
            "race_position": self.race_position,
            "race_points": self.race_points,
        }

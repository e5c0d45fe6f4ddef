"""Race and sprint wagers.

Both tables share one column layout; they are kept apart because each kind is
budgeted against its own configuration limits.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..db.utils import dt_iso
from .base import ID_TYPE, Base


class BetMixin:
    """Columns common to :class:`RaceBet` and :class:`SprintBet`."""

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
    rider_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    """Predicted finishing position."""

    points: Mapped[int] = mapped_column(Integer, nullable=False)
    """Stake. Won in full on a hit, half (rounded down) lost on a miss."""

    inserted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<{type(self).__name__}(user_id={self.user_id}, "
            f"calendar_id={self.calendar_id}, rider_id={self.rider_id}, "
            f"position={self.position}, points={self.points})>"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "championship_id": self.championship_id,
            "user_id": self.user_id,
            "calendar_id": self.calendar_id,
            "rider_id": self.rider_id,
            "position": self.position,
            "points": self.points,
            "inserted_at": dt_iso(self.inserted_at),
            "modified_at": dt_iso(self.modified_at),
        }


class RaceBet(BetMixin, Base):
    __tablename__ = "race_bets"

    __table_args__ = (
        UniqueConstraint(
            "championship_id",
            "user_id",
            "calendar_id",
            "rider_id",
            name="uq_race_bet_championship_user_calendar_rider",
        ),
        CheckConstraint("points >= 1", name="race_bet_points_positive"),
    )


class SprintBet(BetMixin, Base):
    __tablename__ = "sprint_bets"

    __table_args__ = (
        UniqueConstraint(
            "championship_id",
            "user_id",
            "calendar_id",
            "rider_id",
            name="uq_sprint_bet_championship_user_calendar_rider",
        ),
        CheckConstraint("points >= 1", name="sprint_bet_points_positive"),
    )


class BetKind:
    """Describes one family of bets: its table and the limits that budget it.

    Parameters
    ----------
    name : str
        Short identifier used in logs and error details (``"race"``).
    model : type
        ORM class storing the bets.
    points_limit_field, race_limit_field, rider_limit_field : str
        Names of the :class:`~fantamoto.models.Configuration` columns holding
        the per-race stake budget, the per-race bet count and the per-rider
        bet count.
    result_position_field : str
        :class:`~fantamoto.models.RaceResult` column a prediction is compared
        against.
    forbids_lineup_race_rider : bool
        When ``True`` a bet on the rider in the user's own race slot is
        rejected.
    """

    def __init__(
        self,
        name: str,
        model: type,
        *,
        points_limit_field: str,
        race_limit_field: str,
        rider_limit_field: str,
        result_position_field: str,
        forbids_lineup_race_rider: bool = False,
    ) -> None:
        self.name = name
        self.model = model
        self.points_limit_field = points_limit_field
        self.race_limit_field = race_limit_field
        self.rider_limit_field = rider_limit_field
        self.result_position_field = result_position_field
        self.forbids_lineup_race_rider = forbids_lineup_race_rider

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<BetKind({self.name})>"

    def limits(self, configuration: Any) -> tuple[Optional[int], Optional[int], Optional[int]]:
        """Return ``(points, per_race, per_rider)`` limits from ``configuration``."""
        return (
            getattr(configuration, self.points_limit_field),
            getattr(configuration, self.race_limit_field),
            getattr(configuration, self.rider_limit_field),
        )

    def actual_position(self, result: Any) -> Optional[int]:
        return getattr(result, self.result_position_field)


RACE_BET = BetKind(
    "race",
    RaceBet,
    points_limit_field="bets_limit_points",
    race_limit_field="bets_limit_race",
    rider_limit_field="bets_limit_driver",
    result_position_field="race_position",
    forbids_lineup_race_rider=True,
)

SPRINT_BET = BetKind(
    "sprint",
    SprintBet,
    points_limit_field="bets_limit_sprint_points",
    race_limit_field="bets_limit_sprint_race",
    rider_limit_field="bets_limit_sprint_driver",
    result_position_field="sprint_position",
)

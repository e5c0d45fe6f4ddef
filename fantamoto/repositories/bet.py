from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import BetKind
from .base import BaseRepository


class BetRepo(BaseRepository):
    """Reads and writes the bets of one :class:`~fantamoto.models.BetKind`."""

    def __init__(self, session: Session, kind: BetKind) -> None:
        super().__init__(session)
        self.kind = kind

    @property
    def model(self) -> Any:
        return self.kind.model

    def find(
        self, championship_id: int, user_id: int, calendar_id: int, rider_id: int
    ) -> Optional[Any]:
        model = self.model
        return self.session.scalar(
            select(model).where(
                model.championship_id == championship_id,
                model.user_id == user_id,
                model.calendar_id == calendar_id,
                model.rider_id == rider_id,
            )
        )

    def find_for_user(
        self,
        championship_id: int,
        user_id: int,
        *,
        calendar_id: Optional[int] = None,
    ) -> list[Any]:
        """Return the user's bets in the championship, optionally for one race."""

        model = self.model
        stmt = select(model).where(
            model.championship_id == championship_id,
            model.user_id == user_id,
        )
        if calendar_id is not None:
            stmt = stmt.where(model.calendar_id == calendar_id)
        stmt = stmt.order_by(model.calendar_id, model.rider_id)
        return list(self.session.scalars(stmt).all())

    def find_for_race(self, championship_id: int, calendar_id: int) -> list[Any]:
        model = self.model
        stmt = (
            select(model)
            .where(
                model.championship_id == championship_id,
                model.calendar_id == calendar_id,
            )
            .order_by(model.user_id, model.rider_id)
        )
        return list(self.session.scalars(stmt).all())

    def upsert(
        self,
        championship_id: int,
        user_id: int,
        calendar_id: int,
        rider_id: int,
        *,
        position: int,
        points: int,
    ) -> Any:
        """Insert the bet or replace stake and prediction of the existing one."""

        bet = self.find(championship_id, user_id, calendar_id, rider_id)
        if bet is None:
            bet = self.model(
                championship_id=championship_id,
                user_id=user_id,
                calendar_id=calendar_id,
                rider_id=rider_id,
                position=position,
                points=points,
            )
            self.session.add(bet)
        else:
            bet.position = position
            bet.points = points
        bet.modified_at = datetime.now(timezone.utc)
        self.session.flush()
        return bet

    def delete(
        self, championship_id: int, user_id: int, calendar_id: int, rider_id: int
    ) -> bool:
        bet = self.find(championship_id, user_id, calendar_id, rider_id)
        if bet is None:
            return False
        self.session.delete(bet)
        self.session.flush()
        return True

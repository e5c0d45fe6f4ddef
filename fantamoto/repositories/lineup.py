from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select

from ..models import Lineup
from .base import BaseRepository


class LineupRepo(BaseRepository):
    def find(
        self, championship_id: int, user_id: int, calendar_id: int
    ) -> Optional[Lineup]:
        return self.session.scalar(
            select(Lineup).where(
                Lineup.championship_id == championship_id,
                Lineup.user_id == user_id,
                Lineup.calendar_id == calendar_id,
            )
        )

    def find_for_user(
        self,
        championship_id: int,
        user_id: int,
        *,
        exclude_calendar_id: Optional[int] = None,
    ) -> list[Lineup]:
        """Return every lineup of ``user_id`` in the championship.

        ``exclude_calendar_id`` drops the row of one race, typically the one
        about to be replaced.
        """

        stmt = select(Lineup).where(
            Lineup.championship_id == championship_id,
            Lineup.user_id == user_id,
        )
        if exclude_calendar_id is not None:
            stmt = stmt.where(Lineup.calendar_id != exclude_calendar_id)
        return list(self.session.scalars(stmt.order_by(Lineup.calendar_id)).all())

    def find_for_race(self, championship_id: int, calendar_id: int) -> list[Lineup]:
        stmt = (
            select(Lineup)
            .where(
                Lineup.championship_id == championship_id,
                Lineup.calendar_id == calendar_id,
            )
            .order_by(Lineup.user_id)
        )
        return list(self.session.scalars(stmt).all())

    def upsert(
        self,
        championship_id: int,
        user_id: int,
        calendar_id: int,
        *,
        qualifying_rider_id: int,
        race_rider_id: int,
    ) -> Lineup:
        """Insert the lineup or replace the riders of the existing one."""

        lineup = self.find(championship_id, user_id, calendar_id)
        if lineup is None:
            lineup = Lineup(
                championship_id=championship_id,
                user_id=user_id,
                calendar_id=calendar_id,
                qualifying_rider_id=qualifying_rider_id,
                race_rider_id=race_rider_id,
            )
            self.session.add(lineup)
        else:
            lineup.qualifying_rider_id = qualifying_rider_id
            lineup.race_rider_id = race_rider_id
        lineup.modified_at = datetime.now(timezone.utc)
        self.session.flush()
        return lineup


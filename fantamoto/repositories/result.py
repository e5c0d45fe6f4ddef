from __future__ import annotations

from sqlalchemy import select

from ..models import RaceResult
from .base import BaseRepository


class ResultRepo(BaseRepository):
    """Read access to the rows produced by the results ingestion job."""

    def find_for_race(self, championship_id: int, calendar_id: int) -> list[RaceResult]:
        stmt = (
            select(RaceResult)
            .where(
                RaceResult.championship_id == championship_id,
                RaceResult.calendar_id == calendar_id,
            )
            .order_by(RaceResult.rider_id)
        )
        return list(self.session.scalars(stmt).all())

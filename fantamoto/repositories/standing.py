from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select

from ..models import Standing
from .base import BaseRepository


class StandingRepo(BaseRepository):
    def find(self, championship_id: int, user_id: int) -> Optional[Standing]:
        return self.session.scalar(
            select(Standing).where(
                Standing.championship_id == championship_id,
                Standing.user_id == user_id,
            )
        )

    def find_for_championship(self, championship_id: int) -> list[Standing]:
        """Return the table ordered by rank, unranked rows last."""

        stmt = (
            select(Standing)
            .where(Standing.championship_id == championship_id)
            .order_by(
                Standing.position.asc().nulls_last(),
                Standing.score.desc(),
                Standing.user_id.asc(),
            )
        )
        return list(self.session.scalars(stmt).all())

    def save_all(self, standings: Iterable[Standing]) -> None:
        """Persist new and modified rows in one flush."""

        self.session.add_all(list(standings))
        self.session.flush()

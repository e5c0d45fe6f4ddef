from __future__ import annotations

from sqlalchemy import select

from ..models import Rider
from .base import BaseRepository


class RiderRepo(BaseRepository):
    def list_all(self) -> list[Rider]:
        """Return every rider ordered by race number, unnumbered riders last."""

        stmt = select(Rider).order_by(
            Rider.number.asc().nulls_last(), Rider.last_name, Rider.id
        )
        return list(self.session.scalars(stmt).all())

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select

from ..models import CalendarEntry, Championship
from .base import BaseRepository


class ChampionshipRepo(BaseRepository):
    def get(self, championship_id: int) -> Optional[Championship]:
        return self.session.get(Championship, championship_id)

    def find_by_year(self, year: int) -> Optional[Championship]:
        return Championship.get_by_year(self.session, year)

    def list_all(self) -> list[Championship]:
        """Return every championship, most recent season first."""
        stmt = select(Championship).order_by(Championship.year.desc())
        return list(self.session.scalars(stmt).all())


class CalendarRepo(BaseRepository):
    def get(self, calendar_id: int) -> Optional[CalendarEntry]:
        return self.session.get(CalendarEntry, calendar_id)

    def list_for_championship(self, championship_id: int) -> list[CalendarEntry]:
        stmt = (
            select(CalendarEntry)
            .where(CalendarEntry.championship_id == championship_id)
            .order_by(CalendarEntry.race_order)
        )
        return list(self.session.scalars(stmt).all())

    def next_after(self, championship_id: int, day: date) -> Optional[CalendarEntry]:
        """Return the first race whose event date is strictly after ``day``."""

        stmt = (
            select(CalendarEntry)
            .where(
                CalendarEntry.championship_id == championship_id,
                CalendarEntry.event_date > day,
            )
            .order_by(CalendarEntry.event_date.asc(), CalendarEntry.race_order.asc())
        )
        return self.session.scalars(stmt).first()

    def race_orders(self, calendar_ids: Iterable[int]) -> dict[int, int]:
        """Map each of ``calendar_ids`` to its ``race_order``."""

        ids = set(calendar_ids)
        if not ids:
            return {}
        stmt = select(CalendarEntry.id, CalendarEntry.race_order).where(
            CalendarEntry.id.in_(ids)
        )
        return {row.id: row.race_order for row in self.session.execute(stmt)}

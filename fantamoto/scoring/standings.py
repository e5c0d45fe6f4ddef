"""Folding race deltas into cumulative championship standings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConcurrentReconciliation, NotFound
from ..models import Standing
from ..repositories import CalendarRepo, StandingRepo
from .engine import ScoreDelta

logger = logging.getLogger(__name__)


def rank_standings(standings: Iterable[Standing]) -> list[Standing]:
    """Order rows by score (highest first) and assign 1-based positions.

    Equal scores are ranked by ascending user id so that the table does not
    depend on the order rows come back from the store.
    """

    ranked = sorted(standings, key=lambda row: (-(row.score or 0), row.user_id))
    for index, row in enumerate(ranked):
        row.position = index + 1
    return ranked


@dataclass
class Reconciliation:
    """Outcome of :meth:`StandingsReconciler.reconcile`.

    Attributes
    ----------
    applied : bool
        ``False`` when the race had already been folded into every row.
    standings : list[Standing]
        The championship table ordered by position.
    created : int
        Number of rows created for users scoring for the first time.
    """

    applied: bool
    standings: list[Standing]
    created: int = 0


class StandingsReconciler:
    """Applies score deltas to the standings table exactly once per race."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repo = StandingRepo(session)
        self._calendar = CalendarRepo(session)

    def reconcile(
        self,
        championship_id: int,
        calendar_id: int,
        deltas: Sequence[ScoreDelta],
        *,
        standings: Optional[Sequence[Standing]] = None,
    ) -> Reconciliation:
        """Add ``deltas`` to the standings of ``championship_id`` and re-rank.

        Parameters
        ----------
        championship_id : int
            Championship whose table is updated.
        calendar_id : int
            Race the deltas were computed for. Updated rows are stamped
            with it.
        deltas : Sequence[ScoreDelta]
            Output of :meth:`ScoringEngine.compute` for the race.
        standings : Optional[Sequence[Standing]], default: None
            Rows already loaded by the caller. When omitted they are read
            from the session.

        Returns
        -------
        Reconciliation
            Whether anything was written and the resulting table.

        Raises
        ------
        ConcurrentReconciliation
            If another transaction changed the same rows (stale version) or
            created a row for the same user after they were read.
        NotFound
            If ``calendar_id`` is not a calendar entry.

        Notes
        -----
        A row stamped with ``calendar_id`` or with a race later in the
        calendar (higher ``race_order``) already includes this race: it keeps
        its score and its stamp. Re-scoring an older race therefore never
        double counts nor moves the stamp backwards. When every row is in
        that state the call is a no-op. Users with a delta but no row yet
        get a new row starting from their delta.
        """

        rows = list(
            standings
            if standings is not None
            else self._repo.find_for_championship(championship_id)
        )
        by_user = {row.user_id: row for row in rows}
        missing = [delta for delta in deltas if delta.user_id not in by_user]

        pending = self._pending(rows, calendar_id)
        if not pending and not missing:
            logger.warning(
                "Standings of championship %s already include race %s; skipping update",
                championship_id,
                calendar_id,
            )
            return Reconciliation(
                applied=False, standings=sorted(rows, key=_by_position)
            )

        totals = {delta.user_id: delta.total for delta in deltas}
        for row in pending:
            row.score = (row.score or 0) + totals.get(row.user_id, 0)
            row.update_calendar_id = calendar_id

        for delta in missing:
            row = Standing(
                championship_id=championship_id,
                user_id=delta.user_id,
                score=delta.total,
                update_calendar_id=calendar_id,
            )
            rows.append(row)

        ranked = rank_standings(rows)
        try:
            self._repo.save_all(ranked)
        except (StaleDataError, IntegrityError) as exc:
            logger.warning(
                "Concurrent standings update detected for championship %s, race %s",
                championship_id,
                calendar_id,
            )
            raise ConcurrentReconciliation(
                "Standings were modified by another reconciliation; retry the request.",
                {"championship_id": championship_id, "calendar_id": calendar_id},
            ) from exc

        logger.info(
            "Standings of championship %s updated with race %s (%d rows, %d new)",
            championship_id,
            calendar_id,
            len(ranked),
            len(missing),
        )
        return Reconciliation(applied=True, standings=ranked, created=len(missing))

    def _pending(self, rows: Sequence[Standing], calendar_id: int) -> list[Standing]:
        """Rows that do not include ``calendar_id`` yet."""

        race = self._calendar.get(calendar_id)
        if race is None:
            raise NotFound(
                f"Race {calendar_id} not found.", {"calendar_id": calendar_id}
            )
        orders = self._calendar.race_orders(
            row.update_calendar_id
            for row in rows
            if row.update_calendar_id is not None
        )
        orders[race.id] = race.race_order

        pending = []
        for row in rows:
            stamped = orders.get(row.update_calendar_id)
            if stamped is None or stamped < race.race_order:
                pending.append(row)
        return pending


def _by_position(row: Standing) -> tuple[int, int, int]:
    position = row.position if row.position is not None else 1 << 30
    return (position, -(row.score or 0), row.user_id)


__all__ = [
    "Reconciliation",
    "StandingsReconciler",
    "rank_standings",
]

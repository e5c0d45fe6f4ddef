"""Submission rules for lineups and bets.

The validator reads the persisted state through repositories and treats the
proposed write as already part of the counted set. It never writes; callers
persist the normalized request only after :meth:`ConstraintValidator.check_lineup`
or :meth:`ConstraintValidator.check_bet` returned.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..errors import (
    ConfigMissing,
    FormationLimitExceeded,
    InvalidInput,
    InvalidLineup,
    PointsBudgetExceeded,
    RaceBetLimitExceeded,
    RiderBetLimitExceeded,
    SelfBetForbidden,
)
from ..models import BetKind, Configuration
from ..repositories import BetRepo, ConfigurationRepo, LineupRepo

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"^[+-]?\d+$")


def coerce_int(field: str, value: Any, *, minimum: Optional[int] = None) -> int:
    """Return ``value`` as an ``int`` or raise :class:`InvalidInput`.

    Accepts ints, integral floats and decimal strings (``"6"``, ``" 12 "``).
    Booleans, fractional numbers and anything else are rejected.
    """

    if isinstance(value, bool):
        number = None
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and _INT_PATTERN.match(value.strip()):
        number = int(value.strip())
    else:
        number = None

    if number is None:
        raise InvalidInput(
            f"{field} must be an integer.", {"field": field, "value": repr(value)}
        )
    if minimum is not None and number < minimum:
        raise InvalidInput(
            f"{field} must be at least {minimum}.",
            {"field": field, "value": number, "minimum": minimum},
        )
    return number


def _enforced(limit: Optional[int]) -> bool:
    # A missing or zero limit leaves the rule switched off.
    return bool(limit)


@dataclass(frozen=True)
class LineupRequest:
    """A lineup submission whose fields are normalized integers."""

    championship_id: int
    user_id: int
    calendar_id: int
    qualifying_rider_id: int
    race_rider_id: int


@dataclass(frozen=True)
class BetRequest:
    """A bet submission whose fields are normalized integers."""

    kind: BetKind
    championship_id: int
    user_id: int
    calendar_id: int
    rider_id: int
    position: int
    points: int


class ConstraintValidator:
    """Accepts or rejects lineup and bet submissions.

    Parameters
    ----------
    session : Session
        Session the validator reads persisted lineups, bets and
        configuration through.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._configurations = ConfigurationRepo(session)
        self._lineups = LineupRepo(session)

    def _configuration(self, championship_id: int) -> Configuration:
        configuration = self._configurations.find(championship_id)
        if configuration is None:
            raise ConfigMissing(
                f"Championship {championship_id} has no configuration.",
                {"championship_id": championship_id},
            )
        return configuration

    def check_lineup(
        self,
        championship_id: Any,
        user_id: Any,
        calendar_id: Any,
        qualifying_rider_id: Any,
        race_rider_id: Any,
    ) -> LineupRequest:
        """Validate a lineup submission.

        Returns
        -------
        LineupRequest
            The submission with every id normalized to ``int``.

        Raises
        ------
        InvalidInput
            If an id is not an integer.
        InvalidLineup
            If both slots name the same rider.
        ConfigMissing
            If the championship has no configuration row.
        FormationLimitExceeded
            If a rider would exceed ``formation_limit_driver`` appearances.
            ``details["riders"]`` maps each offending rider id to its count.
        """

        request = LineupRequest(
            championship_id=coerce_int("championship_id", championship_id),
            user_id=coerce_int("user_id", user_id),
            calendar_id=coerce_int("calendar_id", calendar_id),
            qualifying_rider_id=coerce_int("qualifying_rider_id", qualifying_rider_id),
            race_rider_id=coerce_int("race_rider_id", race_rider_id),
        )

        if request.qualifying_rider_id == request.race_rider_id:
            raise InvalidLineup(
                "Qualifying rider and race rider must be different.",
                {"rider_id": request.race_rider_id},
            )

        limit = self._configuration(request.championship_id).formation_limit_driver
        if not _enforced(limit):
            return request

        # The row for this race is replaced by the submission, not added to.
        existing = self._lineups.find_for_user(
            request.championship_id,
            request.user_id,
            exclude_calendar_id=request.calendar_id,
        )
        occupancy: Counter[int] = Counter()
        for lineup in existing:
            occupancy.update(lineup.rider_ids)
        occupancy.update((request.qualifying_rider_id, request.race_rider_id))

        offenders = {
            rider_id: count for rider_id, count in occupancy.items() if count > limit
        }
        if offenders:
            logger.warning(
                "Lineup rejected for user %s in championship %s: riders over "
                "formation limit %s: %s",
                request.user_id,
                request.championship_id,
                limit,
                offenders,
            )
            raise FormationLimitExceeded(
                f"Formation limit of {limit} exceeded.",
                {"limit": limit, "riders": offenders},
            )
        return request

    def check_bet(
        self,
        kind: BetKind,
        championship_id: Any,
        user_id: Any,
        calendar_id: Any,
        rider_id: Any,
        points: Any,
        position: Any,
    ) -> BetRequest:
        """Validate a bet of ``kind`` against the championship limits.

        The checks run in a fixed order and the first failure is raised:
        input normalization, own race rider (race bets only), configuration,
        points budget, bets per race, bets per rider. A bet already stored
        under the same race and rider is treated as replaced and is left out
        of every count.

        Returns
        -------
        BetRequest
            The submission with every numeric field normalized to ``int``.
        """

        request = BetRequest(
            kind=kind,
            championship_id=coerce_int("championship_id", championship_id),
            user_id=coerce_int("user_id", user_id),
            calendar_id=coerce_int("calendar_id", calendar_id),
            rider_id=coerce_int("rider_id", rider_id),
            position=coerce_int("position", position, minimum=1),
            points=coerce_int("points", points, minimum=1),
        )

        if kind.forbids_lineup_race_rider:
            lineup = self._lineups.find(
                request.championship_id, request.user_id, request.calendar_id
            )
            if lineup is not None and lineup.race_rider_id == request.rider_id:
                raise SelfBetForbidden(
                    "You cannot bet on the rider chosen for your own race slot.",
                    {"rider_id": request.rider_id, "calendar_id": request.calendar_id},
                )

        points_limit, race_limit, rider_limit = kind.limits(
            self._configuration(request.championship_id)
        )

        existing = BetRepo(self._session, kind).find_for_user(
            request.championship_id, request.user_id
        )
        others = [
            bet
            for bet in existing
            if not (
                bet.calendar_id == request.calendar_id
                and bet.rider_id == request.rider_id
            )
        ]
        this_race = [bet for bet in others if bet.calendar_id == request.calendar_id]

        if _enforced(points_limit):
            used = sum(bet.points for bet in this_race)
            if used + request.points > points_limit:
                remaining = max(points_limit - used, 0)
                self._reject(request, "points budget")
                raise PointsBudgetExceeded(
                    f"Insufficient remaining points. You have {remaining} points left.",
                    {
                        "limit": points_limit,
                        "used": used,
                        "requested": request.points,
                        "remaining": remaining,
                    },
                )

        if _enforced(race_limit) and len(this_race) + 1 > race_limit:
            self._reject(request, "bets per race")
            raise RaceBetLimitExceeded(
                f"Maximum number of {kind.name} bets ({race_limit}) reached for this race.",
                {"limit": race_limit, "count": len(this_race)},
            )

        on_rider = [bet for bet in others if bet.rider_id == request.rider_id]
        if _enforced(rider_limit) and len(on_rider) + 1 > rider_limit:
            self._reject(request, "bets per rider")
            raise RiderBetLimitExceeded(
                f"Maximum number of {kind.name} bets ({rider_limit}) reached for this rider.",
                {
                    "limit": rider_limit,
                    "count": len(on_rider),
                    "rider_id": request.rider_id,
                },
            )

        return request

    @staticmethod
    def _reject(request: BetRequest, rule: str) -> None:
        logger.warning(
            "%s bet rejected for user %s, race %s, rider %s: %s limit",
            request.kind.name.capitalize(),
            request.user_id,
            request.calendar_id,
            request.rider_id,
            rule,
        )

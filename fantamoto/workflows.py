import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConfigMissing, DataLoadFailure, InvalidInput, NotFound
from .models import (
    RACE_BET,
    SPRINT_BET,
    BetKind,
    CalendarEntry,
    Championship,
    Configuration,
    FantasyTeam,
    Lineup,
    Rider,
    Standing,
    UserSettings,
)
from .repositories import (
    BetRepo,
    CalendarRepo,
    ChampionshipRepo,
    ConfigurationRepo,
    FantasyTeamRepo,
    LineupRepo,
    ResultRepo,
    RiderRepo,
    StandingRepo,
    UserSettingsRepo,
)
from .rules import ConstraintValidator, coerce_int
from .scoring import RaceData, ScoreDelta, ScoringEngine, StandingsReconciler

logger = logging.getLogger(__name__)


def submit_lineup(
    session: Session,
    championship_id: Any,
    user_id: Any,
    calendar_id: Any,
    qualifying_rider_id: Any,
    race_rider_id: Any,
) -> Lineup:
    """Validate a lineup and store it, replacing the user's lineup for the race.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session. The caller owns the transaction.
    championship_id, user_id, calendar_id : int
        Identify the lineup slot. Numeric strings are accepted.
    qualifying_rider_id : int
        Rider scoring qualifying points.
    race_rider_id : int
        Rider scoring race points.

    Returns
    -------
    Lineup
        The persisted row.

    Raises
    ------
    FantasyError
        ``InvalidInput``, ``InvalidLineup``, ``ConfigMissing`` or
        ``FormationLimitExceeded``. Nothing is written in that case.
    """

    request = ConstraintValidator(session).check_lineup(
        championship_id, user_id, calendar_id, qualifying_rider_id, race_rider_id
    )
    lineup = LineupRepo(session).upsert(
        request.championship_id,
        request.user_id,
        request.calendar_id,
        qualifying_rider_id=request.qualifying_rider_id,
        race_rider_id=request.race_rider_id,
    )
    logger.info(
        "Lineup stored for user %s, race %s (qualifying %s, race %s)",
        request.user_id,
        request.calendar_id,
        request.qualifying_rider_id,
        request.race_rider_id,
    )
    return lineup


def submit_bet(
    session: Session,
    kind: BetKind,
    championship_id: Any,
    user_id: Any,
    calendar_id: Any,
    rider_id: Any,
    points: Any,
    position: Any,
) -> Any:
    """Validate a bet of ``kind`` and upsert it.

    The row is keyed by championship, user, race and rider: a second
    submission for the same rider replaces stake and predicted position.

    Returns
    -------
    RaceBet or SprintBet
        The persisted row.

    Raises
    ------
    FantasyError
        ``InvalidInput``, ``SelfBetForbidden``, ``ConfigMissing``,
        ``PointsBudgetExceeded``, ``RaceBetLimitExceeded`` or
        ``RiderBetLimitExceeded``. Nothing is written in that case.
    """

    request = ConstraintValidator(session).check_bet(
        kind, championship_id, user_id, calendar_id, rider_id, points, position
    )
    bet = BetRepo(session, kind).upsert(
        request.championship_id,
        request.user_id,
        request.calendar_id,
        request.rider_id,
        position=request.position,
        points=request.points,
    )
    logger.info(
        "%s bet stored for user %s, race %s: rider %s to finish P%s for %s points",
        kind.name.capitalize(),
        request.user_id,
        request.calendar_id,
        request.rider_id,
        request.position,
        request.points,
    )
    return bet


def submit_race_bet(
    session: Session,
    championship_id: Any,
    user_id: Any,
    calendar_id: Any,
    rider_id: Any,
    points: Any,
    position: Any,
) -> Any:
    """Validate and upsert a race bet. See :func:`submit_bet`."""

    return submit_bet(
        session, RACE_BET, championship_id, user_id, calendar_id, rider_id, points, position
    )


def submit_sprint_bet(
    session: Session,
    championship_id: Any,
    user_id: Any,
    calendar_id: Any,
    rider_id: Any,
    points: Any,
    position: Any,
) -> Any:
    """Validate and upsert a sprint bet. See :func:`submit_bet`."""

    return submit_bet(
        session, SPRINT_BET, championship_id, user_id, calendar_id, rider_id, points, position
    )


def delete_bet(
    session: Session,
    kind: BetKind,
    championship_id: Any,
    user_id: Any,
    calendar_id: Any,
    rider_id: Any,
) -> bool:
    """Delete one bet of ``kind``. Returns ``False`` when there was none."""

    deleted = BetRepo(session, kind).delete(
        coerce_int("championship_id", championship_id),
        coerce_int("user_id", user_id),
        coerce_int("calendar_id", calendar_id),
        coerce_int("rider_id", rider_id),
    )
    if deleted:
        logger.info(
            "%s bet deleted for user %s, race %s, rider %s",
            kind.name.capitalize(),
            user_id,
            calendar_id,
            rider_id,
        )
    return deleted


def delete_race_bet(
    session: Session, championship_id: Any, user_id: Any, calendar_id: Any, rider_id: Any
) -> bool:
    """Delete one race bet. See :func:`delete_bet`."""

    return delete_bet(session, RACE_BET, championship_id, user_id, calendar_id, rider_id)


def delete_sprint_bet(
    session: Session, championship_id: Any, user_id: Any, calendar_id: Any, rider_id: Any
) -> bool:
    """Delete one sprint bet. See :func:`delete_bet`."""

    return delete_bet(session, SPRINT_BET, championship_id, user_id, calendar_id, rider_id)


def load_race_data(session: Session, championship_id: int, calendar_id: int) -> RaceData:
    """Read everything a scoring pass needs for one race.

    Raises
    ------
    NotFound
        If ``calendar_id`` is not a race of ``championship_id``.
    DataLoadFailure
        If any read fails. No partial data is returned.
    """

    try:
        race = CalendarRepo(session).get(calendar_id)
        if race is None or race.championship_id != championship_id:
            raise NotFound(
                f"Race {calendar_id} is not part of championship {championship_id}.",
                {"championship_id": championship_id, "calendar_id": calendar_id},
            )

        logger.debug(
            "Loading scoring data for championship %s, race %s",
            championship_id,
            calendar_id,
        )
        data = RaceData(
            championship_id=championship_id,
            calendar_id=calendar_id,
            teams=FantasyTeamRepo(session).find_for_championship(championship_id),
            lineups=LineupRepo(session).find_for_race(championship_id, calendar_id),
            race_bets=BetRepo(session, RACE_BET).find_for_race(
                championship_id, calendar_id
            ),
            sprint_bets=BetRepo(session, SPRINT_BET).find_for_race(
                championship_id, calendar_id
            ),
            results=ResultRepo(session).find_for_race(championship_id, calendar_id),
            standings=StandingRepo(session).find_for_championship(championship_id),
        )
    except SQLAlchemyError as exc:
        logger.error(
            "Failed to load scoring data for championship %s, race %s: %s",
            championship_id,
            calendar_id,
            exc,
        )
        raise DataLoadFailure(
            "Failed to load the data needed to compute scores.",
            {"championship_id": championship_id, "calendar_id": calendar_id},
        ) from exc

    logger.debug(
        "Loaded %d lineups, %d race bets, %d sprint bets, %d results, %d standings",
        len(data.lineups),
        len(data.race_bets),
        len(data.sprint_bets),
        len(data.results),
        len(data.standings),
    )
    return data


def compute_scores(
    session: Session,
    championship_id: Any,
    calendar_id: Any,
    *,
    engine: Optional[ScoringEngine] = None,
) -> list[ScoreDelta]:
    """Score one race and fold the result into the championship standings.

    Run inside a single transaction (``with Session.begin()``): the
    standings write relies on the ORM version counter, so a competing
    reconciliation of the same rows fails instead of double counting.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    championship_id : int
        Championship being scored.
    calendar_id : int
        Race whose results are applied.
    engine : Optional[ScoringEngine], default: None
        Engine override; the default settles race and sprint bets.

    Returns
    -------
    list[ScoreDelta]
        One delta per user with a lineup for the race, ordered by user id.
        The same list is returned when the race was already reconciled.

    Raises
    ------
    NotFound
        If the race does not belong to the championship.
    DataLoadFailure
        If loading fails; standings are left untouched.
    ConcurrentReconciliation
        If another transaction updated the standings first.
    """

    championship_id = coerce_int("championship_id", championship_id)
    calendar_id = coerce_int("calendar_id", calendar_id)

    data = load_race_data(session, championship_id, calendar_id)
    deltas = (engine or ScoringEngine()).compute(data)
    StandingsReconciler(session).reconcile(
        championship_id, calendar_id, deltas, standings=data.standings
    )
    return deltas


def get_standings(session: Session, championship_id: Any) -> list[Standing]:
    """Return the standings of a championship ordered by position."""

    return StandingRepo(session).find_for_championship(
        coerce_int("championship_id", championship_id)
    )


def get_lineup(
    session: Session, championship_id: Any, user_id: Any, calendar_id: Any
) -> Lineup:
    """Return the user's lineup for a race or raise :class:`NotFound`."""

    lineup = LineupRepo(session).find(
        coerce_int("championship_id", championship_id),
        coerce_int("user_id", user_id),
        coerce_int("calendar_id", calendar_id),
    )
    if lineup is None:
        raise NotFound("Lineup not found")
    return lineup


def get_fantasy_team(session: Session, championship_id: Any, user_id: Any) -> FantasyTeam:
    """Return the user's team in a championship or raise :class:`NotFound`."""

    championship_id = coerce_int("championship_id", championship_id)
    user_id = coerce_int("user_id", user_id)
    team = FantasyTeamRepo(session).find(championship_id, user_id)
    if team is None:
        raise NotFound(
            "Fantasy team not found",
            {"championship_id": championship_id, "user_id": user_id},
        )
    return team


def list_riders(session: Session) -> list[Rider]:
    """Return every rider, ordered by race number."""
    return RiderRepo(session).list_all()


def list_bets(
    session: Session,
    kind: BetKind,
    championship_id: Any,
    user_id: Any,
    calendar_id: Optional[Any] = None,
    *,
    all_calendar: bool = False,
) -> list[Any]:
    """Return the user's bets of ``kind`` for one race, or for every race."""

    race_filter = None
    if not all_calendar:
        if calendar_id is None:
            raise InvalidInput(
                "calendar_id is required unless all_calendar is set.",
                {"field": "calendar_id"},
            )
        race_filter = coerce_int("calendar_id", calendar_id)
    return BetRepo(session, kind).find_for_user(
        coerce_int("championship_id", championship_id),
        coerce_int("user_id", user_id),
        calendar_id=race_filter,
    )


def race_details(session: Session, championship_id: Any, calendar_id: Any) -> dict:
    """Every lineup and bet of a race, serialized for display."""

    championship_id = coerce_int("championship_id", championship_id)
    calendar_id = coerce_int("calendar_id", calendar_id)
    lineups = LineupRepo(session).find_for_race(championship_id, calendar_id)
    sprints = BetRepo(session, SPRINT_BET).find_for_race(championship_id, calendar_id)
    bets = BetRepo(session, RACE_BET).find_for_race(championship_id, calendar_id)
    return {
        "lineups": [row.to_dict() for row in lineups],
        "sprints": [row.to_dict() for row in sprints],
        "bets": [row.to_dict() for row in bets],
    }


def list_calendar(session: Session, championship_id: Any) -> list[CalendarEntry]:
    """Return the races of a championship in calendar order."""
    return CalendarRepo(session).list_for_championship(
        coerce_int("championship_id", championship_id)
    )


def next_race(
    session: Session, championship_id: Any, *, today: Optional[date] = None
) -> CalendarEntry:
    """Return the first race scheduled after ``today`` (defaults to now)."""

    reference = today or date.today()
    race = CalendarRepo(session).next_after(
        coerce_int("championship_id", championship_id), reference
    )
    if race is None:
        raise NotFound("No calendar found", {"after": reference.isoformat()})
    return race


def list_championships(session: Session) -> list[Championship]:
    """Return every championship, most recent season first."""
    return ChampionshipRepo(session).list_all()


def default_championship(session: Session, *, year: Optional[int] = None) -> Championship:
    """Return the championship of ``year`` (the current year by default)."""

    season = year or date.today().year
    championship = ChampionshipRepo(session).find_by_year(season)
    if championship is None:
        raise NotFound(
            "Championship for current year not found", {"year": season}
        )
    return championship


def get_configuration(session: Session, championship_id: Any) -> Configuration:
    """Return the configuration of a championship or raise :class:`ConfigMissing`."""
    championship_id = coerce_int("championship_id", championship_id)
    configuration = ConfigurationRepo(session).find(championship_id)
    if configuration is None:
        raise ConfigMissing(
            f"Championship {championship_id} has no configuration.",
            {"championship_id": championship_id},
        )
    return configuration


def save_configuration(
    session: Session, championship_id: Any, **limits: Any
) -> Configuration:
    """Create or update a championship configuration.

    Each limit must be a non-negative integer or ``None`` (not enforced).
    """

    normalized = {
        field: None if value is None else coerce_int(field, value, minimum=0)
        for field, value in limits.items()
    }
    championship_id = coerce_int("championship_id", championship_id)
    configuration = ConfigurationRepo(session).upsert(championship_id, **normalized)
    logger.info(
        "Configuration of championship %s saved: %s", championship_id, normalized
    )
    return configuration


def get_user_championship(session: Session, user_id: Any) -> int:
    """Return the championship id the user selected."""

    settings = UserSettingsRepo(session).find(coerce_int("user_id", user_id))
    if settings is None or settings.championship_id is None:
        raise NotFound("User settings not found")
    return settings.championship_id


def set_user_championship(
    session: Session, user_id: Any, championship_id: Any
) -> UserSettings:
    """Select the championship a user plays in. The championship must exist."""

    championship_id = coerce_int("championship_id", championship_id)
    if ChampionshipRepo(session).get(championship_id) is None:
        raise NotFound(
            "Championship not found", {"championship_id": championship_id}
        )
    return UserSettingsRepo(session).upsert(
        coerce_int("user_id", user_id), championship_id=championship_id
    )

"""Conversion of one race's results into per-user score deltas.

The engine is pure: it works on rows that were already loaded and never
touches the session. Missing data degrades to a zero contribution; only the
caller's loading step can fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..models import RACE_BET, SPRINT_BET, BetKind


def is_winning_prediction(predicted: int, actual: Optional[int]) -> bool:
    """Return ``True`` for an exact hit or a prediction one place better.

    ``actual`` is ``None`` when the rider was not classified, which never wins.
    """

    if actual is None:
        return False
    return predicted == actual or predicted == actual - 1


def bet_net(stake: int, predicted: int, actual: Optional[int]) -> int:
    """Score of a settled bet: the full stake on a win, minus half on a loss."""

    if is_winning_prediction(predicted, actual):
        return stake
    return -(stake // 2)


@dataclass(frozen=True)
class BetOutcome:
    """How one bet was settled.

    Attributes
    ----------
    kind : str
        Bet family name (``"race"`` or ``"sprint"``).
    rider_id : int
        Rider the bet was placed on.
    predicted : int
        Predicted finishing position.
    actual : Optional[int]
        Classified position, ``None`` when unclassified or no result row.
    stake : int
        Points staked.
    won : Optional[bool]
        ``None`` when no result row exists for the rider and the bet is void.
    net : int
        Contribution to the user's delta.
    """

    kind: str
    rider_id: int
    predicted: int
    actual: Optional[int]
    stake: int
    won: Optional[bool]
    net: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "rider_id": self.rider_id,
            "predicted": self.predicted,
            "actual": self.actual,
            "stake": self.stake,
            "won": self.won,
            "net": self.net,
        }


@dataclass(frozen=True)
class ScoreDelta:
    """Points one user earned at one race."""

    user_id: int
    qualifying_score: int = 0
    race_score: int = 0
    race_bet_net: int = 0
    sprint_bet_net: int = 0
    team_name: Optional[str] = None
    user_name: Optional[str] = None
    bets: tuple[BetOutcome, ...] = field(default_factory=tuple)

    @property
    def lineup_score(self) -> int:
        return self.qualifying_score + self.race_score

    @property
    def total(self) -> int:
        return self.lineup_score + self.race_bet_net + self.sprint_bet_net

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "first_name": self.user_name,
            "team_name": self.team_name,
            "qualifying_score": self.qualifying_score,
            "race_score": self.race_score,
            "lineup_score": self.lineup_score,
            "race_bet_net": self.race_bet_net,
            "sprint_bet_net": self.sprint_bet_net,
            "score": self.total,
            "bets": [bet.to_dict() for bet in self.bets],
        }


@dataclass
class RaceData:
    """Every row a scoring pass needs for one (championship, race) pair."""

    championship_id: int
    calendar_id: int
    lineups: Sequence[Any] = ()
    race_bets: Sequence[Any] = ()
    sprint_bets: Sequence[Any] = ()
    results: Sequence[Any] = ()
    teams: Sequence[Any] = ()
    standings: Sequence[Any] = ()


class ScoringEngine:
    """Computes score deltas from lineups, bets and results of one race."""

    def __init__(self, kinds: Optional[Sequence[BetKind]] = None) -> None:
        self._kinds = tuple(kinds) if kinds is not None else (RACE_BET, SPRINT_BET)

    def settle_bets(
        self,
        kind: BetKind,
        bets: Iterable[Any],
        results_by_rider: Mapping[int, Any],
    ) -> list[BetOutcome]:
        """Settle ``bets`` of one kind against the race classification."""

        outcomes: list[BetOutcome] = []
        for bet in bets:
            result = results_by_rider.get(bet.rider_id)
            if result is None:
                # No result row: the bet is void, not lost.
                outcomes.append(
                    BetOutcome(
                        kind=kind.name,
                        rider_id=bet.rider_id,
                        predicted=bet.position,
                        actual=None,
                        stake=bet.points,
                        won=None,
                        net=0,
                    )
                )
                continue
            actual = kind.actual_position(result)
            outcomes.append(
                BetOutcome(
                    kind=kind.name,
                    rider_id=bet.rider_id,
                    predicted=bet.position,
                    actual=actual,
                    stake=bet.points,
                    won=is_winning_prediction(bet.position, actual),
                    net=bet_net(bet.points, bet.position, actual),
                )
            )
        return outcomes

    def compute(self, data: RaceData) -> list[ScoreDelta]:
        """Return one :class:`ScoreDelta` per user with a lineup, by user id."""

        results_by_rider = {result.rider_id: result for result in data.results}
        teams_by_user = {team.user_id: team for team in data.teams}
        bets_by_kind = {
            RACE_BET.name: data.race_bets,
            SPRINT_BET.name: data.sprint_bets,
        }

        deltas: list[ScoreDelta] = []
        for lineup in sorted(data.lineups, key=lambda row: row.user_id):
            qualifying = results_by_rider.get(lineup.qualifying_rider_id)
            race = results_by_rider.get(lineup.race_rider_id)

            nets: dict[str, int] = {}
            outcomes: list[BetOutcome] = []
            for kind in self._kinds:
                user_bets = [
                    bet
                    for bet in bets_by_kind.get(kind.name, ())
                    if bet.user_id == lineup.user_id
                ]
                settled = self.settle_bets(kind, user_bets, results_by_rider)
                nets[kind.name] = sum(outcome.net for outcome in settled)
                outcomes.extend(settled)

            team = teams_by_user.get(lineup.user_id)
            user = getattr(team, "user", None) if team is not None else None
            deltas.append(
                ScoreDelta(
                    user_id=lineup.user_id,
                    qualifying_score=(qualifying.qualifying_points or 0)
                    if qualifying is not None
                    else 0,
                    race_score=(race.race_points or 0) if race is not None else 0,
                    race_bet_net=nets.get(RACE_BET.name, 0),
                    sprint_bet_net=nets.get(SPRINT_BET.name, 0),
                    team_name=team.name if team is not None else None,
                    user_name=user.display_name if user is not None else None,
                    bets=tuple(outcomes),
                )
            )
        return deltas


__all__ = [
    "BetOutcome",
    "RaceData",
    "ScoreDelta",
    "ScoringEngine",
    "bet_net",
    "is_winning_prediction",
]

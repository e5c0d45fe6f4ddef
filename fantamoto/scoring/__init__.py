"""Scoring subsystem: race deltas and standings reconciliation."""

from .engine import (
    BetOutcome,
    RaceData,
    ScoreDelta,
    ScoringEngine,
    bet_net,
    is_winning_prediction,
)
from .standings import Reconciliation, StandingsReconciler, rank_standings

__all__ = [
    "BetOutcome",
    "RaceData",
    "Reconciliation",
    "ScoreDelta",
    "ScoringEngine",
    "StandingsReconciler",
    "bet_net",
    "is_winning_prediction",
    "rank_standings",
]

"""Validation rules applied before lineups and bets are stored."""

from .validator import BetRequest, ConstraintValidator, LineupRequest, coerce_int

__all__ = [
    "BetRequest",
    "ConstraintValidator",
    "LineupRequest",
    "coerce_int",
]

"""Failure types raised by validation, scoring and reconciliation.

Every error carries a stable ``code`` (the class name), a human readable
message and a ``details`` mapping that explains which rule was violated, so a
routing layer can render any failure with :meth:`FantasyError.to_dict`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class FantasyError(ValueError):
    """Base class of every failure raised by the engine."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidInput(FantasyError):
    """A numeric field is malformed or out of range."""


class InvalidLineup(FantasyError):
    """Qualifying and race slots name the same rider."""


class ConfigMissing(FantasyError):
    """The championship has no configuration row."""

    status_code = 409


class FormationLimitExceeded(FantasyError):
    """A rider would appear in too many of the user's lineups."""


class PointsBudgetExceeded(FantasyError):
    """The stakes placed on one race would exceed the points budget."""


class RaceBetLimitExceeded(FantasyError):
    """Too many bets of one kind on a single race."""


class RiderBetLimitExceeded(FantasyError):
    """Too many bets of one kind on a single rider across the championship."""


class SelfBetForbidden(FantasyError):
    """A race bet on the rider chosen for the user's own race slot."""


class NotFound(FantasyError):
    """A row required by a read accessor does not exist."""

    status_code = 404


class ConcurrentReconciliation(FantasyError):
    """Another caller reconciled the same standings first."""

    status_code = 409


class DataLoadFailure(FantasyError):
    """A store read failed in the middle of a scoring pass."""

    status_code = 500


__all__ = [
    "FantasyError",
    "InvalidInput",
    "InvalidLineup",
    "ConfigMissing",
    "FormationLimitExceeded",
    "PointsBudgetExceeded",
    "RaceBetLimitExceeded",
    "RiderBetLimitExceeded",
    "SelfBetForbidden",
    "NotFound",
    "ConcurrentReconciliation",
    "DataLoadFailure",
]

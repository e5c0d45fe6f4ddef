from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .championship import CalendarEntry, Championship, Configuration  # noqa: F401
from .rider import Rider  # noqa: F401
from .user import FantasyTeam, User, UserSettings  # noqa: F401
from .lineup import Lineup  # noqa: F401
from .bet import RACE_BET, SPRINT_BET, BetKind, RaceBet, SprintBet  # noqa: F401
from .result import RaceResult  # noqa: F401
from .standing import Standing  # noqa: F401

__all__ = [
    "Base",
    "Championship",
    "CalendarEntry",
    "Configuration",
    "Rider",
    "User",
    "UserSettings",
    "FantasyTeam",
    "Lineup",
    "RaceBet",
    "SprintBet",
    "BetKind",
    "RACE_BET",
    "SPRINT_BET",
    "RaceResult",
    "Standing",
]

"""Repositories: explicit, typed access to each table.

Every repository takes the :class:`~sqlalchemy.orm.Session` it works with as a
constructor argument; none of them commits.
"""

from .base import BaseRepository
from .bet import BetRepo
from .calendar import CalendarRepo, ChampionshipRepo
from .configuration import ConfigurationRepo
from .lineup import LineupRepo
from .result import ResultRepo
from .rider import RiderRepo
from .standing import StandingRepo
from .team import FantasyTeamRepo, UserSettingsRepo

__all__ = [
    "BaseRepository",
    "BetRepo",
    "CalendarRepo",
    "ChampionshipRepo",
    "ConfigurationRepo",
    "FantasyTeamRepo",
    "LineupRepo",
    "ResultRepo",
    "RiderRepo",
    "StandingRepo",
    "UserSettingsRepo",
]

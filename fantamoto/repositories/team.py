from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from ..models import FantasyTeam, UserSettings
from .base import BaseRepository


class FantasyTeamRepo(BaseRepository):
    def find(self, championship_id: int, user_id: int) -> Optional[FantasyTeam]:
        return self.session.scalar(
            select(FantasyTeam).where(
                FantasyTeam.championship_id == championship_id,
                FantasyTeam.user_id == user_id,
            )
        )

    def find_for_championship(self, championship_id: int) -> list[FantasyTeam]:
        stmt = (
            select(FantasyTeam)
            .where(FantasyTeam.championship_id == championship_id)
            .order_by(FantasyTeam.user_id)
        )
        return list(self.session.scalars(stmt).all())


class UserSettingsRepo(BaseRepository):
    def find(self, user_id: int) -> Optional[UserSettings]:
        return self.session.scalar(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )

    def upsert(self, user_id: int, *, championship_id: Optional[int]) -> UserSettings:
        settings = self.find(user_id)
        if settings is None:
            settings = UserSettings(user_id=user_id, championship_id=championship_id)
            self.session.add(settings)
        else:
            settings.championship_id = championship_id
        self.session.flush()
        return settings

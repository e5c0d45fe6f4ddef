from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select

from ..errors import InvalidInput
from ..models import Configuration
from .base import BaseRepository


class ConfigurationRepo(BaseRepository):
    def find(self, championship_id: int) -> Optional[Configuration]:
        """Return the configuration of ``championship_id`` if one exists."""

        return self.session.scalar(
            select(Configuration).where(
                Configuration.championship_id == championship_id
            )
        )

    def upsert(self, championship_id: int, **limits: Any) -> Configuration:
        """Create or update the configuration of ``championship_id``.

        Only the keyword arguments supplied are written; unknown names raise
        :class:`~fantamoto.errors.InvalidInput`.
        """

        unknown = sorted(set(limits) - set(Configuration.LIMIT_FIELDS))
        if unknown:
            raise InvalidInput(
                f"Unknown configuration field: {unknown[0]}.",
                {"field": unknown[0], "fields": unknown},
            )

        configuration = self.find(championship_id)
        if configuration is None:
            configuration = Configuration(championship_id=championship_id)
            self.session.add(configuration)
        for field, value in limits.items():
            setattr(configuration, field, value)
        self.session.flush()
        return configuration

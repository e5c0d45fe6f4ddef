"""Shared fixtures for the database-backed test cases."""

from __future__ import annotations

import unittest
from datetime import date
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fantamoto.models import (
    Base,
    CalendarEntry,
    Championship,
    Configuration,
    FantasyTeam,
    RaceResult,
    Rider,
    Standing,
    User,
)


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()

    def seed_championship(
        self,
        session,
        *,
        races: int = 3,
        riders: int = 4,
        users: int = 2,
        configuration: Optional[dict] = None,
        with_configuration: bool = True,
    ) -> Championship:
        """Create a championship with races, riders, users and configuration.

        The created rows are stored on ``self``: ``self.championship``,
        ``self.races``, ``self.riders`` and ``self.users``. Limits default to
        permissive values; ``configuration`` overrides some of them.
        """

        championship = Championship(name="MotoGP Fantasy", year=2025)
        session.add(championship)
        session.flush()

        self.races = [
            CalendarEntry(
                championship_id=championship.id,
                race_order=index + 1,
                event_date=date(2025, 3, 2 + 7 * index),
                name=f"Round {index + 1}",
            )
            for index in range(races)
        ]
        self.riders = [
            Rider(first_name=f"Rider{index}", last_name="Test", number=index + 10)
            for index in range(riders)
        ]
        self.users = [
            User(
                email=f"user{index}@example.com",
                first_name=f"User{index}",
                last_name="Tester",
            )
            for index in range(users)
        ]
        session.add_all([*self.races, *self.riders, *self.users])
        session.flush()

        limits = {
            "bets_limit_points": 100,
            "bets_limit_race": 10,
            "bets_limit_driver": 10,
            "bets_limit_sprint_points": 100,
            "bets_limit_sprint_race": 10,
            "bets_limit_sprint_driver": 10,
            "formation_limit_driver": 10,
        }
        limits.update(configuration or {})
        if with_configuration:
            session.add(Configuration(championship_id=championship.id, **limits))
            session.flush()

        self.championship = championship
        return championship

    def add_result(
        self,
        session,
        race: CalendarEntry,
        rider: Rider,
        **fields,
    ) -> RaceResult:
        result = RaceResult(
            championship_id=race.championship_id,
            calendar_id=race.id,
            rider_id=rider.id,
            qualifying_points=fields.pop("qualifying_points", 0),
            sprint_points=fields.pop("sprint_points", 0),
            race_points=fields.pop("race_points", 0),
            **fields,
        )
        session.add(result)
        session.flush()
        return result

    def add_standings(self, session, scores: dict[int, int]) -> list[Standing]:
        rows = [
            Standing(
                championship_id=self.championship.id, user_id=user_id, score=score
            )
            for user_id, score in scores.items()
        ]
        session.add_all(rows)
        session.flush()
        return rows

    def add_team(self, session, user: User, name: str) -> FantasyTeam:
        team = FantasyTeam(
            championship_id=self.championship.id, user_id=user.id, name=name
        )
        session.add(team)
        session.flush()
        return team

from datetime import date, timedelta

from fantamoto.db.engine import get_sessionmaker, make_engine
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
from fantamoto.workflows import (
    compute_scores,
    submit_lineup,
    submit_race_bet,
    submit_sprint_bet,
)

# MotoGP points for the top fifteen, used for the demo results.
POINTS_TABLE = [25, 20, 16, 13, 11, 10, 9, 8, 7, 6, 5, 4, 3, 2, 1]
SPRINT_POINTS_TABLE = [12, 9, 7, 6, 5, 4, 3, 2, 1]


def _points(table: list[int], position: int) -> int:
    return table[position - 1] if position <= len(table) else 0


def main() -> None:
    """Seed the development database with a demo championship and score round 1."""
    engine = make_engine()

    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    today = date.today()

    with Session.begin() as session:
        championship = Championship(name="MotoGP Fantasy", year=today.year)
        session.add(championship)
        session.flush()

        session.add(
            Configuration(
                championship_id=championship.id,
                session_timeout=60,
                bets_limit_points=10,
                bets_limit_race=2,
                bets_limit_driver=5,
                bets_limit_sprint_points=6,
                bets_limit_sprint_race=1,
                bets_limit_sprint_driver=5,
                formation_limit_driver=4,
            )
        )

        races = [
            CalendarEntry(
                championship_id=championship.id,
                race_order=1,
                event_date=today - timedelta(days=7),
                name="Grand Prix of Qatar",
                location="Lusail",
                code="QAT",
            ),
            CalendarEntry(
                championship_id=championship.id,
                race_order=2,
                event_date=today + timedelta(days=7),
                name="Grand Prix of Portugal",
                location="Portimao",
                code="POR",
            ),
        ]
        riders = [
            Rider(first_name="Francesco", last_name="Bagnaia", number=1),
            Rider(first_name="Marc", last_name="Marquez", number=93),
            Rider(first_name="Jorge", last_name="Martin", number=89),
            Rider(first_name="Enea", last_name="Bastianini", number=23),
        ]
        alice = User(email="alice@example.com", first_name="Alice", last_name="Rossi")
        bob = User(email="bob@example.com", first_name="Bob", last_name="Bianchi")
        session.add_all([*races, *riders, alice, bob])
        session.flush()

        session.add_all(
            [
                FantasyTeam(
                    championship_id=championship.id,
                    user_id=alice.id,
                    name="Team Alice",
                    official_rider_1_id=riders[0].id,
                    official_rider_2_id=riders[1].id,
                    reserve_rider_id=riders[2].id,
                ),
                FantasyTeam(
                    championship_id=championship.id,
                    user_id=bob.id,
                    name="Team Bob",
                    official_rider_1_id=riders[2].id,
                    official_rider_2_id=riders[3].id,
                    reserve_rider_id=riders[0].id,
                ),
                Standing(championship_id=championship.id, user_id=alice.id),
                Standing(championship_id=championship.id, user_id=bob.id),
            ]
        )

        for position, rider in enumerate(riders, start=1):
            session.add(
                RaceResult(
                    championship_id=championship.id,
                    calendar_id=races[0].id,
                    rider_id=rider.id,
                    qualifying_position=position,
                    qualifying_points=_points(POINTS_TABLE, position),
                    sprint_position=position,
                    sprint_points=_points(SPRINT_POINTS_TABLE, position),
                    race_position=position,
                    race_points=_points(POINTS_TABLE, position),
                )
            )
        session.flush()

        round_one = races[0].id
        submit_lineup(session, championship.id, alice.id, round_one, riders[0].id, riders[1].id)
        submit_lineup(session, championship.id, bob.id, round_one, riders[2].id, riders[3].id)
        submit_race_bet(session, championship.id, alice.id, round_one, riders[2].id, 6, 3)
        submit_sprint_bet(session, championship.id, bob.id, round_one, riders[0].id, 4, 2)

        deltas = compute_scores(session, championship.id, round_one)

    for delta in deltas:
        print(f"{delta.team_name}: {delta.total:+d}")
    print("Seeded development database")


if __name__ == "__main__":
    main()

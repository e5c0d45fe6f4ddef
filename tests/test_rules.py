import unittest

from sqlalchemy import func, select

from fantamoto.errors import (
    ConfigMissing,
    FormationLimitExceeded,
    InvalidInput,
    InvalidLineup,
    PointsBudgetExceeded,
    RaceBetLimitExceeded,
    RiderBetLimitExceeded,
    SelfBetForbidden,
)
from fantamoto.models import RACE_BET, SPRINT_BET, Lineup, RaceBet, SprintBet
from fantamoto.rules import ConstraintValidator, coerce_int
from fantamoto.workflows import submit_lineup, submit_race_bet, submit_sprint_bet

from support import DBTestCase


class CoerceIntTests(unittest.TestCase):
    def test_accepts_ints_numeric_strings_and_integral_floats(self):
        self.assertEqual(coerce_int("points", 6), 6)
        self.assertEqual(coerce_int("points", " 12 "), 12)
        self.assertEqual(coerce_int("points", "-3"), -3)
        self.assertEqual(coerce_int("points", 4.0), 4)

    def test_rejects_malformed_values(self):
        for value in ("abc", "6.5", "", None, 2.5, True, [1]):
            with self.subTest(value=value):
                with self.assertRaises(InvalidInput) as ctx:
                    coerce_int("points", value)
                self.assertEqual(ctx.exception.details["field"], "points")

    def test_minimum(self):
        self.assertEqual(coerce_int("points", 1, minimum=1), 1)
        with self.assertRaises(InvalidInput) as ctx:
            coerce_int("points", 0, minimum=1)
        self.assertEqual(ctx.exception.details["minimum"], 1)


class LineupRulesTests(DBTestCase):
    def test_same_rider_in_both_slots_is_rejected(self):
        with self.Session() as session:
            validator = ConstraintValidator(session)
            with self.assertRaises(InvalidLineup) as ctx:
                validator.check_lineup(1, 1, 1, 93, 93)
            self.assertEqual(ctx.exception.code, "InvalidLineup")

    def test_missing_configuration(self):
        with self.Session.begin() as session:
            self.seed_championship(session, with_configuration=False)
            a, b = self.riders[:2]
            with self.assertRaises(ConfigMissing):
                submit_lineup(
                    session, self.championship.id, self.users[0].id,
                    self.races[0].id, a.id, b.id,
                )
            self.assertEqual(session.scalar(select(func.count(Lineup.id))), 0)

    def test_non_integer_ids_are_rejected(self):
        with self.Session() as session:
            with self.assertRaises(InvalidInput):
                ConstraintValidator(session).check_lineup(1, 1, "first", 2, 3)

    def test_formation_limit_reached_exactly_then_exceeded(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"formation_limit_driver": 2})
            user = self.users[0].id
            champ = self.championship.id
            a, b, c, _ = (rider.id for rider in self.riders)
            r1, r2, r3 = (race.id for race in self.races)

            submit_lineup(session, champ, user, r1, a, b)
            submit_lineup(session, champ, user, r2, c, a)

            # b and c reach exactly two appearances
            lineup = submit_lineup(session, champ, user, r3, b, c)
            self.assertEqual(lineup.rider_ids, (b, c))

            with self.assertRaises(FormationLimitExceeded) as ctx:
                submit_lineup(session, champ, user, r3, a, b)
            self.assertEqual(ctx.exception.details["riders"], {a: 3})
            self.assertEqual(ctx.exception.details["limit"], 2)

            stored = session.scalar(
                select(Lineup).where(Lineup.user_id == user, Lineup.calendar_id == r3)
            )
            self.assertEqual(stored.rider_ids, (b, c))

    def test_resubmission_replaces_instead_of_adding(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"formation_limit_driver": 2})
            user = self.users[0].id
            champ = self.championship.id
            a, b, c, d = (rider.id for rider in self.riders)
            r1, r2, _ = (race.id for race in self.races)

            submit_lineup(session, champ, user, r1, a, b)
            first = submit_lineup(session, champ, user, r2, a, c)
            second = submit_lineup(session, champ, user, r2, a, d)

            self.assertEqual(first.id, second.id)
            self.assertEqual(second.race_rider_id, d)
            count = session.scalar(
                select(func.count(Lineup.id)).where(Lineup.user_id == user)
            )
            self.assertEqual(count, 2)

    def test_other_users_lineups_do_not_count(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"formation_limit_driver": 1})
            champ = self.championship.id
            a, b = self.riders[0].id, self.riders[1].id
            race = self.races[0].id
            submit_lineup(session, champ, self.users[0].id, race, a, b)
            submit_lineup(session, champ, self.users[1].id, race, a, b)

    def test_unset_formation_limit_is_not_enforced(self):
        with self.Session.begin() as session:
            self.seed_championship(
                session, configuration={"formation_limit_driver": None}
            )
            champ = self.championship.id
            user = self.users[0].id
            a, b = self.riders[0].id, self.riders[1].id
            for race in self.races:
                submit_lineup(session, champ, user, race.id, a, b)


class BetRulesTests(DBTestCase):
    def test_second_bet_over_points_budget_is_rejected(self):
        with self.Session.begin() as session:
            self.seed_championship(
                session, configuration={"bets_limit_points": 10, "bets_limit_race": 2}
            )
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            a, b = self.riders[0].id, self.riders[1].id

            submit_race_bet(session, champ, user, race, a, points=6, position=1)
            with self.assertRaises(PointsBudgetExceeded) as ctx:
                submit_race_bet(session, champ, user, race, b, points=5, position=2)

            self.assertEqual(ctx.exception.details["used"], 6)
            self.assertEqual(ctx.exception.details["remaining"], 4)
            self.assertIn("4 points left", ctx.exception.message)
            self.assertEqual(session.scalar(select(func.count(RaceBet.id))), 1)

    def test_stake_reaching_budget_exactly_is_accepted(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"bets_limit_points": 10})
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            a, b, c = (rider.id for rider in self.riders[:3])

            submit_race_bet(session, champ, user, race, a, points=6, position=1)
            submit_race_bet(session, champ, user, race, b, points=4, position=2)
            with self.assertRaises(PointsBudgetExceeded):
                submit_race_bet(session, champ, user, race, c, points=1, position=3)

    def test_budget_is_per_race(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"bets_limit_points": 10})
            champ, user = self.championship.id, self.users[0].id
            rider = self.riders[0].id
            submit_race_bet(session, champ, user, self.races[0].id, rider, 10, 1)
            submit_race_bet(session, champ, user, self.races[1].id, rider, 10, 1)

    def test_replacing_a_bet_frees_its_stake(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"bets_limit_points": 10})
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            rider = self.riders[0].id

            first = submit_race_bet(session, champ, user, race, rider, points=6, position=1)
            second = submit_race_bet(session, champ, user, race, rider, points=10, position=4)

            self.assertEqual(first.id, second.id)
            self.assertEqual((second.points, second.position), (10, 4))
            self.assertEqual(session.scalar(select(func.count(RaceBet.id))), 1)

    def test_bets_per_race_limit(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"bets_limit_race": 2})
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            a, b, c = (rider.id for rider in self.riders[:3])

            submit_race_bet(session, champ, user, race, a, 1, 1)
            submit_race_bet(session, champ, user, race, b, 1, 2)
            # Updating an existing bet is not an extra bet.
            submit_race_bet(session, champ, user, race, b, 2, 2)
            with self.assertRaises(RaceBetLimitExceeded) as ctx:
                submit_race_bet(session, champ, user, race, c, 1, 3)
            self.assertEqual(ctx.exception.details, {"limit": 2, "count": 2})

    def test_bets_per_rider_limit_spans_the_championship(self):
        with self.Session.begin() as session:
            self.seed_championship(session, configuration={"bets_limit_driver": 2})
            champ, user = self.championship.id, self.users[0].id
            rider = self.riders[0].id
            r1, r2, r3 = (race.id for race in self.races)

            submit_race_bet(session, champ, user, r1, rider, 1, 1)
            submit_race_bet(session, champ, user, r2, rider, 1, 1)
            submit_race_bet(session, champ, user, r2, rider, 3, 2)
            with self.assertRaises(RiderBetLimitExceeded) as ctx:
                submit_race_bet(session, champ, user, r3, rider, 1, 1)
            self.assertEqual(ctx.exception.details["rider_id"], rider)

    def test_race_bet_on_own_race_rider_is_forbidden(self):
        with self.Session.begin() as session:
            self.seed_championship(session)
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            qualifying, racer = self.riders[0].id, self.riders[1].id
            submit_lineup(session, champ, user, race, qualifying, racer)

            with self.assertRaises(SelfBetForbidden):
                submit_race_bet(session, champ, user, race, racer, 5, 1)

            # The qualifying rider and sprint bets are not restricted.
            submit_race_bet(session, champ, user, race, qualifying, 5, 1)
            submit_sprint_bet(session, champ, user, race, racer, 5, 1)

    def test_self_bet_checked_before_configuration(self):
        with self.Session.begin() as session:
            self.seed_championship(session, with_configuration=False)
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            session.add(
                Lineup(
                    championship_id=champ,
                    user_id=user,
                    calendar_id=race,
                    qualifying_rider_id=self.riders[0].id,
                    race_rider_id=self.riders[1].id,
                )
            )
            session.flush()
            with self.assertRaises(SelfBetForbidden):
                submit_race_bet(session, champ, user, race, self.riders[1].id, 5, 1)
            with self.assertRaises(ConfigMissing):
                submit_race_bet(session, champ, user, race, self.riders[2].id, 5, 1)

    def test_invalid_stake_and_fields(self):
        with self.Session.begin() as session:
            self.seed_championship(session)
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            rider = self.riders[0].id
            cases = [
                {"rider_id": rider, "points": 0, "position": 1},
                {"rider_id": rider, "points": -4, "position": 1},
                {"rider_id": rider, "points": "ten", "position": 1},
                {"rider_id": rider, "points": 2.5, "position": 1},
                {"rider_id": "abc", "points": 3, "position": 1},
                {"rider_id": rider, "points": 3, "position": 0},
            ]
            for case in cases:
                with self.subTest(**case):
                    with self.assertRaises(InvalidInput):
                        submit_race_bet(session, champ, user, race, **case)
            self.assertEqual(session.scalar(select(func.count(RaceBet.id))), 0)

    def test_numeric_strings_are_normalized(self):
        with self.Session.begin() as session:
            self.seed_championship(session)
            bet = submit_sprint_bet(
                session,
                str(self.championship.id),
                self.users[0].id,
                str(self.races[0].id),
                str(self.riders[0].id),
                points="7",
                position="3",
            )
            self.assertIsInstance(bet, SprintBet)
            self.assertEqual((bet.points, bet.position), (7, 3))
            self.assertEqual(bet.calendar_id, self.races[0].id)

    def test_sprint_bets_use_their_own_limits(self):
        with self.Session.begin() as session:
            self.seed_championship(
                session,
                configuration={"bets_limit_points": 100, "bets_limit_sprint_points": 5},
            )
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            rider = self.riders[0].id

            submit_race_bet(session, champ, user, race, rider, 6, 1)
            with self.assertRaises(PointsBudgetExceeded):
                submit_sprint_bet(session, champ, user, race, rider, 6, 1)
            submit_sprint_bet(session, champ, user, race, rider, 5, 1)

    def test_race_and_sprint_bets_are_counted_separately(self):
        with self.Session.begin() as session:
            self.seed_championship(
                session,
                configuration={"bets_limit_race": 1, "bets_limit_sprint_race": 1},
            )
            champ, user, race = self.championship.id, self.users[0].id, self.races[0].id
            submit_race_bet(session, champ, user, race, self.riders[0].id, 1, 1)
            submit_sprint_bet(session, champ, user, race, self.riders[1].id, 1, 1)
            with self.assertRaises(RaceBetLimitExceeded):
                submit_sprint_bet(session, champ, user, race, self.riders[2].id, 1, 1)

    def test_check_bet_returns_normalized_request(self):
        with self.Session.begin() as session:
            self.seed_championship(session)
            validator = ConstraintValidator(session)
            request = validator.check_bet(
                RACE_BET,
                self.championship.id,
                self.users[0].id,
                self.races[0].id,
                "2",
                "8",
                "1",
            )
            self.assertIs(request.kind, RACE_BET)
            self.assertEqual((request.rider_id, request.points, request.position), (2, 8, 1))
            self.assertIsNot(request.kind, SPRINT_BET)


if __name__ == "__main__":
    unittest.main()

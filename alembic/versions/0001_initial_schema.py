"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-03-02 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _id() -> sa.Column:
    return sa.Column("id", ID_TYPE, autoincrement=True, nullable=False)


def _fk(column: str, table: str, ondelete=None, nullable: bool = False) -> sa.Column:
    return sa.Column(
        column,
        ID_TYPE,
        sa.ForeignKey(f"{table}.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "championships",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_championships"),
        sa.UniqueConstraint("year", name="uq_championships_year"),
    )
    op.create_table(
        "riders",
        _id(),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("number", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_riders"),
    )
    op.create_index("ix_riders_number", "riders", ["number"])
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "calendar",
        _id(),
        _fk("championship_id", "championships", ondelete="CASCADE"),
        sa.Column("race_order", sa.Integer(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("location", sa.String(length=100), nullable=True),
        sa.Column("code", sa.String(length=8), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_calendar"),
        sa.UniqueConstraint(
            "championship_id", "race_order", name="uq_calendar_championship_order"
        ),
    )
    op.create_index("ix_calendar_championship_id", "calendar", ["championship_id"])
    op.create_table(
        "configuration",
        _id(),
        _fk("championship_id", "championships", ondelete="CASCADE"),
        sa.Column("session_timeout", sa.Integer(), nullable=True),
        sa.Column("bets_limit_points", sa.Integer(), nullable=True),
        sa.Column("bets_limit_race", sa.Integer(), nullable=True),
        sa.Column("bets_limit_driver", sa.Integer(), nullable=True),
        sa.Column("bets_limit_sprint_points", sa.Integer(), nullable=True),
        sa.Column("bets_limit_sprint_race", sa.Integer(), nullable=True),
        sa.Column("bets_limit_sprint_driver", sa.Integer(), nullable=True),
        sa.Column("formation_limit_driver", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_configuration"),
        sa.UniqueConstraint(
            "championship_id", name="uq_configuration_championship_id"
        ),
    )
    op.create_table(
        "user_settings",
        _id(),
        _fk("user_id", "users", ondelete="CASCADE"),
        _fk("championship_id", "championships", ondelete="SET NULL", nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_user_settings"),
        sa.UniqueConstraint("user_id", name="uq_user_settings_user_id"),
    )
    op.create_table(
        "fantasy_teams",
        _id(),
        _fk("championship_id", "championships", ondelete="CASCADE"),
        _fk("user_id", "users", ondelete="CASCADE"),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("team_image", sa.String(length=255), nullable=True),
        _fk("official_rider_1_id", "riders", nullable=True),
        _fk("official_rider_2_id", "riders", nullable=True),
        _fk("reserve_rider_id", "riders", nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_fantasy_teams"),
        sa.UniqueConstraint(
            "championship_id", "user_id", name="uq_fantasy_team_championship_user"
        ),
    )
    op.create_index(
        "ix_fantasy_teams_championship_id", "fantasy_teams", ["championship_id"]
    )
    op.create_index("ix_fantasy_teams_user_id", "fantasy_teams", ["user_id"])
    op.create_table(
        "lineups",
        _id(),
        _fk("championship_id", "championships", ondelete="CASCADE"),
        _fk("user_id", "users", ondelete="CASCADE"),
        _fk("calendar_id", "calendar", ondelete="CASCADE"),
        _fk("qualifying_rider_id", "riders"),
        _fk("race_rider_id", "riders"),
        sa.Column("inserted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_lineups"),
        sa.UniqueConstraint(
            "championship_id",
            "user_id",
            "calendar_id",
            name="uq_lineup_championship_user_calendar",
        ),
    )
    for column in ("championship_id", "user_id", "calendar_id"):
        op.create_index(f"ix_lineups_{column}", "lineups", [column])

    for table, prefix in (("race_bets", "race_bet"), ("sprint_bets", "sprint_bet")):
        op.create_table(
            table,
            _id(),
            _fk("championship_id", "championships", ondelete="CASCADE"),
            _fk("user_id", "users", ondelete="CASCADE"),
            _fk("calendar_id", "calendar", ondelete="CASCADE"),
            _fk("rider_id", "riders"),
            sa.Column("position", sa.Integer(), nullable=False),
            sa.Column("points", sa.Integer(), nullable=False),
            sa.Column("inserted_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
            sa.UniqueConstraint(
                "championship_id",
                "user_id",
                "calendar_id",
                "rider_id",
                name=f"uq_{prefix}_championship_user_calendar_rider",
            ),
            sa.CheckConstraint(
                "points >= 1", name=f"ck_{table}_{prefix}_points_positive"
            ),
        )
        for column in ("championship_id", "user_id", "calendar_id"):
            op.create_index(f"ix_{table}_{column}", table, [column])

    op.create_table(
        "race_results",
        _id(),
        _fk("championship_id", "championships", ondelete="CASCADE"),
        _fk("calendar_id", "calendar", ondelete="CASCADE"),
        _fk("rider_id", "riders"),
        sa.Column("qualifying_position", sa.Integer(), nullable=True),
        sa.Column("qualifying_points", sa.Integer(), nullable=False),
        sa.Column("sprint_position", sa.Integer(), nullable=True),
        sa.Column("sprint_points", sa.Integer(), nullable=False),
        sa.Column("race_position", sa.Integer(), nullable=True),
        sa.Column("race_points", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_race_results"),
        sa.UniqueConstraint(
            "championship_id",
            "calendar_id",
            "rider_id",
            name="uq_race_result_championship_calendar_rider",
        ),
    )
    op.create_index(
        "ix_race_results_championship_id", "race_results", ["championship_id"]
    )
    op.create_index("ix_race_results_calendar_id", "race_results", ["calendar_id"])

    op.create_table(
        "standings",
        _id(),
        _fk("championship_id", "championships", ondelete="CASCADE"),
        _fk("user_id", "users", ondelete="CASCADE"),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        _fk("update_calendar_id", "calendar", ondelete="SET NULL", nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_standings"),
        sa.UniqueConstraint(
            "championship_id", "user_id", name="uq_standing_championship_user"
        ),
    )
    op.create_index("ix_standings_championship_id", "standings", ["championship_id"])
    op.create_index("ix_standings_user_id", "standings", ["user_id"])


def downgrade() -> None:
    for table in (
        "standings",
        "race_results",
        "sprint_bets",
        "race_bets",
        "lineups",
        "fantasy_teams",
        "user_settings",
        "configuration",
        "calendar",
        "users",
        "riders",
        "championships",
    ):
        op.drop_table(table)

from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from fantamoto.db.engine import make_engine

CORE_TABLES = (
    "championships",
    "calendar",
    "configuration",
    "lineups",
    "race_bets",
    "sprint_bets",
    "race_results",
    "standings",
)


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    project_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def report_tables() -> int:
    """Print the tables of the configured database; return 1 if any core table is missing."""
    engine = make_engine()
    tables = set(inspect(engine).get_table_names())
    print("Current tables:", ", ".join(sorted(tables)))
    missing = [name for name in CORE_TABLES if name not in tables]
    if missing:
        print("Missing scoring tables:", ", ".join(missing))
        return 1
    return 0


def main(argv: list[str]) -> int:
    """Apply migrations (``head`` unless a revision is given) and report the schema."""
    upgrade_db(argv[0] if argv else "head")
    return report_tables()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

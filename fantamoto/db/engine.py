"""Engine and session factory configured from the environment.

``DB_URL`` selects the database (``sqlite:///./dev.db`` by default, resolved
against the repository root) and ``DB_ECHO=1`` logs every statement.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .metadata import metadata_obj  # noqa: F401
from .utils import env_flag, resolve_sqlite_url

logger = logging.getLogger(__name__)

load_dotenv()
# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for ``database_url`` or the configured default.

    SQLite connections get ``PRAGMA foreign_keys=ON`` so cascades on races
    and championships behave as on a server database.
    """
    url = database_url or DEFAULT_SQLITE_URL
    if echo is None:
        echo = env_flag("DB_ECHO")
    engine = create_engine(url, echo=echo, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    logger.debug("Engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def get_sessionmaker(engine: Engine) -> sessionmaker:
    # Rows stay readable after commit; scoring results are returned to callers.
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        future=True,
    )

import os
from pathlib import Path
from datetime import date, datetime, timezone
from typing import Optional, Union


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag such as ``DB_ECHO=1`` from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def dt_iso(value: Optional[Union[datetime, date]]) -> Optional[str]:
    """Convert a datetime or date to an ISO 8601 string, or return None.

    Naive datetimes (SQLite drops tzinfo) are treated as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return value.isoformat()

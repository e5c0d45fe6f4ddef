from __future__ import annotations

from sqlalchemy.orm import Session


class BaseRepository:
    """Holds the session every repository reads and writes through.

    Repositories only load and store rows; rule checks live in
    :mod:`fantamoto.rules` and :mod:`fantamoto.scoring`.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

"""Championship, calendar and per-championship policy configuration."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import dt_iso
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .standing import Standing


class Championship(Base):
    """A fantasy season played over one real racing calendar."""

    __tablename__ = "championships"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    calendar: Mapped[list["CalendarEntry"]] = relationship(
        back_populates="championship",
        cascade="all, delete-orphan",
        order_by="CalendarEntry.race_order",
    )
    configuration: Mapped[Optional["Configuration"]] = relationship(
        back_populates="championship",
        cascade="all, delete-orphan",
        uselist=False,
    )
    standings: Mapped[list["Standing"]] = relationship(
        back_populates="championship",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Championship(id={self.id}, name='{self.name}', year={self.year})>"

    @classmethod
    def get_by_year(cls, session: Session, year: int) -> Optional["Championship"]:
        """Retrieve the championship played in ``year``."""

        return session.scalar(select(cls).where(cls.year == year))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "year": self.year,
            "created_at": dt_iso(self.created_at),
        }


class CalendarEntry(Base):
    """One race weekend of a championship."""

    __tablename__ = "calendar"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key. Referred to as the race id throughout the engine."""

    championship_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("championships.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    """Owning championship."""

    race_order: Mapped[int] = mapped_column(Integer, nullable=False)
    """1-based round number inside the championship."""

    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    """Date of the main race."""

    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Event name, e.g. ``"Grand Prix of Qatar"``."""

    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Circuit or country label."""

    code: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    """Short event code used by the results provider (``"QAT"``)."""

    championship: Mapped["Championship"] = relationship(back_populates="calendar")

    __table_args__ = (
        UniqueConstraint(
            "championship_id", "race_order", name="uq_calendar_championship_order"
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<CalendarEntry(id={self.id}, championship_id={self.championship_id}, "
            f"race_order={self.race_order}, event_date={self.event_date})>"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "championship_id": self.championship_id,
            "race_order": self.race_order,
            "event_date": dt_iso(self.event_date),
            "name": self.name,
            "location": self.location,
            "code": self.code,
        }


class Configuration(Base):
    """Numeric policy limits applied to lineups and bets of one championship.

    A ``None`` (or zero) limit is not enforced. The row itself is mandatory:
    submissions for a championship without configuration are rejected.
    """

    __tablename__ = "configuration"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    championship_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("championships.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    """Championship the limits belong to."""

    session_timeout: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Client session timeout in minutes. Carried for the UI, unused here."""

    bets_limit_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Maximum sum of race-bet stakes per user and race."""

    bets_limit_race: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Maximum number of race bets per user and race."""

    bets_limit_driver: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Maximum number of race bets per user on one rider across the championship."""

    bets_limit_sprint_points: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    """Maximum sum of sprint-bet stakes per user and race."""

    bets_limit_sprint_race: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    """Maximum number of sprint bets per user and race."""

    bets_limit_sprint_driver: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    """Maximum number of sprint bets per user on one rider across the championship."""

    formation_limit_driver: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    """Maximum lineup appearances (either slot) of one rider per user."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    championship: Mapped["Championship"] = relationship(back_populates="configuration")

    LIMIT_FIELDS = (
        "session_timeout",
        "bets_limit_points",
        "bets_limit_race",
        "bets_limit_driver",
        "bets_limit_sprint_points",
        "bets_limit_sprint_race",
        "bets_limit_sprint_driver",
        "formation_limit_driver",
    )

    def __init__(
        self,
        *,
        championship_id: Optional[int] = None,
        championship: Optional["Championship"] = None,
        session_timeout: Optional[int] = None,
        bets_limit_points: Optional[int] = None,
        bets_limit_race: Optional[int] = None,
        bets_limit_driver: Optional[int] = None,
        bets_limit_sprint_points: Optional[int] = None,
        bets_limit_sprint_race: Optional[int] = None,
        bets_limit_sprint_driver: Optional[int] = None,
        formation_limit_driver: Optional[int] = None,
    ) -> None:
        if championship is not None:
            self.championship = championship
        if championship_id is not None:
            self.championship_id = championship_id
        self.session_timeout = session_timeout
        self.bets_limit_points = bets_limit_points
        self.bets_limit_race = bets_limit_race
        self.bets_limit_driver = bets_limit_driver
        self.bets_limit_sprint_points = bets_limit_sprint_points
        self.bets_limit_sprint_race = bets_limit_sprint_race
        self.bets_limit_sprint_driver = bets_limit_sprint_driver
        self.formation_limit_driver = formation_limit_driver

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Configuration(championship_id={self.championship_id}, "
            f"formation_limit_driver={self.formation_limit_driver})>"
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "championship_id": self.championship_id,
        }
        for field in self.LIMIT_FIELDS:
            data[field] = getattr(self, field)
        return data

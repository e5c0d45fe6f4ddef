from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import dt_iso
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .championship import Championship
    from .rider import Rider


class User(Base):
    """A player of the fantasy game."""

    def __init__(
        self,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):
        """Create a new :class:`User` record.

        Parameters
        ----------
        email : str
            Login email address. Unique across users.
        first_name : str, optional
            Given name shown next to the team name.
        last_name : str, optional
            Family name shown next to the team name.
        created_at : datetime, optional
            Explicit creation timestamp.
        """

        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        if created_at is not None:
            self.created_at = created_at

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    # relationships
    fantasy_teams: Mapped[list["FantasyTeam"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    settings: Mapped[Optional["UserSettings"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

    @property
    def display_name(self) -> str:
        """First and last name joined, falling back to the email address."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email

    @classmethod
    def get_by_email(cls, session: Session, email: str) -> Optional["User"]:
        """Retrieve a user by email address."""

        return session.scalar(select(cls).where(cls.email == email))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "created_at": dt_iso(self.created_at),
        }


class UserSettings(Base):
    """Per-user preferences. Currently only the selected championship."""

    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    championship_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("championships.id", ondelete="SET NULL"), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship(back_populates="settings")


class FantasyTeam(Base):
    """A user's team in one championship: a name and three riders."""

    __tablename__ = "fantasy_teams"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    championship_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("championships.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    team_image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    official_rider_1_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=True
    )
    official_rider_2_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=True
    )
    reserve_rider_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("riders.id"), nullable=True
    )

    user: Mapped["User"] = relationship(back_populates="fantasy_teams")
    championship: Mapped["Championship"] = relationship()
    official_rider_1: Mapped[Optional["Rider"]] = relationship(
        foreign_keys=[official_rider_1_id]
    )
    official_rider_2: Mapped[Optional["Rider"]] = relationship(
        foreign_keys=[official_rider_2_id]
    )
    reserve_rider: Mapped[Optional["Rider"]] = relationship(
        foreign_keys=[reserve_rider_id]
    )

    __table_args__ = (
        UniqueConstraint(
            "championship_id", "user_id", name="uq_fantasy_team_championship_user"
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<FantasyTeam(id={self.id}, name='{self.name}', user_id={self.user_id})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "championship_id": self.championship_id,
            "user_id": self.user_id,
            "name": self.name,
            "team_image": self.team_image,
            "official_rider_1_id": self.official_rider_1_id,
            "official_rider_2_id": self.official_rider_2_id,
            "reserve_rider_id": self.reserve_rider_id,
        }

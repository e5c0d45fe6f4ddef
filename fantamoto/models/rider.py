from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import ID_TYPE, Base


class Rider(Base):
    """A real-world rider. Reference data shared by every championship."""

    __tablename__ = "riders"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Rider(id={self.id}, number={self.number}, "
            f"name='{self.first_name} {self.last_name}')>"
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def get_by_number(cls, session: Session, number: int) -> Optional["Rider"]:
        """Retrieve a rider by race number."""

        return session.scalar(select(cls).where(cls.number == number))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "number": self.number,
        }

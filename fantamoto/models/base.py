"""Declarative base shared by every fantamoto table."""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

from ..db.metadata import metadata_obj

# SQLite only autoincrements INTEGER primary keys.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    metadata = metadata_obj

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

from luckydraw.db.metadata import metadata_obj

# BigInteger ids everywhere except SQLite, which only autoincrements INTEGER PRIMARY KEY.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


def utcnow() -> datetime:
    """Column default for timezone-aware UTC timestamps."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    metadata = metadata_obj
